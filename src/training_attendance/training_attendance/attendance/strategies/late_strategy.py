from __future__ import annotations

from datetime import datetime

from ...core.enums import SubmissionStatus
from ...timeslots.model import TimeSlot
from .base import StatusDecision, SubmissionTimingStrategy


class LateStrategy(SubmissionTimingStrategy):
    """Submitted after the slot's end time."""

    def decide(self, *, now: datetime, time_slot: TimeSlot) -> StatusDecision:
        return StatusDecision(
            status=SubmissionStatus.LATE,
            note=f"Submitted at {now.strftime('%H:%M')} after slot end {time_slot.end_time}",
        )
