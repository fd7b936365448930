from __future__ import annotations

from datetime import datetime

from ...core.enums import SubmissionStatus
from ...timeslots.model import TimeSlot
from .base import StatusDecision, SubmissionTimingStrategy


class OnTimeStrategy(SubmissionTimingStrategy):
    """Submitted before the slot ended (or the end time could not be read)."""

    def decide(self, *, now: datetime, time_slot: TimeSlot) -> StatusDecision:
        return StatusDecision(status=SubmissionStatus.ON_TIME)
