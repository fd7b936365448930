from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import SubmissionStatus
from ...timeslots.model import TimeSlot


@dataclass(frozen=True)
class StatusDecision:
    status: SubmissionStatus
    note: Optional[str] = None


class SubmissionTimingStrategy(ABC):
    """Strategy Pattern: encapsulate how a submission's timeliness is decided."""

    @abstractmethod
    def decide(self, *, now: datetime, time_slot: TimeSlot) -> StatusDecision:
        raise NotImplementedError
