from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from ..core.enums import AttendanceStatus, SubmissionStatus
from ..timeslots.model import TimeSlot
from .factory import SubmissionStatusFactory


@dataclass(frozen=True)
class SessionAggregate:
    total_students: int
    present_count: int
    absent_count: int
    attendance_percentage: float
    submission_status: SubmissionStatus
    note: Optional[str] = None


def session_percentage(present: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return present * 100.0 / total


class SessionAggregateBuilder:
    """Counts and timeliness for a session.

    LATE students count as present: the percentage means "not absent".
    """

    def __init__(self, factory: SubmissionStatusFactory | None = None):
        self._factory = factory or SubmissionStatusFactory()

    def build(self, statuses: Iterable[AttendanceStatus], *, time_slot: TimeSlot, now: datetime) -> SessionAggregate:
        statuses = list(statuses)
        total = len(statuses)
        present = sum(1 for s in statuses if s != AttendanceStatus.ABSENT)

        decision = self._factory.for_submission(now=now, time_slot=time_slot).decide(now=now, time_slot=time_slot)

        return SessionAggregate(
            total_students=total,
            present_count=present,
            absent_count=total - present,
            attendance_percentage=session_percentage(present, total),
            submission_status=decision.status,
            note=decision.note,
        )
