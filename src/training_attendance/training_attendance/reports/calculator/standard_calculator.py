from __future__ import annotations

from typing import Iterable

from ...attendance.reconciler import rolling_percentage
from ...core.enums import AttendanceStatus
from .base import AttendanceCalculator


class StandardAttendanceCalculator(AttendanceCalculator):
    """Standard rule: (classes - absences) / classes; LATE counts as attended."""

    def percentage(self, statuses: Iterable[AttendanceStatus], *, empty_value: float = 0.0) -> float:
        statuses = list(statuses)
        if not statuses:
            return float(empty_value)
        absences = sum(1 for s in statuses if s == AttendanceStatus.ABSENT)
        return rolling_percentage(len(statuses), absences)
