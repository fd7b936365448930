from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from ...core.enums import AttendanceStatus


class AttendanceCalculator(ABC):
    """Calculator interface (Strategy Pattern for attendance percentages)."""

    @abstractmethod
    def percentage(self, statuses: Iterable[AttendanceStatus], *, empty_value: float = 0.0) -> float:
        raise NotImplementedError
