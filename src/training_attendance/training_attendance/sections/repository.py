from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Section, Student


class SectionRepository(Protocol):
    def get_by_id(self, section_id: str) -> Optional[Section]:
        raise NotImplementedError

    def list_students(self, section_id: str) -> Sequence[Student]:
        """Current roster, ordered by reg number."""

        raise NotImplementedError


class StudentRepository(Protocol):
    def get_by_id(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def update_attendance_percentage(self, student_id: str, percentage: float) -> bool:
        raise NotImplementedError
