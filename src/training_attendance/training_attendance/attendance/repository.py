from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AbsenteeRow, ArchivedAttendanceRecord, AttendanceRecord, AttendanceSession


class AttendanceRepository(Protocol):
    def get_session(self, session_id: str) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_session_for_slot(self, time_slot_id: int, session_date: date) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_session_for_faculty_slot(
        self, faculty_id: str, time_slot_id: int, session_date: date
    ) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def list_sessions_for_slots(self, time_slot_ids: Sequence[int], session_date: date) -> Sequence[AttendanceSession]:
        raise NotImplementedError

    def create_session(self, session: AttendanceSession, records: Sequence[AttendanceRecord]) -> None:
        """Insert the session and all of its rows in one transaction.

        Raises DuplicateSubmissionError when (time slot, date) is already taken.
        """

        raise NotImplementedError

    def replace_session(
        self,
        old_session_id: str,
        session: AttendanceSession,
        records: Sequence[AttendanceRecord],
    ) -> None:
        """Admin override: delete the old session with its rows and insert the new ones, atomically."""

        raise NotImplementedError

    def update_late_reason(self, session_id: str, *, reason: str) -> bool:
        raise NotImplementedError

    def list_for_student(self, student_id: str, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_time_slot(self, time_slot_id: int, attendance_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_section(self, section_id: str, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count_for_student(self, student_id: str) -> tuple[int, int]:
        """(total rows, ABSENT rows) over every active row of the student."""

        raise NotImplementedError

    def list_absentees(
        self,
        *,
        attendance_date: date,
        section_id: Optional[str] = None,
        time_slot_id: Optional[int] = None,
    ) -> Sequence[AbsenteeRow]:
        """ABSENT rows for the date, optionally narrowed; ordered by reg number."""

        raise NotImplementedError

    def list_in_window(self, *, start: date, end: date, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError


class AttendanceArchiveRepository(Protocol):
    def move_to_archive(self, records: Sequence[AttendanceRecord], *, archived_at: datetime) -> int:
        """Copy rows to the archive and delete the originals in one transaction."""

        raise NotImplementedError

    def list_for_student(
        self,
        student_id: str,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[ArchivedAttendanceRecord]:
        raise NotImplementedError
