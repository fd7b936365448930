from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import parse_slot_time
from ..common.validators import require_non_empty
from ..core.exceptions import AuthorizationError, NotFoundError
from ..sections.model import Student
from ..sections.repository import SectionRepository
from ..timeslots.repository import TimeSlotRepository
from ..users.model import Caller
from .model import AttendanceSession, MissedSessionView
from .reconciler import AttendanceReconciler, LateEntry
from .recorder import RecordedSession, SessionRecorder
from .repository import AttendanceRepository
from .validator import SubmissionValidator

logger = logging.getLogger(__name__)


class FacultyAttendanceService:
    """Use cases for the faculty console: submit, explain lateness, see missed slots."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        time_slots: TimeSlotRepository,
        sections: SectionRepository,
        recorder: SessionRecorder,
        validator: SubmissionValidator,
        *,
        reconciler: AttendanceReconciler | None = None,
    ):
        self._attendance = attendance
        self._time_slots = time_slots
        self._sections = sections
        self._recorder = recorder
        self._validator = validator
        self._reconciler = reconciler or AttendanceReconciler()

    def submit_attendance(
        self,
        caller: Caller,
        *,
        time_slot_id: int,
        session_date: date,
        absent_student_ids: Iterable[str] = (),
        late_students: Iterable[LateEntry] = (),
        section_id: Optional[str] = None,
        topic_taught: Optional[str] = None,
        now: datetime | None = None,
    ) -> RecordedSession:
        now = now or datetime.now()

        time_slot = self._time_slots.get_by_id(int(time_slot_id))
        if not time_slot:
            raise NotFoundError("Time slot not found")
        section = self._sections.get_by_id(section_id or time_slot.section_id)
        if not section:
            raise NotFoundError("Section not found")

        self._validator.ensure_slot_in_section(time_slot, section.section_id)
        self._validator.can_submit(caller, time_slot)

        roster = self._sections.list_students(section.section_id)
        result = self._reconciler.classify(
            roster,
            absent_ids=absent_student_ids,
            late_entries=late_students,
            strict=True,
        )
        return self._recorder.record(
            caller=caller,
            time_slot=time_slot,
            section=section,
            session_date=session_date,
            rows=result.rows,
            now=now,
            topic_taught=topic_taught,
            faculty_key=None if caller.is_admin else caller.user_id,
        )

    def submit_late_reason(self, caller: Caller, *, session_id: str, reason: str) -> AttendanceSession:
        reason = require_non_empty(reason, "Late submission reason")

        session = self._attendance.get_session(session_id)
        if not session:
            raise NotFoundError("Attendance session not found")
        if not caller.is_admin and session.faculty_id != caller.user_id:
            raise AuthorizationError("Access denied: not your attendance session")

        if not self._attendance.update_late_reason(session_id, reason=reason):
            raise NotFoundError("Attendance session not found")
        logger.info("Late reason recorded for session %s by %s", session_id, caller.user_id)
        return self._attendance.get_session(session_id) or session

    def get_missed_sessions(
        self,
        faculty_id: str,
        *,
        target_date: date | None = None,
        now: datetime | None = None,
    ) -> list[MissedSessionView]:
        """Derived view: non-break slots of the faculty that ended without a session."""
        now = now or datetime.now()
        target_date = target_date or now.date()
        if target_date > now.date():
            return []

        missed: list[MissedSessionView] = []
        for slot in self._time_slots.list_for_faculty(faculty_id):
            if slot.is_break:
                continue
            if target_date == now.date():
                try:
                    end = parse_slot_time(slot.end_time)
                except ValueError:
                    logger.error("Skipping time slot %s with unreadable end time %r", slot.time_slot_id, slot.end_time)
                    continue
                if now.time() <= end:
                    continue
            if self._validator.is_already_submitted(slot, target_date, faculty_id=faculty_id):
                continue
            missed.append(
                MissedSessionView(
                    faculty_id=faculty_id,
                    section_id=slot.section_id,
                    time_slot_id=slot.time_slot_id,
                    session_date=target_date,
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                )
            )
        return missed

    def get_students_for_section(self, section_id: str) -> Sequence[Student]:
        if not self._sections.get_by_id(section_id):
            raise NotFoundError("Section not found")
        return self._sections.list_students(section_id)

    def get_students_for_time_slot(self, time_slot_id: int) -> Sequence[Student]:
        time_slot = self._time_slots.get_by_id(int(time_slot_id))
        if not time_slot:
            raise NotFoundError("Time slot not found")
        return self._sections.list_students(time_slot.section_id)
