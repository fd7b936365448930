from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..activity.service import ActivityLogService
from ..sections.model import Section
from ..sections.repository import StudentRepository
from ..timeslots.model import TimeSlot
from ..users.model import Caller
from ..users.repository import UserRepository
from .aggregate import SessionAggregateBuilder
from .model import AttendanceRecord, AttendanceSession
from .reconciler import Classification, rolling_percentage
from .repository import AttendanceRepository
from .validator import SubmissionValidator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordedSession:
    session: AttendanceSession
    records: list[AttendanceRecord]
    replaced_session_id: Optional[str] = None


class SessionRecorder:
    """Persist one reconciled session.

    Handles the duplicate/override decision, writes the session with all of its
    rows atomically, then refreshes each student's rolling percentage and the
    activity feed.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        users: UserRepository,
        validator: SubmissionValidator,
        *,
        aggregate_builder: SessionAggregateBuilder | None = None,
        activity: ActivityLogService | None = None,
    ):
        self._attendance = attendance
        self._students = students
        self._users = users
        self._validator = validator
        self._aggregates = aggregate_builder or SessionAggregateBuilder()
        self._activity = activity

    def record(
        self,
        *,
        caller: Caller,
        time_slot: TimeSlot,
        section: Section,
        session_date: date,
        rows: Sequence[Classification],
        now: datetime,
        topic_taught: Optional[str] = None,
        faculty_key: Optional[str] = None,
        override_reason: Optional[str] = None,
        overridden_by: Optional[str] = None,
    ) -> RecordedSession:
        """Write the session.

        ``faculty_key`` narrows the duplicate lookup to (faculty, slot, date);
        without it the lookup is (slot, date).
        """
        existing = self._validator.existing_session(time_slot, session_date, faculty_id=faculty_key)
        to_replace = self._validator.resolve_conflict(caller, existing)

        aggregate = self._aggregates.build([r.status for r in rows], time_slot=time_slot, now=now)
        if aggregate.note:
            logger.info("Time slot %s on %s: %s", time_slot.time_slot_id, session_date, aggregate.note)

        # Admin submissions are attributed to the slot's faculty; the admin is kept as overridden_by.
        faculty_id = caller.user_id
        if caller.is_admin:
            faculty_id = time_slot.incharge_faculty_id or caller.user_id
            if to_replace or override_reason:
                overridden_by = overridden_by or caller.user_id
        else:
            overridden_by = None

        session = AttendanceSession(
            session_id=str(uuid.uuid4()),
            faculty_id=faculty_id,
            section_id=section.section_id,
            time_slot_id=time_slot.time_slot_id,
            session_date=session_date,
            topic_taught=topic_taught,
            total_students=aggregate.total_students,
            present_count=aggregate.present_count,
            absent_count=aggregate.absent_count,
            attendance_percentage=aggregate.attendance_percentage,
            submitted_at=now,
            submission_status=aggregate.submission_status,
            override_reason=override_reason,
            overridden_by=overridden_by,
        )
        records = [
            AttendanceRecord(
                attendance_id=str(uuid.uuid4()),
                session_id=session.session_id,
                student_id=r.student_id,
                time_slot_id=time_slot.time_slot_id,
                attendance_date=session_date,
                status=r.status,
                feedback=r.feedback,
                posted_at=now,
            )
            for r in rows
        ]

        student_ids = [r.student_id for r in rows]
        if to_replace:
            # rows of the replaced session may belong to students no longer on the roster
            replaced_ids = [
                rec.student_id
                for rec in self._attendance.list_for_time_slot(to_replace.time_slot_id, to_replace.session_date)
                if rec.session_id == to_replace.session_id
            ]
            student_ids = list(dict.fromkeys(student_ids + replaced_ids))
            logger.warning(
                "Admin %s replacing session %s (time slot %s, %s)",
                caller.user_id,
                to_replace.session_id,
                time_slot.time_slot_id,
                session_date,
            )
            self._attendance.replace_session(to_replace.session_id, session, records)
        else:
            self._attendance.create_session(session, records)

        logger.info(
            "Session %s saved: slot=%s date=%s total=%s present=%s status=%s",
            session.session_id,
            time_slot.time_slot_id,
            session_date,
            session.total_students,
            session.present_count,
            session.submission_status.value,
        )

        # Session is committed; failures below are logged only.
        try:
            self.refresh_percentages(student_ids)
            self._log_activity(session=session, section=section, time_slot=time_slot, now=now)
        except Exception:
            logger.exception("Post-save updates failed for session %s", session.session_id)

        return RecordedSession(
            session=session,
            records=records,
            replaced_session_id=to_replace.session_id if to_replace else None,
        )

    def refresh_percentages(self, student_ids) -> None:
        for sid in student_ids:
            total, absences = self._attendance.count_for_student(sid)
            self._students.update_attendance_percentage(sid, rolling_percentage(total, absences))

    def _log_activity(self, *, session: AttendanceSession, section: Section, time_slot: TimeSlot, now: datetime) -> None:
        if not self._activity:
            return
        faculty = self._users.get_by_id(session.faculty_id)
        self._activity.log_attendance_posted(
            faculty_id=session.faculty_id,
            faculty_username=faculty.username if faculty else session.faculty_id,
            faculty_name=faculty.full_name if faculty else "Unknown",
            section_name=section.name,
            time_slot_info=time_slot.label,
            attendance_percentage=session.attendance_percentage,
            now=now,
        )
