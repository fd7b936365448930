from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import month_window, parse_client_datetime, parse_slot_time
from ..common.validators import require_non_empty
from ..core.constants import ARCHIVE_BATCH_SIZE
from ..core.exceptions import AuthorizationError, InvalidStateError, NotFoundError
from ..schedules.repository import ScheduleRepository
from ..sections.model import Section
from ..sections.repository import SectionRepository, StudentRepository
from ..timeslots.model import TimeSlot
from ..timeslots.repository import TimeSlotRepository
from ..users.model import Caller
from .model import AbsenteeRow, AttendanceRecord
from .reconciler import AttendanceReconciler, LateEntry
from .recorder import SessionRecorder
from .repository import AttendanceArchiveRepository, AttendanceRepository
from .validator import SubmissionValidator

logger = logging.getLogger(__name__)


@dataclass
class BulkAttendanceResult:
    total_processed: int = 0
    success_count: int = 0
    failure_count: int = 0
    successful_records: list[AttendanceRecord] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    session_id: Optional[str] = None


@dataclass(frozen=True)
class ArchiveResult:
    year: int
    month: int
    archived_count: int
    batches: int


class AttendanceService:
    """Use cases: mark a time slot (single, bulk, admin override), attendance queries, archival."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        archive: AttendanceArchiveRepository,
        time_slots: TimeSlotRepository,
        sections: SectionRepository,
        students: StudentRepository,
        schedules: ScheduleRepository,
        recorder: SessionRecorder,
        validator: SubmissionValidator,
        *,
        reconciler: AttendanceReconciler | None = None,
        enforce_end_time_restriction: bool = False,
        archive_batch_size: int = ARCHIVE_BATCH_SIZE,
    ):
        self._attendance = attendance
        self._archive = archive
        self._time_slots = time_slots
        self._sections = sections
        self._students = students
        self._schedules = schedules
        self._recorder = recorder
        self._validator = validator
        self._reconciler = reconciler or AttendanceReconciler()
        self._enforce_end_time = bool(enforce_end_time_restriction)
        self._archive_batch_size = max(1, int(archive_batch_size))

    def _resolve_slot_context(self, time_slot_id: int, section_id: Optional[str]) -> tuple[TimeSlot, Section]:
        time_slot = self._time_slots.get_by_id(int(time_slot_id))
        if not time_slot:
            raise NotFoundError("Time slot not found")

        section = self._sections.get_by_id(section_id or time_slot.section_id)
        if not section:
            raise NotFoundError("Section not found")

        schedule = self._schedules.get_for_section(section.section_id)
        if not schedule:
            raise NotFoundError("Section schedule not found")

        self._validator.ensure_slot_in_section(time_slot, section.section_id, schedule)
        return time_slot, section

    def _check_end_time(self, time_slot: TimeSlot, now: datetime) -> None:
        if not self._enforce_end_time:
            return
        try:
            end = parse_slot_time(time_slot.end_time)
        except ValueError:
            logger.error("Cannot parse end time %r of time slot %s", time_slot.end_time, time_slot.time_slot_id)
            return
        if now.time() > end:
            logger.warning(
                "Attendance submission after end time: now=%s end=%s slot=%s",
                now.strftime("%H:%M"),
                time_slot.end_time,
                time_slot.time_slot_id,
            )
            raise InvalidStateError("Invalid date for this time slot")

    @staticmethod
    def _as_datetime(value: str | datetime) -> datetime:
        return value if isinstance(value, datetime) else parse_client_datetime(value)

    def mark_attendance(
        self,
        caller: Caller,
        *,
        time_slot_id: int,
        date_time: str | datetime,
        absent_student_ids: Iterable[str] = (),
        late_students: Iterable[LateEntry] = (),
        section_id: Optional[str] = None,
        topic_taught: Optional[str] = None,
        now: datetime | None = None,
    ) -> list[AttendanceRecord]:
        """Single-slot submission; the first error aborts the whole call."""
        now = now or datetime.now()
        when = self._as_datetime(date_time)

        time_slot, section = self._resolve_slot_context(time_slot_id, section_id)
        self._validator.can_submit(caller, time_slot)
        self._check_end_time(time_slot, now)

        roster = self._sections.list_students(section.section_id)
        result = self._reconciler.classify(
            roster,
            absent_ids=absent_student_ids,
            late_entries=late_students,
            strict=True,
        )
        recorded = self._recorder.record(
            caller=caller,
            time_slot=time_slot,
            section=section,
            session_date=when.date(),
            rows=result.rows,
            now=now,
            topic_taught=topic_taught,
        )
        return recorded.records

    def mark_bulk_attendance(
        self,
        caller: Caller,
        *,
        time_slot_id: int,
        date_time: str | datetime,
        absent_student_ids: Sequence[str] = (),
        late_students: Sequence[LateEntry] = (),
        section_id: Optional[str] = None,
        topic_taught: Optional[str] = None,
        now: datetime | None = None,
    ) -> BulkAttendanceResult:
        """Like mark_attendance, but bad student entries are reported instead of raised."""
        return self._mark_lenient(
            caller,
            time_slot_id=time_slot_id,
            date_time=date_time,
            absent_student_ids=list(absent_student_ids),
            late_students=list(late_students),
            section_id=section_id,
            topic_taught=topic_taught,
            now=now,
        )

    def admin_override_attendance(
        self,
        caller: Caller,
        *,
        time_slot_id: int,
        date_time: str | datetime,
        override_reason: str,
        absent_student_ids: Sequence[str] = (),
        late_students: Sequence[LateEntry] = (),
        overridden_by: Optional[str] = None,
        section_id: Optional[str] = None,
        now: datetime | None = None,
    ) -> BulkAttendanceResult:
        """Replace whatever exists for (slot, date). Absent rows carry the override reason."""
        if not caller.is_admin:
            raise AuthorizationError("Only admins can override attendance")
        reason = require_non_empty(override_reason, "Override reason")

        return self._mark_lenient(
            caller,
            time_slot_id=time_slot_id,
            date_time=date_time,
            absent_student_ids=list(absent_student_ids),
            late_students=list(late_students),
            section_id=section_id,
            now=now,
            override_reason=reason,
            overridden_by=overridden_by,
        )

    def _mark_lenient(
        self,
        caller: Caller,
        *,
        time_slot_id: int,
        date_time: str | datetime,
        absent_student_ids: list[str],
        late_students: list[LateEntry],
        section_id: Optional[str],
        topic_taught: Optional[str] = None,
        now: datetime | None = None,
        override_reason: Optional[str] = None,
        overridden_by: Optional[str] = None,
    ) -> BulkAttendanceResult:
        now = now or datetime.now()
        when = self._as_datetime(date_time)

        time_slot, section = self._resolve_slot_context(time_slot_id, section_id)
        self._validator.can_submit(caller, time_slot)

        roster = self._sections.list_students(section.section_id)
        outcome = self._reconciler.classify(
            roster,
            absent_ids=absent_student_ids,
            late_entries=late_students,
            absent_feedback=override_reason,
            strict=False,
        )
        recorded = self._recorder.record(
            caller=caller,
            time_slot=time_slot,
            section=section,
            session_date=when.date(),
            rows=outcome.rows,
            now=now,
            topic_taught=topic_taught,
            override_reason=override_reason,
            overridden_by=overridden_by,
        )

        total = len(absent_student_ids) + len(late_students)
        failures = outcome.failure_count
        for error in outcome.errors:
            logger.info("Bulk attendance for slot %s: %s", time_slot.time_slot_id, error)

        return BulkAttendanceResult(
            total_processed=total,
            success_count=max(total - failures, 0),
            failure_count=failures,
            successful_records=list(recorded.records),
            errors=list(outcome.errors),
            session_id=recorded.session.session_id,
        )

    def get_student_attendance(self, student_id: str, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        if not self._students.get_by_id(student_id):
            raise NotFoundError("Student not found")
        return self._attendance.list_for_student(student_id, start=start, end=end)

    def get_time_slot_attendance(self, time_slot_id: int, attendance_date: date) -> Sequence[AttendanceRecord]:
        if not self._time_slots.get_by_id(int(time_slot_id)):
            raise NotFoundError("Time slot not found")
        return self._attendance.list_for_time_slot(int(time_slot_id), attendance_date)

    def get_absentees(
        self,
        attendance_date: date,
        *,
        section_id: Optional[str] = None,
        time_slot_id: Optional[int] = None,
    ) -> Sequence[AbsenteeRow]:
        if section_id and not self._sections.get_by_id(section_id):
            raise NotFoundError("Section not found")
        if time_slot_id is not None and not self._time_slots.get_by_id(int(time_slot_id)):
            raise NotFoundError("Time slot not found")
        return self._attendance.list_absentees(
            attendance_date=attendance_date,
            section_id=section_id,
            time_slot_id=time_slot_id,
        )

    def archive_attendance_records(self, year: int, month: int, *, now: datetime | None = None) -> ArchiveResult:
        """Move a month of detail rows into the archive, one transaction per batch."""
        now = now or datetime.now()
        start, end = month_window(year, month)
        logger.info("Archiving attendance rows from %s to %s", start, end)

        archived = 0
        batches = 0
        while True:
            batch = self._attendance.list_in_window(start=start, end=end, limit=self._archive_batch_size)
            if not batch:
                break
            moved = self._archive.move_to_archive(batch, archived_at=now)
            batches += 1
            archived += moved
            logger.info("Archived batch %s (%s rows, %s total)", batches, moved, archived)
            if moved == 0:
                # Nothing was deleted, so the next read would return the same rows.
                logger.error("Archive batch removed no rows; stopping")
                break

        logger.info("Archived %s attendance rows for %04d-%02d", archived, int(year), int(month))
        return ArchiveResult(year=int(year), month=int(month), archived_count=archived, batches=batches)
