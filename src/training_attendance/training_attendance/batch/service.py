from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..attendance.reconciler import AttendanceReconciler
from ..attendance.recorder import SessionRecorder
from ..attendance.repository import AttendanceRepository
from ..attendance.validator import SubmissionValidator, slot_sort_key
from ..core.constants import BATCH_ABSENT_FEEDBACK
from ..core.enums import SlotPostingStatus
from ..core.exceptions import DomainError, InvalidStateError, NotFoundError
from ..sections.repository import SectionRepository
from ..timeslots.model import TimeSlot
from ..timeslots.repository import TimeSlotRepository
from ..users.model import Caller

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchableSlot:
    time_slot: TimeSlot
    status: SlotPostingStatus


@dataclass(frozen=True)
class BatchableSection:
    section_id: str
    section_name: str
    slots: list[BatchableSlot]


@dataclass(frozen=True)
class BatchValidation:
    valid: bool
    message: str
    reason: Optional[str] = None
    section_id: Optional[str] = None
    time_slot_ids: list[int] = field(default_factory=list)


@dataclass
class SlotResult:
    time_slot_id: int
    status: str
    error: Optional[str] = None
    session_id: Optional[str] = None
    student_errors: list[str] = field(default_factory=list)


@dataclass
class BatchSubmissionResult:
    success: bool
    message: str
    results: list[SlotResult] = field(default_factory=list)


class BatchAttendanceService:
    """Submit once for several back-to-back slots of one section."""

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

    def get_batchable_time_slots(self, faculty_id: str, target_date: date) -> list[BatchableSection]:
        """Faculty's non-break slots grouped by section, ordered by start time, marked POSTED/PENDING."""
        slots = [s for s in self._time_slots.list_for_faculty(faculty_id) if not s.is_break]
        posted = {
            s.time_slot_id
            for s in self._attendance.list_sessions_for_slots([s.time_slot_id for s in slots], target_date)
        }

        grouped: dict[str, list[TimeSlot]] = {}
        for slot in slots:
            grouped.setdefault(slot.section_id, []).append(slot)

        out: list[BatchableSection] = []
        for section_id, group in grouped.items():
            section = self._sections.get_by_id(section_id)
            group.sort(key=slot_sort_key)
            out.append(
                BatchableSection(
                    section_id=section_id,
                    section_name=section.name if section else section_id,
                    slots=[
                        BatchableSlot(
                            time_slot=s,
                            status=SlotPostingStatus.POSTED if s.time_slot_id in posted else SlotPostingStatus.PENDING,
                        )
                        for s in group
                    ],
                )
            )
        out.sort(key=lambda g: g.section_name)
        return out

    def validate_batch_time_slots(self, time_slot_ids: Sequence[int], *, now: datetime | None = None) -> BatchValidation:
        """No writes. Duplicates are checked against today."""
        today = (now or datetime.now()).date()
        try:
            slots = self._validator.resolve_batch(time_slot_ids)
            self._validator.ensure_none_posted(slots, today)
        except DomainError as e:
            return BatchValidation(valid=False, message="Invalid batch selection.", reason=str(e))

        return BatchValidation(
            valid=True,
            message="Selected time slots are valid for batch submission.",
            section_id=slots[0].section_id,
            time_slot_ids=[s.time_slot_id for s in slots],
        )

    def submit_batch_attendance(
        self,
        caller: Caller,
        *,
        section_id: str,
        session_date: date,
        time_slot_ids: Sequence[int],
        attendance_records: Iterable[tuple[str, bool]],
        topic_taught: Optional[str] = None,
        now: datetime | None = None,
    ) -> BatchSubmissionResult:
        """Structural problems abort the call; per-slot problems are reported per slot.

        Each slot is checked for an existing session on ``session_date``.
        """
        now = now or datetime.now()
        presence = [(str(sid), bool(present)) for sid, present in attendance_records]

        section = self._sections.get_by_id(section_id)
        if not section:
            raise NotFoundError("Section not found")
        slots = self._validator.resolve_batch(time_slot_ids)
        if slots[0].section_id != section.section_id:
            raise InvalidStateError("Time slot does not belong to the specified section")

        roster = self._sections.list_students(section.section_id)
        results: list[SlotResult] = []
        for slot in slots:
            try:
                self._validator.can_submit(caller, slot)
                outcome = self._reconciler.classify_presence(
                    roster,
                    presence,
                    absent_feedback=BATCH_ABSENT_FEEDBACK,
                    strict=False,
                )
                recorded = self._recorder.record(
                    caller=caller,
                    time_slot=slot,
                    section=section,
                    session_date=session_date,
                    rows=outcome.rows,
                    now=now,
                    topic_taught=topic_taught,
                )
            except DomainError as e:
                logger.info("Batch slot %s rejected: %s", slot.time_slot_id, e)
                results.append(SlotResult(time_slot_id=slot.time_slot_id, status="error", error=str(e)))
                continue

            results.append(
                SlotResult(
                    time_slot_id=slot.time_slot_id,
                    status="success",
                    session_id=recorded.session.session_id,
                    student_errors=list(outcome.errors),
                )
            )

        all_ok = all(r.status == "success" and not r.student_errors for r in results)
        message = (
            "Batch attendance submitted successfully for all time slots."
            if all_ok
            else "Batch attendance submitted with some errors."
        )
        return BatchSubmissionResult(success=all_ok, message=message, results=results)
