from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import parse_slot_time
from ..core.exceptions import (
    AuthorizationError,
    DuplicateSubmissionError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from ..schedules.model import SectionSchedule
from ..timeslots.model import TimeSlot
from ..timeslots.repository import TimeSlotRepository
from ..users.model import Caller
from .model import AttendanceSession
from .repository import AttendanceRepository


def slot_sort_key(time_slot: TimeSlot):
    try:
        return parse_slot_time(time_slot.start_time), time_slot.time_slot_id
    except ValueError:
        raise ValidationError(f"Time slot {time_slot.time_slot_id} has an invalid start time")


class SubmissionValidator:
    """Who may submit, for which slot, and whether a session already exists."""

    def __init__(self, attendance: AttendanceRepository, time_slots: TimeSlotRepository):
        self._attendance = attendance
        self._time_slots = time_slots

    def can_submit(self, caller: Caller, time_slot: TimeSlot) -> bool:
        if caller.is_admin:
            return True
        if time_slot.incharge_faculty_id and time_slot.incharge_faculty_id == caller.user_id:
            return True
        raise AuthorizationError("Faculty is not authorized to submit attendance for this time slot")

    def existing_session(
        self,
        time_slot: TimeSlot,
        session_date: date,
        *,
        faculty_id: Optional[str] = None,
    ) -> Optional[AttendanceSession]:
        if faculty_id:
            return self._attendance.get_session_for_faculty_slot(faculty_id, time_slot.time_slot_id, session_date)
        return self._attendance.get_session_for_slot(time_slot.time_slot_id, session_date)

    def is_already_submitted(self, time_slot: TimeSlot, session_date: date, *, faculty_id: Optional[str] = None) -> bool:
        return self.existing_session(time_slot, session_date, faculty_id=faculty_id) is not None

    def resolve_conflict(self, caller: Caller, existing: Optional[AttendanceSession]) -> Optional[AttendanceSession]:
        """Return the session an admin will replace, or raise for a faculty resubmission."""
        if existing is None:
            return None
        if caller.is_admin:
            return existing
        raise DuplicateSubmissionError("Attendance already submitted for this time slot and date")

    def ensure_slot_in_section(
        self,
        time_slot: TimeSlot,
        section_id: str,
        schedule: Optional[SectionSchedule] = None,
    ) -> None:
        if time_slot.section_id != section_id:
            raise InvalidStateError("Time slot does not belong to the specified section")
        if schedule is not None and not schedule.contains(time_slot.time_slot_id):
            raise InvalidStateError("Time slot is not part of the section's schedule")

    def resolve_batch(self, time_slot_ids: Sequence[int]) -> list[TimeSlot]:
        """Structural batch checks; returns the slots ordered by start time."""
        if not time_slot_ids:
            raise ValidationError("No time slots provided.")

        try:
            ids = list(dict.fromkeys(int(i) for i in time_slot_ids))
        except (TypeError, ValueError):
            raise ValidationError("Time slot ids must be integers.")

        slots = list(self._time_slots.get_many(ids))
        if len(slots) != len(ids):
            raise NotFoundError("One or more time slots not found.")

        if len({s.section_id for s in slots}) != 1:
            raise ValidationError("Selected time slots do not belong to the same section.")

        slots.sort(key=slot_sort_key)
        for current, following in zip(slots, slots[1:]):
            try:
                contiguous = parse_slot_time(current.end_time) == parse_slot_time(following.start_time)
            except ValueError:
                contiguous = False
            if not contiguous:
                raise ValidationError("Selected time slots are not consecutive.")

        return slots

    def ensure_none_posted(self, slots: Sequence[TimeSlot], session_date: date) -> None:
        posted = {s.time_slot_id for s in self._attendance.list_sessions_for_slots([s.time_slot_id for s in slots], session_date)}
        for slot in slots:
            if slot.time_slot_id in posted:
                raise DuplicateSubmissionError(
                    f"Attendance already posted for time slot {slot.time_slot_id} for {session_date.isoformat()}."
                )
