from __future__ import annotations

from datetime import timedelta

import pytest

from src.training_attendance.training_attendance.core.enums import Role, SubmissionStatus
from src.training_attendance.training_attendance.core.exceptions import (
    AuthorizationError,
    DuplicateSubmissionError,
    NotFoundError,
    ValidationError,
)
from src.training_attendance.training_attendance.timeslots.model import TimeSlot
from src.training_attendance.training_attendance.users.model import Caller

FACULTY_ID = "fac-1"


def test_missed_sessions_only_for_ended_slots_today(world, fixed_now):
    missed = world.faculty_service.get_missed_sessions(FACULTY_ID, now=fixed_now)

    assert [m.time_slot_id for m in missed] == [1]
    assert missed[0].submission_status == SubmissionStatus.MISSED
    assert missed[0].session_date == fixed_now.date()
    assert (missed[0].start_time, missed[0].end_time) == ("09:00", "10:00")


def test_missed_session_disappears_after_submission(world, faculty, fixed_now):
    world.faculty_service.submit_attendance(faculty, time_slot_id=1, session_date=fixed_now.date(), now=fixed_now)

    assert world.faculty_service.get_missed_sessions(FACULTY_ID, now=fixed_now) == []


def test_slot_ending_at_nine_is_missed_at_five_past(world, fixed_now):
    world.time_slots._slots[7] = TimeSlot(7, "08:00", "09:00", "sec-a", incharge_faculty_id="fac-9")
    at_end = fixed_now.replace(hour=9, minute=0)
    five_past = fixed_now.replace(hour=9, minute=5)

    assert world.faculty_service.get_missed_sessions("fac-9", now=at_end) == []
    assert [m.time_slot_id for m in world.faculty_service.get_missed_sessions("fac-9", now=five_past)] == [7]

    fac9 = Caller(user_id="fac-9", role=Role.FACULTY, username="fac9")
    world.faculty_service.submit_attendance(fac9, time_slot_id=7, session_date=five_past.date(), now=five_past)

    assert world.faculty_service.get_missed_sessions("fac-9", now=five_past) == []


def test_missed_sessions_for_past_and_future_dates(world, fixed_now):
    yesterday = fixed_now.date() - timedelta(days=1)
    tomorrow = fixed_now.date() + timedelta(days=1)

    past = world.faculty_service.get_missed_sessions(FACULTY_ID, target_date=yesterday, now=fixed_now)
    future = world.faculty_service.get_missed_sessions(FACULTY_ID, target_date=tomorrow, now=fixed_now)

    # break slot 3 is never reported
    assert sorted(m.time_slot_id for m in past) == [1, 2, 4, 5]
    assert future == []


def test_missed_sessions_skip_unreadable_end_time(world, fixed_now):
    world.time_slots._slots[8] = TimeSlot(8, "08:00", "soon", "sec-a", incharge_faculty_id="fac-9")

    assert world.faculty_service.get_missed_sessions("fac-9", now=fixed_now) == []


def test_faculty_submit_twice_is_duplicate(world, faculty, fixed_now):
    world.faculty_service.submit_attendance(faculty, time_slot_id=2, session_date=fixed_now.date(), now=fixed_now)

    with pytest.raises(DuplicateSubmissionError):
        world.faculty_service.submit_attendance(faculty, time_slot_id=2, session_date=fixed_now.date(), now=fixed_now)


def test_late_reason_by_owner(world, faculty, fixed_now):
    late_now = fixed_now.replace(hour=12)
    recorded = world.faculty_service.submit_attendance(
        faculty, time_slot_id=2, session_date=late_now.date(), now=late_now
    )
    assert recorded.session.submission_status == SubmissionStatus.LATE

    updated = world.faculty_service.submit_late_reason(
        faculty, session_id=recorded.session.session_id, reason="Lab ran over"
    )

    assert updated.late_submission_reason == "Lab ran over"
    assert world.attendance.get_session(recorded.session.session_id).late_submission_reason == "Lab ran over"


def test_late_reason_marks_session_late(world, faculty, fixed_now):
    recorded = world.faculty_service.submit_attendance(
        faculty, time_slot_id=2, session_date=fixed_now.date(), now=fixed_now
    )
    assert recorded.session.submission_status == SubmissionStatus.ON_TIME

    updated = world.faculty_service.submit_late_reason(faculty, session_id=recorded.session.session_id, reason="Late")

    assert updated.submission_status == SubmissionStatus.LATE


def test_late_reason_by_another_faculty_is_denied(world, faculty, other_faculty, fixed_now):
    recorded = world.faculty_service.submit_attendance(
        faculty, time_slot_id=2, session_date=fixed_now.date(), now=fixed_now
    )

    with pytest.raises(AuthorizationError, match="not your attendance session"):
        world.faculty_service.submit_late_reason(other_faculty, session_id=recorded.session.session_id, reason="x")


def test_late_reason_validation(world, faculty):
    with pytest.raises(ValidationError):
        world.faculty_service.submit_late_reason(faculty, session_id="s-1", reason="")
    with pytest.raises(NotFoundError, match="Attendance session not found"):
        world.faculty_service.submit_late_reason(faculty, session_id="s-1", reason="Lab ran over")


def test_students_for_time_slot_are_ordered(world):
    students = world.faculty_service.get_students_for_time_slot(2)

    assert [s.reg_num for s in students] == ["R001", "R002", "R003"]


def test_students_for_unknown_section(world):
    with pytest.raises(NotFoundError):
        world.faculty_service.get_students_for_section("nope")
