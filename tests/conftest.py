from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.training_attendance.training_attendance.activity.service import ActivityLogService
from src.training_attendance.training_attendance.attendance.faculty_service import FacultyAttendanceService
from src.training_attendance.training_attendance.attendance.model import (
    AbsenteeRow,
    ArchivedAttendanceRecord,
    AttendanceRecord,
    AttendanceSession,
)
from src.training_attendance.training_attendance.attendance.recorder import SessionRecorder
from src.training_attendance.training_attendance.attendance.service import AttendanceService
from src.training_attendance.training_attendance.attendance.validator import SubmissionValidator
from src.training_attendance.training_attendance.batch.service import BatchAttendanceService
from src.training_attendance.training_attendance.core.enums import AttendanceStatus, Role, SubmissionStatus
from src.training_attendance.training_attendance.core.exceptions import DuplicateSubmissionError
from src.training_attendance.training_attendance.reports.service import AttendanceReportService
from src.training_attendance.training_attendance.schedules.model import SectionSchedule
from src.training_attendance.training_attendance.sections.model import Section, Student
from src.training_attendance.training_attendance.timeslots.model import TimeSlot
from src.training_attendance.training_attendance.users.model import Caller, User

FACULTY_ID = "fac-1"
OTHER_FACULTY_ID = "fac-2"
ADMIN_ID = "adm-1"
SECTION_ID = "sec-a"
OTHER_SECTION_ID = "sec-b"


class InMemoryUsers:
    def __init__(self, users: list[User]):
        self._by_id = {u.user_id: u for u in users}

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self._by_id.get(user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self._by_id.values() if u.username == username), None)


class InMemoryStudents:
    def __init__(self, students: list[Student]):
        self.by_id = {s.student_id: s for s in students}

    def get_by_id(self, student_id: str) -> Optional[Student]:
        return self.by_id.get(student_id)

    def update_attendance_percentage(self, student_id: str, percentage: float) -> bool:
        if student_id not in self.by_id:
            return False
        self.by_id[student_id] = replace(self.by_id[student_id], attendance_percentage=percentage)
        return True


class InMemorySections:
    def __init__(self, sections: list[Section], students: InMemoryStudents, rosters: dict[str, list[str]]):
        self._sections = {s.section_id: s for s in sections}
        self._students = students
        self._rosters = rosters

    def get_by_id(self, section_id: str) -> Optional[Section]:
        return self._sections.get(section_id)

    def list_students(self, section_id: str):
        roster = [self._students.by_id[sid] for sid in self._rosters.get(section_id, [])]
        return sorted(roster, key=lambda s: s.reg_num)


class InMemoryTimeSlots:
    def __init__(self, slots: list[TimeSlot]):
        self._slots = {s.time_slot_id: s for s in slots}

    def get_by_id(self, time_slot_id: int) -> Optional[TimeSlot]:
        return self._slots.get(time_slot_id)

    def get_many(self, time_slot_ids):
        return [self._slots[i] for i in time_slot_ids if i in self._slots]

    def list_for_faculty(self, faculty_id: str):
        return [s for s in self._slots.values() if s.incharge_faculty_id == faculty_id]


class InMemorySchedules:
    def __init__(self, schedules: list[SectionSchedule]):
        self._by_section = {s.section_id: s for s in schedules}

    def get_for_section(self, section_id: str) -> Optional[SectionSchedule]:
        return self._by_section.get(section_id)


class InMemoryAttendance:
    def __init__(self, students: InMemoryStudents):
        self._students = students
        self.sessions: dict[str, AttendanceSession] = {}
        self.records: list[AttendanceRecord] = []

    def get_session(self, session_id: str) -> Optional[AttendanceSession]:
        return self.sessions.get(session_id)

    def get_session_for_slot(self, time_slot_id: int, session_date: date) -> Optional[AttendanceSession]:
        return next(
            (s for s in self.sessions.values() if s.time_slot_id == time_slot_id and s.session_date == session_date),
            None,
        )

    def get_session_for_faculty_slot(self, faculty_id: str, time_slot_id: int, session_date: date):
        s = self.get_session_for_slot(time_slot_id, session_date)
        return s if s and s.faculty_id == faculty_id else None

    def list_sessions_for_slots(self, time_slot_ids, session_date: date):
        return [s for s in self.sessions.values() if s.time_slot_id in set(time_slot_ids) and s.session_date == session_date]

    def create_session(self, session: AttendanceSession, records) -> None:
        if self.get_session_for_slot(session.time_slot_id, session.session_date):
            raise DuplicateSubmissionError("Attendance already submitted for this time slot and date")
        self.sessions[session.session_id] = session
        self.records.extend(records)

    def replace_session(self, old_session_id: str, session: AttendanceSession, records) -> None:
        self.sessions.pop(old_session_id, None)
        self.records = [r for r in self.records if r.session_id != old_session_id]
        self.create_session(session, records)

    def update_late_reason(self, session_id: str, *, reason: str) -> bool:
        if session_id not in self.sessions:
            return False
        self.sessions[session_id] = replace(
            self.sessions[session_id],
            submission_status=SubmissionStatus.LATE,
            late_submission_reason=reason,
        )
        return True

    def records_for_session(self, session_id: str) -> list[AttendanceRecord]:
        return [r for r in self.records if r.session_id == session_id]

    def list_for_student(self, student_id: str, *, start: date, end: date):
        return [r for r in self.records if r.student_id == student_id and start <= r.attendance_date <= end]

    def list_for_time_slot(self, time_slot_id: int, attendance_date: date):
        return [r for r in self.records if r.time_slot_id == time_slot_id and r.attendance_date == attendance_date]

    def list_for_section(self, section_id: str, *, start: date, end: date):
        ids = {s.session_id for s in self.sessions.values() if s.section_id == section_id}
        return [r for r in self.records if r.session_id in ids and start <= r.attendance_date <= end]

    def count_for_student(self, student_id: str) -> tuple[int, int]:
        rows = [r for r in self.records if r.student_id == student_id]
        return len(rows), sum(1 for r in rows if r.status == AttendanceStatus.ABSENT)

    def list_absentees(self, *, attendance_date: date, section_id=None, time_slot_id=None):
        out = []
        for r in self.records:
            if r.status != AttendanceStatus.ABSENT or r.attendance_date != attendance_date:
                continue
            if time_slot_id is not None and r.time_slot_id != time_slot_id:
                continue
            if section_id and self.sessions[r.session_id].section_id != section_id:
                continue
            student = self._students.by_id[r.student_id]
            out.append(
                AbsenteeRow(
                    student_id=r.student_id,
                    reg_num=student.reg_num,
                    name=student.name,
                    time_slot_id=r.time_slot_id,
                    attendance_date=r.attendance_date,
                    feedback=r.feedback,
                )
            )
        return sorted(out, key=lambda a: a.reg_num)

    def list_in_window(self, *, start: date, end: date, limit: int):
        rows = [r for r in self.records if start <= r.attendance_date <= end]
        rows.sort(key=lambda r: (r.attendance_date, r.time_slot_id))
        return rows[:limit]


class InMemoryArchive:
    def __init__(self, attendance: InMemoryAttendance):
        self._attendance = attendance
        self.rows: list[ArchivedAttendanceRecord] = []

    def move_to_archive(self, records, *, archived_at: datetime) -> int:
        ids = {r.attendance_id for r in records}
        moving = [r for r in self._attendance.records if r.attendance_id in ids]
        self._attendance.records = [r for r in self._attendance.records if r.attendance_id not in ids]
        self.rows.extend(
            ArchivedAttendanceRecord(
                attendance_id=r.attendance_id,
                session_id=r.session_id,
                student_id=r.student_id,
                time_slot_id=r.time_slot_id,
                attendance_date=r.attendance_date,
                status=r.status,
                posted_at=r.posted_at,
                archived_at=archived_at,
                feedback=r.feedback,
            )
            for r in moving
        )
        return len(moving)

    def list_for_student(self, student_id: str, *, start=None, end=None):
        return [
            r
            for r in self.rows
            if r.student_id == student_id
            and (start is None or r.attendance_date >= start)
            and (end is None or r.attendance_date <= end)
        ]


@dataclass
class World:
    users: InMemoryUsers
    students: InMemoryStudents
    sections: InMemorySections
    time_slots: InMemoryTimeSlots
    schedules: InMemorySchedules
    attendance: InMemoryAttendance
    archive: InMemoryArchive
    activity: ActivityLogService
    validator: SubmissionValidator
    recorder: SessionRecorder
    attendance_service: AttendanceService
    faculty_service: FacultyAttendanceService
    batch_service: BatchAttendanceService
    report_service: AttendanceReportService

    def student(self, student_id: str) -> Student:
        return self.students.by_id[student_id]


def build_world(*, enforce_end_time_restriction: bool = False) -> World:
    users = InMemoryUsers(
        [
            User(user_id=FACULTY_ID, username="jdoe", full_name="Jane Doe", password_hash="x", role=Role.FACULTY),
            User(user_id=OTHER_FACULTY_ID, username="rroe", full_name="Rick Roe", password_hash="x", role=Role.FACULTY),
            User(user_id=ADMIN_ID, username="admin", full_name="Admin", password_hash="x", role=Role.ADMIN),
        ]
    )
    students = InMemoryStudents(
        [
            Student(student_id="st-1", reg_num="R001", name="Asha"),
            Student(student_id="st-2", reg_num="R002", name="Bilal"),
            Student(student_id="st-3", reg_num="R003", name="Chen"),
            Student(student_id="st-9", reg_num="R009", name="Dara"),
        ]
    )
    sections = InMemorySections(
        [Section(section_id=SECTION_ID, name="CSE-A", strength=3), Section(section_id=OTHER_SECTION_ID, name="ECE-B")],
        students,
        {SECTION_ID: ["st-3", "st-1", "st-2"], OTHER_SECTION_ID: ["st-9"]},
    )
    time_slots = InMemoryTimeSlots(
        [
            TimeSlot(1, "09:00", "10:00", SECTION_ID, incharge_faculty_id=FACULTY_ID),
            TimeSlot(2, "10:00", "11:00", SECTION_ID, incharge_faculty_id=FACULTY_ID),
            TimeSlot(3, "11:00", "11:15", SECTION_ID, incharge_faculty_id=FACULTY_ID, is_break=True),
            TimeSlot(4, "11:15", "12:15", SECTION_ID, incharge_faculty_id=FACULTY_ID),
            TimeSlot(5, "10:00", "11:00", OTHER_SECTION_ID, incharge_faculty_id=FACULTY_ID),
            TimeSlot(6, "13:00", "14:00", SECTION_ID, incharge_faculty_id=OTHER_FACULTY_ID),
        ]
    )
    schedules = InMemorySchedules(
        [
            SectionSchedule("sch-a", SECTION_ID, time_slot_ids=frozenset({1, 2, 3, 4, 6})),
            SectionSchedule("sch-b", OTHER_SECTION_ID, time_slot_ids=frozenset({5})),
        ]
    )
    attendance = InMemoryAttendance(students)
    archive = InMemoryArchive(attendance)
    activity = ActivityLogService(capacity=5)

    validator = SubmissionValidator(attendance, time_slots)
    recorder = SessionRecorder(attendance, students, users, validator, activity=activity)

    return World(
        users=users,
        students=students,
        sections=sections,
        time_slots=time_slots,
        schedules=schedules,
        attendance=attendance,
        archive=archive,
        activity=activity,
        validator=validator,
        recorder=recorder,
        attendance_service=AttendanceService(
            attendance,
            archive,
            time_slots,
            sections,
            students,
            schedules,
            recorder,
            validator,
            enforce_end_time_restriction=enforce_end_time_restriction,
            archive_batch_size=2,
        ),
        faculty_service=FacultyAttendanceService(attendance, time_slots, sections, recorder, validator),
        batch_service=BatchAttendanceService(attendance, time_slots, sections, recorder, validator),
        report_service=AttendanceReportService(attendance, archive, students, sections),
    )


@pytest.fixture
def fixed_now() -> datetime:
    # Monday, during slot 2
    return datetime(2024, 5, 6, 10, 30)


@pytest.fixture
def world() -> World:
    return build_world()


@pytest.fixture
def make_world():
    return build_world


@pytest.fixture
def faculty() -> Caller:
    return Caller(user_id=FACULTY_ID, role=Role.FACULTY, username="jdoe")


@pytest.fixture
def other_faculty() -> Caller:
    return Caller(user_id=OTHER_FACULTY_ID, role=Role.FACULTY, username="rroe")


@pytest.fixture
def admin() -> Caller:
    return Caller(user_id=ADMIN_ID, role=Role.ADMIN, username="admin")
