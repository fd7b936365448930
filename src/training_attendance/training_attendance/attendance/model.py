from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, SubmissionStatus


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: one faculty's submission for one time slot on one date.

    At most one exists per (time slot, date). Only the late-reason patch mutates it;
    an admin override replaces it wholesale.
    """

    session_id: str
    faculty_id: str
    section_id: str
    time_slot_id: int
    session_date: date
    total_students: int
    present_count: int
    absent_count: int
    attendance_percentage: float
    submission_status: SubmissionStatus
    submitted_at: Optional[datetime]
    topic_taught: Optional[str] = None
    late_submission_reason: Optional[str] = None
    override_reason: Optional[str] = None
    overridden_by: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's classification for a session. Immutable once written."""

    attendance_id: str
    session_id: str
    student_id: str
    time_slot_id: int
    attendance_date: date
    status: AttendanceStatus
    posted_at: datetime
    feedback: Optional[str] = None


@dataclass(frozen=True)
class ArchivedAttendanceRecord:
    attendance_id: str
    session_id: Optional[str]
    student_id: str
    time_slot_id: int
    attendance_date: date
    status: AttendanceStatus
    posted_at: datetime
    archived_at: datetime
    feedback: Optional[str] = None


@dataclass(frozen=True)
class AbsenteeRow:
    """Read-model for absentee listings (joined with the student)."""

    student_id: str
    reg_num: str
    name: str
    time_slot_id: int
    attendance_date: date
    feedback: Optional[str] = None


@dataclass(frozen=True)
class MissedSessionView:
    """Synthesized on read for a slot whose end has passed with no session. Never persisted."""

    faculty_id: str
    section_id: str
    time_slot_id: int
    session_date: date
    start_time: str
    end_time: str
    submission_status: SubmissionStatus = SubmissionStatus.MISSED
