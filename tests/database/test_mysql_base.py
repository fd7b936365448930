from __future__ import annotations

from datetime import date, datetime

import pytest
from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from src.training_attendance.training_attendance.attendance.model import AttendanceSession
from src.training_attendance.training_attendance.attendance.mysql_attendance_repository import (
    MySQLAttendanceRepository,
)
from src.training_attendance.training_attendance.core.enums import SubmissionStatus
from src.training_attendance.training_attendance.core.exceptions import DuplicateSubmissionError
from src.training_attendance.training_attendance.database.mysql_base import unique_violation_as


class FailingCursor:
    def __init__(self, error: Exception):
        self._error = error
        self.closed = False

    def execute(self, sql, params=None):
        raise self._error

    def executemany(self, sql, params):
        raise self._error

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, cursor: FailingCursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeConnectionFactory:
    def __init__(self, connection: FakeConnection):
        self._connection = connection

    def connect(self):
        return self._connection


def _session() -> AttendanceSession:
    return AttendanceSession(
        session_id="s-1",
        faculty_id="fac-1",
        section_id="sec-a",
        time_slot_id=2,
        session_date=date(2024, 5, 6),
        total_students=3,
        present_count=3,
        absent_count=0,
        attendance_percentage=100.0,
        submission_status=SubmissionStatus.ON_TIME,
        submitted_at=datetime(2024, 5, 6, 10, 30),
    )


def test_duplicate_key_becomes_duplicate_submission():
    with pytest.raises(DuplicateSubmissionError, match="already submitted") as info:
        with unique_violation_as("Attendance already submitted"):
            raise IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)

    assert isinstance(info.value.__cause__, IntegrityError)


def test_other_integrity_errors_pass_through():
    original = IntegrityError(msg="Cannot add or update a child row", errno=errorcode.ER_NO_REFERENCED_ROW_2)

    with pytest.raises(IntegrityError) as info:
        with unique_violation_as("Attendance already submitted"):
            raise original

    assert info.value is original


def test_create_session_race_maps_to_duplicate_and_rolls_back():
    conn = FakeConnection(FailingCursor(IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)))
    repo = MySQLAttendanceRepository(FakeConnectionFactory(conn))

    with pytest.raises(DuplicateSubmissionError):
        repo.create_session(_session(), [])

    assert conn.rolled_back
    assert not conn.committed
    assert conn.closed


def test_replace_session_race_maps_to_duplicate():
    conn = FakeConnection(FailingCursor(IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)))
    repo = MySQLAttendanceRepository(FakeConnectionFactory(conn))

    with pytest.raises(DuplicateSubmissionError):
        repo.replace_session("s-0", _session(), [])

    assert conn.rolled_back
