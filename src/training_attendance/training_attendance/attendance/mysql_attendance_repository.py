from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus, SubmissionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, unique_violation_as
from .model import AbsenteeRow, AttendanceRecord, AttendanceSession
from .repository import AttendanceRepository

_DUPLICATE_MESSAGE = "Attendance already submitted for this time slot and date"

_SESSION_COLUMNS = (
    "session_id, faculty_id, section_id, time_slot_id, session_date, topic_taught, "
    "total_students, present_count, absent_count, attendance_percentage, submitted_at, "
    "submission_status, late_submission_reason, override_reason, overridden_by"
)

_RECORD_COLUMNS = (
    "a.attendance_id, a.session_id, a.student_id, a.time_slot_id, a.attendance_date, "
    "a.status, a.feedback, a.posted_at"
)


def _to_session(row: Dict[str, Any]) -> AttendanceSession:
    return AttendanceSession(
        session_id=str(row["session_id"]),
        faculty_id=str(row["faculty_id"]),
        section_id=str(row["section_id"]),
        time_slot_id=int(row["time_slot_id"]),
        session_date=row["session_date"],
        topic_taught=row.get("topic_taught"),
        total_students=int(row["total_students"]),
        present_count=int(row["present_count"]),
        absent_count=int(row["absent_count"]),
        attendance_percentage=float(row["attendance_percentage"]),
        submitted_at=row.get("submitted_at"),
        submission_status=SubmissionStatus(row["submission_status"]),
        late_submission_reason=row.get("late_submission_reason"),
        override_reason=row.get("override_reason"),
        overridden_by=row.get("overridden_by"),
    )


def _to_record(row: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=str(row["attendance_id"]),
        session_id=str(row["session_id"]),
        student_id=str(row["student_id"]),
        time_slot_id=int(row["time_slot_id"]),
        attendance_date=row["attendance_date"],
        status=AttendanceStatus(row["status"]),
        feedback=row.get("feedback"),
        posted_at=row["posted_at"],
    )


def _insert_session(cur, session: AttendanceSession, records: Sequence[AttendanceRecord]) -> None:
    cur.execute(
        f"""
        INSERT INTO attendance_sessions ({_SESSION_COLUMNS})
        VALUES (%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
        """,
        (
            session.session_id,
            session.faculty_id,
            session.section_id,
            session.time_slot_id,
            session.session_date,
            session.topic_taught,
            session.total_students,
            session.present_count,
            session.absent_count,
            session.attendance_percentage,
            session.submitted_at,
            session.submission_status.value,
            session.late_submission_reason,
            session.override_reason,
            session.overridden_by,
        ),
    )
    if records:
        cur.executemany(
            """
            INSERT INTO attendances
                (attendance_id, session_id, student_id, time_slot_id, attendance_date, status, feedback, posted_at)
            VALUES (%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            [
                (
                    r.attendance_id,
                    r.session_id,
                    r.student_id,
                    r.time_slot_id,
                    r.attendance_date,
                    r.status.value,
                    r.feedback,
                    r.posted_at,
                )
                for r in records
            ],
        )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_session(self, session_id: str) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE session_id=%s", (str(session_id),))
            row = fetchone(cur)
            return _to_session(row) if row else None

    def get_session_for_slot(self, time_slot_id: int, session_date: date) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE time_slot_id=%s AND session_date=%s",
                (int(time_slot_id), session_date),
            )
            row = fetchone(cur)
            return _to_session(row) if row else None

    def get_session_for_faculty_slot(
        self, faculty_id: str, time_slot_id: int, session_date: date
    ) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM attendance_sessions
                WHERE faculty_id=%s AND time_slot_id=%s AND session_date=%s
                """,
                (str(faculty_id), int(time_slot_id), session_date),
            )
            row = fetchone(cur)
            return _to_session(row) if row else None

    def list_sessions_for_slots(self, time_slot_ids: Sequence[int], session_date: date) -> Sequence[AttendanceSession]:
        ids = [int(i) for i in time_slot_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM attendance_sessions
                WHERE session_date=%s AND time_slot_id IN ({in_clause(ids)})
                """,
                (session_date, *ids),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def create_session(self, session: AttendanceSession, records: Sequence[AttendanceRecord]) -> None:
        with unique_violation_as(_DUPLICATE_MESSAGE):
            with db_cursor(self._conn_factory) as (_, cur):
                _insert_session(cur, session, records)

    def replace_session(
        self,
        old_session_id: str,
        session: AttendanceSession,
        records: Sequence[AttendanceRecord],
    ) -> None:
        with unique_violation_as(_DUPLICATE_MESSAGE):
            with db_cursor(self._conn_factory) as (_, cur):
                # Explicit child delete first; the FK cascade covers the same rows.
                cur.execute("DELETE FROM attendances WHERE session_id=%s", (str(old_session_id),))
                cur.execute("DELETE FROM attendance_sessions WHERE session_id=%s", (str(old_session_id),))
                _insert_session(cur, session, records)

    def update_late_reason(self, session_id: str, *, reason: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_sessions
                SET submission_status=%s, late_submission_reason=%s
                WHERE session_id=%s
                """,
                (SubmissionStatus.LATE.value, reason, str(session_id)),
            )
            return cur.rowcount > 0

    def list_for_student(self, student_id: str, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendances a
                WHERE a.student_id=%s AND a.attendance_date BETWEEN %s AND %s
                ORDER BY a.attendance_date, a.time_slot_id
                """,
                (str(student_id), start, end),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_time_slot(self, time_slot_id: int, attendance_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendances a
                WHERE a.time_slot_id=%s AND a.attendance_date=%s
                """,
                (int(time_slot_id), attendance_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_section(self, section_id: str, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendances a
                JOIN attendance_sessions s ON s.session_id = a.session_id
                WHERE s.section_id=%s AND a.attendance_date BETWEEN %s AND %s
                ORDER BY a.attendance_date, a.time_slot_id
                """,
                (str(section_id), start, end),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count_for_student(self, student_id: str) -> tuple[int, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS total,
                       COALESCE(SUM(CASE WHEN status='ABSENT' THEN 1 ELSE 0 END), 0) AS absences
                FROM attendances
                WHERE student_id=%s
                """,
                (str(student_id),),
            )
            row = fetchone(cur) or {}
            return int(row.get("total") or 0), int(row.get("absences") or 0)

    def list_absentees(
        self,
        *,
        attendance_date: date,
        section_id: Optional[str] = None,
        time_slot_id: Optional[int] = None,
    ) -> Sequence[AbsenteeRow]:
        sql = """
            SELECT a.student_id, st.reg_num, st.name, a.time_slot_id, a.attendance_date, a.feedback
            FROM attendances a
            JOIN students st ON st.student_id = a.student_id
            JOIN attendance_sessions s ON s.session_id = a.session_id
            WHERE a.status='ABSENT' AND a.attendance_date=%s
        """
        params: list[Any] = [attendance_date]
        if section_id:
            sql += " AND s.section_id=%s"
            params.append(str(section_id))
        if time_slot_id is not None:
            sql += " AND a.time_slot_id=%s"
            params.append(int(time_slot_id))
        sql += " ORDER BY st.reg_num, a.time_slot_id"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [
                AbsenteeRow(
                    student_id=str(r["student_id"]),
                    reg_num=r["reg_num"],
                    name=r["name"],
                    time_slot_id=int(r["time_slot_id"]),
                    attendance_date=r["attendance_date"],
                    feedback=r.get("feedback"),
                )
                for r in fetchall(cur)
            ]

    def list_in_window(self, *, start: date, end: date, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendances a
                WHERE a.attendance_date BETWEEN %s AND %s
                ORDER BY a.attendance_date, a.attendance_id
                LIMIT %s
                """,
                (start, end, int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]
