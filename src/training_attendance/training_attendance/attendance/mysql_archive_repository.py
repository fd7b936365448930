from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import ArchivedAttendanceRecord, AttendanceRecord
from .repository import AttendanceArchiveRepository


class MySQLAttendanceArchiveRepository(AttendanceArchiveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def move_to_archive(self, records: Sequence[AttendanceRecord], *, archived_at: datetime) -> int:
        if not records:
            return 0
        ids = [r.attendance_id for r in records]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO attendance_archives
                    (attendance_id, session_id, student_id, time_slot_id, attendance_date,
                     status, feedback, posted_at, archived_at)
                VALUES (%s,%s,%s,%s,%s,%s,%s,%s,%s)
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
                        archived_at,
                    )
                    for r in records
                ],
            )
            cur.execute(f"DELETE FROM attendances WHERE attendance_id IN ({in_clause(ids)})", tuple(ids))
            return int(cur.rowcount)

    def list_for_student(
        self,
        student_id: str,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[ArchivedAttendanceRecord]:
        sql = """
            SELECT attendance_id, session_id, student_id, time_slot_id, attendance_date,
                   status, feedback, posted_at, archived_at
            FROM attendance_archives
            WHERE student_id=%s
        """
        params: list[Any] = [str(student_id)]
        if start:
            sql += " AND attendance_date >= %s"
            params.append(start)
        if end:
            sql += " AND attendance_date <= %s"
            params.append(end)
        sql += " ORDER BY attendance_date, time_slot_id"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [
                ArchivedAttendanceRecord(
                    attendance_id=str(r["attendance_id"]),
                    session_id=r.get("session_id"),
                    student_id=str(r["student_id"]),
                    time_slot_id=int(r["time_slot_id"]),
                    attendance_date=r["attendance_date"],
                    status=AttendanceStatus(r["status"]),
                    feedback=r.get("feedback"),
                    posted_at=r["posted_at"],
                    archived_at=r["archived_at"],
                )
                for r in fetchall(cur)
            ]
