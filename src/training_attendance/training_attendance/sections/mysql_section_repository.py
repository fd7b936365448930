from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Section, Student
from .repository import SectionRepository, StudentRepository

_STUDENT_COLUMNS = "s.student_id, s.reg_num, s.name, s.email, s.phone, s.department, s.attendance_percentage"


def _to_student(row: Dict[str, Any]) -> Student:
    return Student(
        student_id=str(row["student_id"]),
        reg_num=row["reg_num"],
        name=row["name"],
        email=row.get("email"),
        phone=row.get("phone"),
        department=row.get("department"),
        attendance_percentage=float(row.get("attendance_percentage") or 0.0),
    )


class MySQLSectionRepository(SectionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, section_id: str) -> Optional[Section]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT section_id, name, trainer_name, strength, capacity
                FROM sections
                WHERE section_id=%s
                """,
                (str(section_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Section(
                section_id=str(row["section_id"]),
                name=row["name"],
                trainer_name=row.get("trainer_name"),
                strength=int(row.get("strength") or 0),
                capacity=int(row.get("capacity") or 0),
            )

    def list_students(self, section_id: str) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_STUDENT_COLUMNS}
                FROM section_students ss
                JOIN students s ON s.student_id = ss.student_id
                WHERE ss.section_id=%s
                ORDER BY s.reg_num
                """,
                (str(section_id),),
            )
            return [_to_student(r) for r in fetchall(cur)]


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_STUDENT_COLUMNS} FROM students s WHERE s.student_id=%s", (str(student_id),))
            row = fetchone(cur)
            return _to_student(row) if row else None

    def update_attendance_percentage(self, student_id: str, percentage: float) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE students SET attendance_percentage=%s WHERE student_id=%s",
                (float(percentage), str(student_id)),
            )
            return cur.rowcount > 0
