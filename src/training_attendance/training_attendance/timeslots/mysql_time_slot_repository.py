from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone, in_clause
from .model import TimeSlot
from .repository import TimeSlotRepository

_COLUMNS = (
    "time_slot_id, start_time, end_time, is_break, break_description, "
    "section_id, incharge_faculty_id, room_id, schedule_id"
)


def _to_slot(row: Dict[str, Any]) -> TimeSlot:
    faculty_id = row.get("incharge_faculty_id")
    return TimeSlot(
        time_slot_id=int(row["time_slot_id"]),
        start_time=str(row["start_time"]),
        end_time=str(row["end_time"]),
        section_id=str(row["section_id"]),
        incharge_faculty_id=str(faculty_id) if faculty_id else None,
        is_break=as_bool(row.get("is_break")),
        break_description=row.get("break_description"),
        room_id=row.get("room_id"),
        schedule_id=row.get("schedule_id"),
    )


class MySQLTimeSlotRepository(TimeSlotRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, time_slot_id: int) -> Optional[TimeSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM time_slots WHERE time_slot_id=%s", (int(time_slot_id),))
            row = fetchone(cur)
            return _to_slot(row) if row else None

    def get_many(self, time_slot_ids: Sequence[int]) -> Sequence[TimeSlot]:
        ids = [int(i) for i in time_slot_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM time_slots WHERE time_slot_id IN ({in_clause(ids)})", tuple(ids))
            return [_to_slot(r) for r in fetchall(cur)]

    def list_for_faculty(self, faculty_id: str) -> Sequence[TimeSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM time_slots
                WHERE incharge_faculty_id=%s
                ORDER BY section_id, start_time
                """,
                (str(faculty_id),),
            )
            return [_to_slot(r) for r in fetchall(cur)]
