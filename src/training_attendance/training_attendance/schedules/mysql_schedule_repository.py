from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import SectionSchedule
from .repository import ScheduleRepository


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_section(self, section_id: str) -> Optional[SectionSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT schedule_id, section_id, room_id, is_active
                FROM section_schedules
                WHERE section_id=%s
                """,
                (str(section_id),),
            )
            row = fetchone(cur)
            if not row:
                return None

            cur.execute("SELECT time_slot_id FROM time_slots WHERE schedule_id=%s", (row["schedule_id"],))
            slot_ids = frozenset(int(r["time_slot_id"]) for r in fetchall(cur))

            return SectionSchedule(
                schedule_id=str(row["schedule_id"]),
                section_id=str(row["section_id"]),
                room_id=row.get("room_id"),
                is_active=as_bool(row.get("is_active", 1)),
                time_slot_ids=slot_ids,
            )
