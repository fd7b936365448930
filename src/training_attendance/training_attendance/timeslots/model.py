from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TimeSlot:
    """A fixed daily period of a section's timetable.

    ``start_time``/``end_time`` are wall-clock strings as stored (e.g. "09:00").
    Read-only for the attendance flow.
    """

    time_slot_id: int
    start_time: str
    end_time: str
    section_id: str
    incharge_faculty_id: Optional[str] = None
    is_break: bool = False
    break_description: Optional[str] = None
    room_id: Optional[str] = None
    schedule_id: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.start_time}-{self.end_time}"
