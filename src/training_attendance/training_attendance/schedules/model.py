from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional


@dataclass(frozen=True)
class SectionSchedule:
    """A section's timetable: the set of time slots it runs in one room."""

    schedule_id: str
    section_id: str
    room_id: Optional[str] = None
    is_active: bool = True
    time_slot_ids: FrozenSet[int] = field(default_factory=frozenset)

    def contains(self, time_slot_id: int) -> bool:
        return int(time_slot_id) in self.time_slot_ids
