from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import TimeSlot


class TimeSlotRepository(Protocol):
    def get_by_id(self, time_slot_id: int) -> Optional[TimeSlot]:
        raise NotImplementedError

    def get_many(self, time_slot_ids: Sequence[int]) -> Sequence[TimeSlot]:
        """Slots that exist among the given ids; missing ids are simply absent."""

        raise NotImplementedError

    def list_for_faculty(self, faculty_id: str) -> Sequence[TimeSlot]:
        raise NotImplementedError
