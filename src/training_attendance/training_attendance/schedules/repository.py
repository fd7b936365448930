from __future__ import annotations

from typing import Optional, Protocol

from .model import SectionSchedule


class ScheduleRepository(Protocol):
    def get_for_section(self, section_id: str) -> Optional[SectionSchedule]:
        """The section's schedule with its time-slot id set loaded."""

        raise NotImplementedError
