from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Domain entity: an enrolled student with a cached rolling percentage."""

    student_id: str
    reg_num: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    attendance_percentage: float = 0.0


@dataclass(frozen=True)
class Section:
    """A cohort taught as one unit. The roster is read through SectionRepository."""

    section_id: str
    name: str
    trainer_name: Optional[str] = None
    strength: int = 0
    capacity: int = 0
