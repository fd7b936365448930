from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller roles used for authorization."""

    ADMIN = "admin"
    FACULTY = "faculty"


class AttendanceStatus(str, Enum):
    """Per-student classification stored on each detail row."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"


class SubmissionStatus(str, Enum):
    """Timeliness of a session submission.

    MISSED is never persisted; it only appears on synthesized read views.
    """

    ON_TIME = "ON_TIME"
    LATE = "LATE"
    MISSED = "MISSED"


class SlotPostingStatus(str, Enum):
    """Whether a batchable time slot already has a session for the day."""

    POSTED = "POSTED"
    PENDING = "PENDING"
