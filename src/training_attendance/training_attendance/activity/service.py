from __future__ import annotations

import threading
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.constants import ACTIVITY_LOG_CAPACITY


@dataclass(frozen=True)
class ActivityEntry:
    action: str
    timestamp: datetime
    faculty_id: str
    faculty_name: str
    section_name: str
    time_slot_info: str
    attendance_percentage: float


class ReadWriteLock:
    """Many concurrent readers or one writer."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self):
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self):
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class ActivityLogService:
    """Bounded in-memory feed of recent submissions, newest first.

    Created once at startup and held by the container; oldest entries are evicted
    at capacity and nothing survives a restart.
    """

    def __init__(self, *, capacity: int = ACTIVITY_LOG_CAPACITY):
        self._entries: deque[ActivityEntry] = deque(maxlen=max(1, int(capacity)))
        self._lock = ReadWriteLock()

    def log_attendance_posted(
        self,
        *,
        faculty_id: str,
        faculty_username: str,
        faculty_name: str,
        section_name: str,
        time_slot_info: str,
        attendance_percentage: float,
        now: Optional[datetime] = None,
    ) -> ActivityEntry:
        action = (
            f"{faculty_username} - {faculty_name} posted attendance for {section_name} "
            f"for {time_slot_info} and {attendance_percentage:.1f}%"
        )
        entry = ActivityEntry(
            action=action,
            timestamp=now or datetime.now(),
            faculty_id=faculty_id,
            faculty_name=faculty_name,
            section_name=section_name,
            time_slot_info=time_slot_info,
            attendance_percentage=float(attendance_percentage),
        )
        with self._lock.write():
            self._entries.appendleft(entry)
        return entry

    def recent(self) -> list[ActivityEntry]:
        with self._lock.read():
            return list(self._entries)
