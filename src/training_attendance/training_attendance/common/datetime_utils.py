from __future__ import annotations

import re
from datetime import date, datetime, time

from ..core.exceptions import ValidationError

_SLOT_TIME_RE = re.compile(r"^(\d{1,2})(?::(\d{2}))?$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def parse_slot_time(value: str | None) -> time:
    """Parse a time slot wall-clock string.

    Accepts 24-hour ``HH:mm``, ``H:mm`` or a bare hour ``H``; surrounding
    whitespace is ignored. Seconds are not accepted.
    """
    if value is None:
        raise ValueError("Time string is missing")

    m = _SLOT_TIME_RE.match(value.strip())
    if not m:
        raise ValueError(f"Invalid time string: {value!r}")

    hour = int(m.group(1))
    minute = int(m.group(2) or 0)
    return time(hour=hour, minute=minute)


def parse_client_datetime(value: str) -> datetime:
    """Parse the timestamp sent with a mark request.

    Clients send either ISO-8601 or the ``d/M/yyyy, h:mm:ss AM`` form.
    """
    v = (value or "").strip()
    if not v:
        raise ValidationError("dateTime is required")

    try:
        return datetime.fromisoformat(v)
    except ValueError:
        pass

    try:
        return datetime.strptime(v.upper(), "%d/%m/%Y, %I:%M:%S %p")
    except ValueError:
        raise ValidationError(f"Invalid dateTime: {value!r}")


def month_window(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month (both inclusive)."""
    if not 1 <= int(month) <= 12:
        raise ValidationError("Month must be between 1 and 12")

    start = date(int(year), int(month), 1)
    if int(month) == 12:
        next_start = date(int(year) + 1, 1, 1)
    else:
        next_start = date(int(year), int(month) + 1, 1)
    return start, date.fromordinal(next_start.toordinal() - 1)
