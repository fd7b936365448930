from __future__ import annotations

from typing import Any, Iterable

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_list(value: Any, field_name: str) -> list:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{field_name} must be a list")
    return list(value)


def unique_ids(values: Iterable[Any]) -> list[str]:
    """Stringify ids and drop duplicates, keeping first-seen order."""
    seen: set[str] = set()
    out: list[str] = []
    for v in values:
        s = str(v).strip()
        if s and s not in seen:
            seen.add(s)
            out.append(s)
    return out
