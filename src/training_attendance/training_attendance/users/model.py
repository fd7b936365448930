from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an admin or faculty account.

    Plain data object; no DB access here.
    """

    user_id: str
    username: str
    full_name: str
    password_hash: str
    role: Role
    email: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class Caller:
    """The authenticated identity attached to a request."""

    user_id: str
    role: Role
    username: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
