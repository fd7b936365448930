from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt

from ..core.constants import JWT_ALGORITHM, JWT_EXPIRY_HOURS
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .model import Caller, User


class TokenService:
    """Issue and decode HS256 bearer tokens."""

    def __init__(self, secret_key: str, *, expiry_hours: int = JWT_EXPIRY_HOURS):
        self._secret = secret_key
        self._expiry = timedelta(hours=int(expiry_hours))

    def issue(self, user: User, *, now: datetime | None = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            "sub": user.user_id,
            "username": user.username,
            "role": user.role.value,
            "iat": now,
            "exp": now + self._expiry,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def decode(self, token: str) -> Caller:
        try:
            data = jwt.decode(token, self._secret, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except jwt.InvalidTokenError:
            raise AuthenticationError("Token is invalid")

        try:
            return Caller(user_id=str(data["sub"]), role=Role(data["role"]), username=data.get("username", ""))
        except (KeyError, ValueError):
            raise AuthenticationError("Token is invalid")
