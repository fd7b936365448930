from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

from ..core.constants import OTP_LENGTH, OTP_TTL_SECONDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _PendingOtp:
    code: str
    expires_at: datetime


class OtpStore:
    """Process-wide one-time-password map.

    Created once at startup and held by the container. Codes are single use and
    expire after ``ttl_seconds``. Contents do not survive a restart.
    """

    def __init__(self, *, ttl_seconds: int = OTP_TTL_SECONDS, length: int = OTP_LENGTH):
        self._ttl = timedelta(seconds=int(ttl_seconds))
        self._length = int(length)
        self._codes: dict[str, _PendingOtp] = {}
        self._lock = threading.Lock()

    def issue(self, username: str, *, now: datetime | None = None) -> str:
        now = now or datetime.now()
        code = "".join(secrets.choice("0123456789") for _ in range(self._length))
        with self._lock:
            self._codes[username] = _PendingOtp(code=code, expires_at=now + self._ttl)
        return code

    def verify(self, username: str, code: str, *, now: datetime | None = None) -> bool:
        now = now or datetime.now()
        with self._lock:
            pending = self._codes.get(username)
            if not pending:
                return False
            if now > pending.expires_at:
                del self._codes[username]
                return False
            if not secrets.compare_digest(pending.code, (code or "").strip()):
                return False
            del self._codes[username]
            return True


class OtpSender(Protocol):
    def send(self, *, username: str, email: str | None, code: str) -> None:
        raise NotImplementedError


class LoggingOtpSender(OtpSender):
    """Default sender: mail delivery lives outside this service, so just record the hand-off."""

    def send(self, *, username: str, email: str | None, code: str) -> None:
        logger.info("OTP issued for %s (delivery to %s)", username, email or "<no email>")
