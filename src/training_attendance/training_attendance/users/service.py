from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .otp import LoggingOtpSender, OtpSender, OtpStore
from .repository import UserRepository
from .tokens import TokenService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    """What the client gets back after a successful OTP step."""

    token: str
    user_id: str
    username: str
    full_name: str
    role: Role


class AuthService:
    """Use case: two-step login (password, then OTP) ending in a bearer token."""

    def __init__(
        self,
        users: UserRepository,
        tokens: TokenService,
        otp_store: OtpStore,
        *,
        otp_sender: OtpSender | None = None,
    ):
        self._users = users
        self._tokens = tokens
        self._otp_store = otp_store
        self._otp_sender = otp_sender or LoggingOtpSender()

    def _get_active_user(self, username: str):
        user = self._users.get_by_username(username)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid username or password")
        return user

    def start_login(self, username: str, password: str, *, now: datetime | None = None) -> None:
        username = require_non_empty(username, "Username")
        user = self._get_active_user(username)

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except (TypeError, ValueError):
            # placeholder or corrupted hashes
            ok = False

        if not ok:
            logger.info("Rejected password for %s", username)
            raise AuthenticationError("Invalid username or password")

        code = self._otp_store.issue(user.username, now=now)
        self._otp_sender.send(username=user.username, email=user.email, code=code)

    def verify_otp(self, username: str, code: str, *, now: datetime | None = None) -> LoginResult:
        username = require_non_empty(username, "Username")
        user = self._get_active_user(username)

        if not self._otp_store.verify(user.username, code, now=now):
            raise AuthenticationError("Invalid or expired OTP")

        logger.info("User %s logged in", user.username)
        return LoginResult(
            token=self._tokens.issue(user),
            user_id=user.user_id,
            username=user.username,
            full_name=user.full_name,
            role=user.role,
        )
