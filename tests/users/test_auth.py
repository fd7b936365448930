from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import pytest
from werkzeug.security import generate_password_hash

from src.training_attendance.training_attendance.core.enums import Role
from src.training_attendance.training_attendance.core.exceptions import AuthenticationError
from src.training_attendance.training_attendance.users.model import User
from src.training_attendance.training_attendance.users.otp import LoggingOtpSender, OtpStore
from src.training_attendance.training_attendance.users.service import AuthService
from src.training_attendance.training_attendance.users.tokens import TokenService


class InMemoryUsers:
    def __init__(self, *users: User):
        self._by_username = {u.username: u for u in users}

    def get_by_username(self, username: str):
        return self._by_username.get(username)

    def get_by_id(self, user_id: str):
        return next((u for u in self._by_username.values() if u.user_id == user_id), None)


class RecordingSender:
    def __init__(self):
        self.codes: dict[str, str] = {}

    def send(self, *, username: str, email, code: str) -> None:
        self.codes[username] = code


def _faculty(**overrides) -> User:
    data = dict(
        user_id="fac-1",
        username="jdoe",
        full_name="Jane Doe",
        password_hash=generate_password_hash("s3cret"),
        role=Role.FACULTY,
        email="jdoe@example.edu",
    )
    data.update(overrides)
    return User(**data)


def _auth(*users: User):
    sender = RecordingSender()
    tokens = TokenService("test-secret", expiry_hours=1)
    svc = AuthService(InMemoryUsers(*users), tokens, OtpStore(ttl_seconds=300), otp_sender=sender)
    return svc, sender, tokens


def test_login_with_otp_issues_token():
    svc, sender, tokens = _auth(_faculty())
    now = datetime(2024, 5, 6, 9, 0)

    svc.start_login("jdoe", "s3cret", now=now)
    code = sender.codes["jdoe"]
    assert len(code) == 6 and code.isdigit()

    result = svc.verify_otp("jdoe", code, now=now + timedelta(minutes=1))

    assert result.user_id == "fac-1"
    assert result.role == Role.FACULTY
    caller = tokens.decode(result.token)
    assert caller.user_id == "fac-1"
    assert caller.role == Role.FACULTY
    assert not caller.is_admin


def test_wrong_password_raises():
    svc, sender, _ = _auth(_faculty())

    with pytest.raises(AuthenticationError):
        svc.start_login("jdoe", "wrong")
    assert sender.codes == {}


def test_unknown_or_inactive_user_raises():
    svc, _, _ = _auth(_faculty(is_active=False))

    with pytest.raises(AuthenticationError):
        svc.start_login("jdoe", "s3cret")
    with pytest.raises(AuthenticationError):
        svc.start_login("nobody", "s3cret")


def test_corrupted_hash_is_rejected():
    svc, _, _ = _auth(_faculty(password_hash="not-a-hash"))

    with pytest.raises(AuthenticationError):
        svc.start_login("jdoe", "s3cret")


def test_expired_otp_is_rejected():
    svc, sender, _ = _auth(_faculty())
    now = datetime(2024, 5, 6, 9, 0)
    svc.start_login("jdoe", "s3cret", now=now)

    with pytest.raises(AuthenticationError, match="Invalid or expired OTP"):
        svc.verify_otp("jdoe", sender.codes["jdoe"], now=now + timedelta(minutes=6))


def test_otp_is_single_use():
    svc, sender, _ = _auth(_faculty())
    now = datetime(2024, 5, 6, 9, 0)
    svc.start_login("jdoe", "s3cret", now=now)
    code = sender.codes["jdoe"]

    svc.verify_otp("jdoe", code, now=now)
    with pytest.raises(AuthenticationError):
        svc.verify_otp("jdoe", code, now=now)


def test_expired_or_foreign_token_is_rejected():
    tokens = TokenService("test-secret", expiry_hours=1)
    stale = tokens.issue(_faculty(), now=datetime.now(timezone.utc) - timedelta(hours=2))
    foreign = TokenService("other-secret").issue(_faculty())

    with pytest.raises(AuthenticationError, match="expired"):
        tokens.decode(stale)
    with pytest.raises(AuthenticationError, match="invalid"):
        tokens.decode(foreign)


def test_logging_sender_never_writes_the_code(caplog):
    caplog.set_level(logging.DEBUG)

    LoggingOtpSender().send(username="jdoe", email="jdoe@example.edu", code="482913")

    assert "jdoe" in caplog.text
    assert "482913" not in caplog.text
