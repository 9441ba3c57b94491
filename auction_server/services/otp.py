# Copyright (C) 2024 Auction Platform Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""One-time password login.

A login attempt moves through ``NoOTP -> OTPIssued -> {Consumed | Expired | Mismatched}``.
The OTP lives on the user record only: issuing a new code overwrites any pending one,
and a code is cleared once it is consumed or found expired.

Collaborators are injected so the flow runs against the database in the app and
against an in-memory store in tests:

* ``UserStore`` - lookup by email and an atomic write of the OTP columns
* ``verify_password`` / ``issue_token`` - credential check and session token
* ``clock`` - returns the current aware UTC datetime

There is no rate limiting or lockout on either step.
"""

import logging
import secrets
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Protocol

from auction_server.errors import (
    InvalidCredentials,
    NoOTPIssued,
    OTPExpired,
    OTPMismatch,
    UserNotFound,
    ValidationError,
)

logger = logging.getLogger(__name__)

OTP_MIN = 100000
OTP_MAX = 999999
DEFAULT_EXPIRE_MINUTES = 10


@dataclass(frozen=True)
class OTPRecord:
    code: str
    expires_at: datetime


@dataclass(frozen=True)
class UserRecord:
    """The slice of a user the login flow needs."""

    id: int
    email: str
    password_hash: str
    otp: OTPRecord | None = None


@dataclass(frozen=True)
class OTPIssued:
    user_id: int
    email: str
    otp: str
    expires_at: datetime


@dataclass(frozen=True)
class OTPLogin:
    user_id: int
    token: str


class UserStore(Protocol):
    async def find_by_email(self, email: str) -> UserRecord | None: ...

    async def update_otp_fields(self, user_id: int, otp: OTPRecord | None) -> None:
        """Set or clear both OTP fields in one update keyed by user id."""
        ...


Notifier = Callable[[str, str], Awaitable[None]]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_otp() -> str:
    """Uniformly random 6-digit code in [100000, 999999]."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


async def deliver_otp(notify: Notifier, email: str, otp: str) -> None:
    """Run a notifier detached from the request. Failures are logged, never raised."""
    try:
        await notify(email, otp)
    except Exception:
        logger.exception("Failed to deliver login OTP to %s", email)


class OTPLoginFlow:
    def __init__(
        self,
        store: UserStore,
        *,
        verify_password: Callable[[str, str], bool],
        issue_token: Callable[[int], str],
        clock: Callable[[], datetime] = utcnow,
        expire_minutes: int = DEFAULT_EXPIRE_MINUTES,
    ) -> None:
        self.store = store
        self.verify_password = verify_password
        self.issue_token = issue_token
        self.clock = clock
        self.ttl = timedelta(minutes=expire_minutes)

    async def request_otp(self, email: str | None, password: str | None) -> OTPIssued:
        """Check the password and issue a fresh OTP, replacing any pending one."""
        if not email or not password:
            raise ValidationError("Email and password are required.")

        user = await self.store.find_by_email(email)
        # Same error for unknown email and wrong password
        if user is None or not self.verify_password(password, user.password_hash):
            raise InvalidCredentials()

        record = OTPRecord(code=generate_otp(), expires_at=self.clock() + self.ttl)
        await self.store.update_otp_fields(user.id, record)
        return OTPIssued(user_id=user.id, email=user.email, otp=record.code, expires_at=record.expires_at)

    async def verify_login_otp(self, email: str | None, otp: str | None) -> OTPLogin:
        """Consume a pending OTP and issue a session token."""
        if not email or not otp:
            raise ValidationError("Email and OTP are required.")

        user = await self.store.find_by_email(email)
        if user is None:
            raise UserNotFound()
        if user.otp is None or not user.otp.code:
            raise NoOTPIssued()

        if self.clock() > user.otp.expires_at:
            await self.store.update_otp_fields(user.id, None)
            raise OTPExpired()

        if not secrets.compare_digest(user.otp.code.encode(), otp.encode()):
            raise OTPMismatch()

        await self.store.update_otp_fields(user.id, None)
        return OTPLogin(user_id=user.id, token=self.issue_token(user.id))
