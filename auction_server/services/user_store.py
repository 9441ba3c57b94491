# Copyright (C) 2024 Auction Platform Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""SQLAlchemy-backed user store for the OTP login flow."""

from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from auction_server.models import User
from auction_server.services.otp import OTPRecord, UserRecord


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class SqlUserStore:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_by_email(self, email: str) -> UserRecord | None:
        result = await self.db.execute(
            select(User.id, User.email, User.password_hash, User.otp_code, User.otp_expires_at)
            .where(User.email == email)
        )
        row = result.one_or_none()
        if row is None:
            return None
        otp = None
        if row.otp_code and row.otp_expires_at:
            otp = OTPRecord(code=row.otp_code, expires_at=_aware(row.otp_expires_at))
        return UserRecord(id=row.id, email=row.email, password_hash=row.password_hash, otp=otp)

    async def update_otp_fields(self, user_id: int, otp: OTPRecord | None) -> None:
        """Single UPDATE of both OTP columns. Committed at once so that a clear
        done on a failing request is not rolled back with it."""
        await self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(
                otp_code=otp.code if otp else None,
                otp_expires_at=otp.expires_at if otp else None,
            )
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
