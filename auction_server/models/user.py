# Copyright (C) 2024 Auction Platform Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""User model."""

import enum
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from auction_server.models.base import Base, CreatedAtMixin


class Role(str, enum.Enum):
    """Account roles. Stored as their capitalized value."""

    AUCTIONEER = "Auctioneer"
    BIDDER = "Bidder"
    ADMIN = "Admin"

    @classmethod
    def parse(cls, value: str) -> "Role | None":
        """Case-insensitive lookup; None when the value names no role."""
        wanted = value.strip().lower()
        for role in cls:
            if role.value.lower() == wanted:
                return role
        return None


class User(Base, CreatedAtMixin):
    """Platform account. Carries at most one pending login OTP."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "(otp_code IS NULL) = (otp_expires_at IS NULL)",
            name="users_otp_fields_together",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_name: Mapped[str] = mapped_column(String(64), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(String(16), default=Role.BIDDER.value, nullable=False)

    bank_account_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    bank_account_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bank_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    razorpay_account_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    paypal_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    money_spent: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    auctions_won: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    profile_image_public_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    profile_image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    # Pending login OTP; both columns are written and cleared together
    otp_code: Mapped[str | None] = mapped_column(String(6), nullable=True)
    otp_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
