# Copyright (C) 2024 Auction Platform Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pydantic schemas for API request/response.

Request fields are optional so missing values reach the handlers, which report
them with the platform's own messages instead of a generic validation error.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


# Auth
class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class VerifyOTPRequest(BaseModel):
    email: str | None = None
    otp: str | None = None


class RoleUpdate(BaseModel):
    role: str | None = None


class PaymentMethods(BaseModel):
    bank_account_number: str | None = None
    bank_account_name: str | None = None
    bank_name: str | None = None
    razorpay_account_id: str | None = None
    paypal_email: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ProfileImage(BaseModel):
    public_id: str
    url: str

    @classmethod
    def from_user(cls, user) -> "ProfileImage | None":
        if not user.profile_image_public_id or not user.profile_image_url:
            return None
        return cls(public_id=user.profile_image_public_id, url=user.profile_image_url)


class UserResponse(BaseModel):
    """Public view of a user. Never carries the password hash or OTP."""

    id: int
    user_name: str
    email: str
    phone: str
    address: str
    role: str
    money_spent: int
    auctions_won: int
    created_at: datetime | None = None
    payment_methods: PaymentMethods
    profile_image: ProfileImage | None = None

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        return cls(
            id=user.id,
            user_name=user.user_name,
            email=user.email,
            phone=user.phone,
            address=user.address,
            role=user.role,
            money_spent=user.money_spent,
            auctions_won=user.auctions_won,
            created_at=user.created_at,
            payment_methods=PaymentMethods.model_validate(user),
            profile_image=ProfileImage.from_user(user),
        )


class LeaderboardEntry(BaseModel):
    id: int
    user_name: str
    money_spent: int
    auctions_won: int
    profile_image_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


# Payment
class CreateOrderRequest(BaseModel):
    amount: float | None = None


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str | None = None
    razorpay_payment_id: str | None = None
    razorpay_signature: str | None = None
    auction_id: int | None = None
