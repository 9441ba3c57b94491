# Copyright (C) 2024 Auction Platform Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Domain errors. Each carries the HTTP status and the message shown to the caller."""

from fastapi import status


class AppError(Exception):
    """Base for errors rendered as {"success": false, "message": ...}."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Bad request."

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(AppError):
    default_message = "Please fill full form."


class InvalidCredentials(AppError):
    # Shared by unknown email and wrong password so callers cannot tell them apart
    default_message = "Invalid credentials."


class UserNotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found."


class NoOTPIssued(AppError):
    default_message = "No OTP found. Please request a new one."


class OTPExpired(AppError):
    default_message = "OTP has expired. Please request a new one."


class OTPMismatch(AppError):
    default_message = "Invalid OTP. Please try again."


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Please login to access this resource."


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not allowed to access this resource."


class PaymentGatewayError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Payment gateway request failed."


class ImageUploadError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to upload profile image to cloudinary."
