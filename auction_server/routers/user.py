# Copyright (C) 2024 Auction Platform Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""User API routes: registration, password and OTP login, profile, leaderboard."""

import logging

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    File,
    Form,
    HTTPException,
    Response,
    UploadFile,
    status,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from auction_server.api.schemas import (
    LeaderboardEntry,
    LoginRequest,
    UserResponse,
    VerifyOTPRequest,
)
from auction_server.auth import (
    clear_session_cookie,
    get_current_user,
    hash_password,
    issue_session_token,
    set_session_cookie,
    verify_password,
)
from auction_server.config import settings
from auction_server.database import get_db
from auction_server.errors import UserNotFound
from auction_server.models import Role, User
from auction_server.services.email import send_otp_email
from auction_server.services.images import CloudinaryImageStore, ImageStore, check_image_format
from auction_server.services.otp import Notifier, OTPLoginFlow, deliver_otp
from auction_server.services.user_store import SqlUserStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["user"])

PAYMENT_FIELDS = (
    "bank_account_number",
    "bank_account_name",
    "bank_name",
    "razorpay_account_id",
    "paypal_email",
)


async def get_otp_flow(db: AsyncSession = Depends(get_db)) -> OTPLoginFlow:
    return OTPLoginFlow(
        SqlUserStore(db),
        verify_password=verify_password,
        issue_token=issue_session_token,
        expire_minutes=settings.otp_expire_minutes,
    )


def get_otp_notifier() -> Notifier:
    return send_otp_email


def get_image_store() -> ImageStore:
    return CloudinaryImageStore()


def _login_response(response: Response, user: User, message: str) -> dict:
    token = issue_session_token(user.id)
    set_session_cookie(response, token)
    return {
        "success": True,
        "message": message,
        "user": UserResponse.from_user(user),
        "token": token,
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    response: Response,
    profile_image: UploadFile | None = File(None),
    user_name: str | None = Form(None),
    email: str | None = Form(None),
    password: str | None = Form(None),
    phone: str | None = Form(None),
    address: str | None = Form(None),
    role: str | None = Form(None),
    bank_account_number: str | None = Form(None),
    bank_account_name: str | None = Form(None),
    bank_name: str | None = Form(None),
    razorpay_account_id: str | None = Form(None),
    paypal_email: str | None = Form(None),
    images: ImageStore = Depends(get_image_store),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Create an account with a profile image and sign it in (multipart form).
    Auctioneers must supply payout details."""
    if profile_image is None:
        raise HTTPException(status_code=400, detail="Profile Image Required.")
    check_image_format(profile_image)

    if not all([user_name, email, password, phone, address, role]):
        raise HTTPException(status_code=400, detail="Please fill full form.")
    parsed_role = Role.parse(role)
    if parsed_role is None:
        raise HTTPException(status_code=400, detail="Invalid role specified.")
    if parsed_role is Role.AUCTIONEER:
        if not bank_account_name or not bank_account_number or not bank_name:
            raise HTTPException(status_code=400, detail="Please provide your full bank details.")
        if not razorpay_account_id:
            raise HTTPException(status_code=400, detail="Please provide your razorpay account ID.")
        if not paypal_email:
            raise HTTPException(status_code=400, detail="Please provide your paypal email.")

    result = await db.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise HTTPException(status_code=400, detail="User already registered.")

    hosted = await images.upload(profile_image)
    user = User(
        user_name=user_name,
        email=email,
        password_hash=hash_password(password),
        phone=phone,
        address=address,
        role=parsed_role.value,
        bank_account_number=bank_account_number,
        bank_account_name=bank_account_name,
        bank_name=bank_name,
        razorpay_account_id=razorpay_account_id,
        paypal_email=paypal_email,
        profile_image_public_id=hosted.public_id,
        profile_image_url=hosted.url,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Registered user %s as %s", user.id, user.role)
    return _login_response(response, user, "User Registered.")


@router.post("/login/request-otp")
async def request_otp(
    data: LoginRequest,
    background_tasks: BackgroundTasks,
    flow: OTPLoginFlow = Depends(get_otp_flow),
    notify: Notifier = Depends(get_otp_notifier),
) -> dict:
    """Check email and password, then issue a login OTP.

    Outside production the code is returned in the body and logged. In production
    it is emailed after the response has been sent.
    """
    issued = await flow.request_otp(data.email, data.password)
    body = {
        "success": True,
        "message": "OTP generated successfully.",
        "userId": issued.user_id,
    }
    if settings.is_production:
        background_tasks.add_task(deliver_otp, notify, issued.email, issued.otp)
    else:
        logger.info("OTP for %s: %s", issued.email, issued.otp)
        body["otp"] = issued.otp
    return body


@router.post("/login/verify-otp")
async def verify_otp(
    data: VerifyOTPRequest,
    response: Response,
    flow: OTPLoginFlow = Depends(get_otp_flow),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Exchange a pending OTP for a session cookie."""
    login = await flow.verify_login_otp(data.email, data.otp)
    user = await db.get(User, login.user_id)
    if user is None:
        # Account removed after the code was consumed
        raise UserNotFound()
    set_session_cookie(response, login.token)
    return {
        "success": True,
        "message": "Login successful!",
        "user": UserResponse.from_user(user),
        "token": login.token,
    }


@router.post("/login")
async def login(
    data: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Password-only login, kept for older clients."""
    if not data.email or not data.password:
        raise HTTPException(status_code=400, detail="Please fill full form.")
    result = await db.execute(select(User).where(User.email == data.email))
    user = result.scalar_one_or_none()
    if not user or not verify_password(data.password, user.password_hash):
        raise HTTPException(status_code=400, detail="Invalid credentials.")
    return _login_response(response, user, "Login successfully.")


@router.get("/me")
async def get_profile(user: User = Depends(get_current_user)) -> dict:
    return {"success": True, "user": UserResponse.from_user(user)}


@router.get("/logout")
async def logout(response: Response, _user: User = Depends(get_current_user)) -> dict:
    clear_session_cookie(response)
    return {"success": True, "message": "Logout Successfully."}


@router.put("/me/update")
async def update_profile(
    profile_image: UploadFile | None = File(None),
    user_name: str | None = Form(None),
    email: str | None = Form(None),
    phone: str | None = Form(None),
    address: str | None = Form(None),
    bank_account_number: str | None = Form(None),
    bank_account_name: str | None = Form(None),
    bank_name: str | None = Form(None),
    razorpay_account_id: str | None = Form(None),
    paypal_email: str | None = Form(None),
    user: User = Depends(get_current_user),
    images: ImageStore = Depends(get_image_store),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Update contact details, payout methods and the profile image (multipart form).
    Omitted fields keep their value; a new image replaces and deletes the old one."""
    if profile_image is not None:
        check_image_format(profile_image, "Invalid file format. Only PNG, JPEG, and WebP are allowed.")
    if email and email != user.email:
        result = await db.execute(select(User.id).where(User.email == email))
        if result.scalar_one_or_none() is not None:
            raise HTTPException(status_code=400, detail="Email already in use.")

    changes = {
        "user_name": user_name,
        "email": email,
        "phone": phone,
        "address": address,
        "bank_account_number": bank_account_number,
        "bank_account_name": bank_account_name,
        "bank_name": bank_name,
        "razorpay_account_id": razorpay_account_id,
        "paypal_email": paypal_email,
    }
    for field, value in changes.items():
        if value:
            setattr(user, field, value)

    old_public_id = None
    if profile_image is not None:
        hosted = await images.upload(profile_image)
        old_public_id = user.profile_image_public_id
        user.profile_image_public_id = hosted.public_id
        user.profile_image_url = hosted.url

    await db.commit()
    await db.refresh(user)
    if old_public_id:
        await images.destroy(old_public_id)
    return {"success": True, "user": UserResponse.from_user(user)}


@router.delete("/me")
async def delete_account(
    response: Response,
    user: User = Depends(get_current_user),
    images: ImageStore = Depends(get_image_store),
    db: AsyncSession = Depends(get_db),
) -> dict:
    public_id = user.profile_image_public_id
    await db.delete(user)
    await db.commit()
    logger.info("Deleted user %s", user.id)
    if public_id:
        await images.destroy(public_id)
    clear_session_cookie(response)
    return {"success": True, "message": "User deleted successfully."}


@router.get("/leaderboard")
async def leaderboard(db: AsyncSession = Depends(get_db)) -> dict:
    """Users who have spent money, biggest spenders first."""
    result = await db.execute(
        select(User).where(User.money_spent > 0).order_by(User.money_spent.desc(), User.id)
    )
    users = result.scalars().all()
    return {
        "success": True,
        "leaderboard": [LeaderboardEntry.model_validate(u) for u in users],
    }
