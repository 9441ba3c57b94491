# Copyright (C) 2024 Auction Platform Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Authentication: JWT session tokens, password hashing, current-user dependencies."""

from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from auction_server.config import settings
from auction_server.database import get_db
from auction_server.errors import Unauthorized
from auction_server.models import User

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash a password for storage."""
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain, hashed)


def create_access_token(data: dict[str, Any]) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def issue_session_token(user_id: int) -> str:
    """Session credential bound to a user id."""
    return create_access_token({"sub": str(user_id)})


def decode_token(token: str) -> dict[str, Any] | None:
    """Decode and validate a JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        settings.cookie_name,
        token,
        max_age=settings.cookie_expire_days * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(settings.cookie_name, httponly=True, samesite="lax")


async def get_current_user_id(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> int:
    """Extract and validate user ID from JWT. Raises 401 if invalid.
    Accepts the session cookie or a Bearer header."""
    token = request.cookies.get(settings.cookie_name)
    if not token and credentials:
        token = credentials.credentials
    if not token:
        raise Unauthorized("User not authenticated.")
    payload = decode_token(token)
    if not payload:
        raise Unauthorized("Invalid or expired token.")
    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Invalid token.")
    return int(user_id)


async def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Load the authenticated user. A token for a deleted account is rejected."""
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise Unauthorized("User not authenticated.")
    return user
