# Copyright (C) 2024 Auction Platform Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Admin API - user listing and role management. Requires an Admin account."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from auction_server.api.schemas import RoleUpdate, UserResponse
from auction_server.auth import get_current_user
from auction_server.database import get_db
from auction_server.errors import Forbidden
from auction_server.models import Role, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user/admin", tags=["admin"])


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Dependency: require admin user."""
    if Role.parse(user.role) is not Role.ADMIN:
        raise Forbidden(f"{user.role} not allowed to access this resource.")
    return user


@router.get("/users")
async def list_users(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """List all users. Admin only."""
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    return {"success": True, "users": [UserResponse.from_user(u) for u in result.scalars().all()]}


@router.get("/user/{user_id}")
async def get_user(
    user_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found.")
    return {"success": True, "user": UserResponse.from_user(user)}


@router.put("/user/{user_id}")
async def update_user_role(
    user_id: int,
    data: RoleUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Change a user's role. The role name is matched case-insensitively."""
    if not data.role:
        raise HTTPException(status_code=400, detail="Role is required.")
    role = Role.parse(data.role)
    if role is None:
        raise HTTPException(status_code=400, detail="Invalid role specified.")
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found.")
    user.role = role.value
    await db.commit()
    await db.refresh(user)
    logger.info("Admin %s set role of user %s to %s", admin.id, user.id, role.value)
    return {
        "success": True,
        "message": f"User role updated to {role.value} successfully.",
        "user": UserResponse.from_user(user),
    }
