"""
User management: admin only.

Passwords are hashed on the way in and never leave the service.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pantry.api.v1.deps import get_db, require_admin
from pantry.core.exceptions import ConflictError, NotFound, ValidationError
from pantry.core.security import SessionClaims, get_password_hash
from pantry.models.user import User
from pantry.schemas.common import MessageResponse
from pantry.schemas.user import UserCreate, UserDelete, UserRead, UserSummary

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)


@router.get("", response_model=list[UserRead])
async def list_users(
    db: AsyncSession = Depends(get_db),
    _admin: SessionClaims = Depends(require_admin),
) -> list[User]:
    """All users, newest first."""
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    return list(result.scalars().all())


@router.post("", response_model=UserSummary, status_code=201)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    admin: SessionClaims = Depends(require_admin),
) -> User:
    """Create a new user account."""
    existing = await db.execute(select(User).where(User.email == body.email))
    if existing.scalar_one_or_none():
        raise ConflictError("User with this email already exists")

    user = User(
        name=body.name,
        email=body.email,
        hashed_password=get_password_hash(body.password),
        role=body.role.value,
        department=body.department or None,
        created_by_id=admin.subject_id,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError("User with this email already exists") from exc
    await db.refresh(user)
    logger.info("User %s (%s) created by admin %s", user.id, user.role, admin.subject_id)
    return user


@router.delete("", response_model=MessageResponse)
async def delete_user(
    body: UserDelete,
    db: AsyncSession = Depends(get_db),
    admin: SessionClaims = Depends(require_admin),
) -> MessageResponse:
    """Delete a user. Their historical orders are kept."""
    if body.user_id == admin.subject_id:
        raise ValidationError("Cannot delete your own account")

    user = await db.get(User, body.user_id)
    if user is None:
        raise NotFound("User not found")

    await db.delete(user)
    await db.commit()
    logger.info("User %s deleted by admin %s", body.user_id, admin.subject_id)
    return MessageResponse(message="User deleted successfully")
