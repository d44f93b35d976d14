"""
Auth endpoints: login, logout and the current-session profile.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from pantry.api.v1.deps import get_current_session, get_db
from pantry.core.config import settings
from pantry.core.exceptions import NotFound
from pantry.core.security import SessionClaims, issue_session_token
from pantry.models.user import Role, User
from pantry.schemas.common import MessageResponse
from pantry.schemas.user import LoginRequest, UserSummary
from pantry.services.credentials import authenticate

# Rate limiter: keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
        max_age=settings.session_max_age,
        path="/",
    )


@router.post("/login", response_model=UserSummary)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Check credentials and start a session (HttpOnly cookie)."""
    user = await authenticate(db, body.email, body.password)

    token = issue_session_token(user.id, Role(user.role))
    set_session_cookie(response, token)
    logger.info("User %s signed in as %s", user.id, user.role)
    return user


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response) -> MessageResponse:
    """Clear the session cookie."""
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserSummary)
async def read_current_user(
    claims: SessionClaims = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Return the profile behind the current session."""
    user = await db.get(User, claims.subject_id)
    if user is None:
        raise NotFound("User not found")
    return user
