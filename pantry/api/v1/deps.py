"""
FastAPI dependencies: session guards and database session.

Every guard re-verifies the token itself; API routes are reachable
directly and do not rely on the page gateway having run.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from pantry.core.config import settings
from pantry.core.exceptions import AuthenticationFailure, AuthorizationFailure
from pantry.core.security import SessionClaims, SessionVerificationError, verify_session_token
from pantry.db.session import async_session_factory
from pantry.services.orders import OrderService

logger = logging.getLogger(__name__)

# auto_error=False so we can fall back to the session cookie when the header is missing
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/login", auto_error=False
)


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


def get_order_service(db: AsyncSession = Depends(get_db)) -> OrderService:
    return OrderService(db)


# ── Auth dependencies ───────────────────────────────────────────────
def extract_token(request: Request, header_token: Optional[str] = None) -> str | None:
    """Header wins over cookie."""
    if header_token:
        return header_token
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or None


async def get_current_session(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
) -> SessionClaims:
    """Verify the session token from the Authorization header or cookie."""
    final_token = extract_token(request, token)
    if not final_token:
        raise AuthenticationFailure("Unauthorized")

    try:
        return verify_session_token(final_token)
    except SessionVerificationError as exc:
        logger.info("Session token rejected (%s) for %s", exc.kind, request.url.path)
        raise AuthenticationFailure("Unauthorized") from exc


async def require_admin(
    claims: SessionClaims = Depends(get_current_session),
) -> SessionClaims:
    """Only allow admin role to proceed."""
    if not claims.is_admin:
        raise AuthorizationFailure("Admin privileges required")
    return claims
