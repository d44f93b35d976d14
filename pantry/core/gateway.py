"""
Access gateway: session check and role routing for page requests.

Failures never produce a 401 here: a missing or bad session redirects to
the login page, and a request into another role's dashboard redirects to
the caller's own. API routes are passed through untouched; their
dependencies answer 401/403 for programmatic callers.
"""

from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from pantry.core.config import settings
from pantry.core.security import SessionClaims, SessionVerificationError, verify_session_token
from pantry.models.user import Role

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
PUBLIC_PREFIXES = (LOGIN_PATH, "/static", "/favicon.ico", "/docs", "/redoc")
ROOT_PATHS = frozenset({"/", "/dashboard", "/dashboard/"})


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


def is_public(path: str) -> bool:
    if _under(path, settings.API_V1_PREFIX):
        return True
    return any(_under(path, prefix) for prefix in PUBLIC_PREFIXES)


def resolve_redirect(path: str, claims: SessionClaims | None) -> str | None:
    """Where a page request for *path* should be sent, or ``None`` to serve it."""
    if claims is None:
        return LOGIN_PATH
    if path in ROOT_PATHS:
        return claims.role.home
    for role in Role:
        if role is not claims.role and _under(path, role.home):
            return claims.role.home
    return None


class AccessGatewayMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if is_public(path):
            return await call_next(request)

        claims: SessionClaims | None = None
        token = request.cookies.get(settings.SESSION_COOKIE_NAME)
        if token:
            try:
                claims = verify_session_token(token)
            except SessionVerificationError as exc:
                logger.info("Gateway rejected session (%s) for %s", exc.kind, path)

        target = resolve_redirect(path, claims)
        if target is not None:
            return RedirectResponse(target, status_code=307)

        request.state.session = claims
        return await call_next(request)
