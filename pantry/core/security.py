"""
Session token issuing / verification (JWT) and password hashing (bcrypt).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from jose.utils import base64url_decode, base64url_encode
from passlib.context import CryptContext
from pydantic import ValidationError

from pantry.core.config import settings
from pantry.models.user import Role
from pantry.schemas.token import TokenPayload

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


def burn_password_check() -> None:
    """Spend the same time as a real verify when there is no hash to check."""
    pwd_context.dummy_verify()


# ── Session tokens ──────────────────────────────────────────────────
class SessionVerificationError(Exception):
    """Base for every reason a session token is rejected."""

    kind = "invalid"


class TokenMalformed(SessionVerificationError):
    kind = "malformed"


class TokenExpired(SessionVerificationError):
    kind = "expired"


class TokenBadSignature(SessionVerificationError):
    kind = "bad_signature"


@dataclass(frozen=True, slots=True)
class SessionClaims:
    """Verified identity carried by a session token."""

    subject_id: int
    role: Role
    expires_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def issue_session_token(
    subject_id: int,
    role: Role,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.SESSION_TOKEN_EXPIRE_DAYS)
    )
    return jwt.encode(
        {"sub": str(subject_id), "role": Role(role).value, "exp": expire},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )


def _require_canonical_segments(token: str) -> None:
    """Reject a token unless each segment is the exact base64url the issuer wrote.

    The decoder ignores the spare low bits of a segment's last character,
    so several spellings decode to the same bytes.
    """
    segments = token.split(".")
    if len(segments) != 3:
        raise TokenMalformed("Token must have three segments")
    for segment in segments:
        try:
            raw = segment.encode("ascii")
            canonical = base64url_encode(base64url_decode(raw))
        except ValueError as exc:
            raise TokenMalformed("Token segment is not valid base64url") from exc
        if canonical != raw:
            raise TokenMalformed("Token segment is not canonical base64url")


def verify_session_token(token: str) -> SessionClaims:
    """Validate *token* and return its claims.

    Raises ``TokenMalformed``, ``TokenExpired`` or ``TokenBadSignature``.
    Callers are expected to treat all three the same way; the split only
    exists so the reason can be logged.
    """
    _require_canonical_segments(token)

    try:
        jwt.get_unverified_claims(token)
    except JWTError as exc:
        raise TokenMalformed(str(exc)) from exc

    try:
        raw = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError as exc:
        raise TokenExpired(str(exc)) from exc
    except JWTError as exc:
        raise TokenBadSignature(str(exc)) from exc

    try:
        payload = TokenPayload.model_validate(raw)
    except ValidationError as exc:
        raise TokenMalformed("Token claims do not match the session schema") from exc

    return SessionClaims(
        subject_id=payload.sub,
        role=payload.role,
        expires_at=datetime.fromtimestamp(payload.exp, tz=timezone.utc),
    )
