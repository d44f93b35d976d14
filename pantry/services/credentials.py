"""
Credential verification: email / password against the stored bcrypt hash.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pantry.core.exceptions import InvalidCredentials
from pantry.core.security import burn_password_check, verify_password
from pantry.models.user import User

logger = logging.getLogger(__name__)


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """Return the user owning *email* if *password* matches.

    Unknown email and wrong password raise the same ``InvalidCredentials``
    so a caller cannot tell which half was wrong.
    """
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if user is None:
        burn_password_check()
        logger.info("Login rejected: unknown email")
        raise InvalidCredentials()
    if not verify_password(password, user.hashed_password):
        logger.info("Login rejected: bad password for user %s", user.id)
        raise InvalidCredentials()
    return user
