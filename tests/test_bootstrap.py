"""Tests for the first-run admin seed."""

from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from pantry.core.config import settings
from pantry.core.security import verify_password
from pantry.main import seed_first_admin
from pantry.models.user import Role, User


@pytest.mark.asyncio
async def test_seed_creates_admin_once(session_factory, db_session):
    with patch("pantry.main.async_session_factory", session_factory):
        await seed_first_admin()
        await seed_first_admin()

    count = await db_session.scalar(
        select(func.count()).select_from(User).where(User.email == settings.FIRST_ADMIN_EMAIL)
    )
    assert count == 1

    admin = (
        await db_session.execute(select(User).where(User.email == settings.FIRST_ADMIN_EMAIL))
    ).scalar_one()
    assert admin.role == Role.ADMIN.value
    assert verify_password(settings.FIRST_ADMIN_PASSWORD, admin.hashed_password)
