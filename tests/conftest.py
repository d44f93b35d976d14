"""
Shared test fixtures for the Pantry Desk test suite.

Every test gets its own in-memory aiosqlite database; the app's ``get_db``
dependency is pointed at it for the lifetime of the HTTP client.
"""

import os
import sys
from typing import AsyncGenerator, Awaitable, Callable

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-0123456789abcdef0123456789abcdef"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from pantry.api.v1.deps import get_db
from pantry.core.security import get_password_hash, issue_session_token
from pantry.db.base import Base
from pantry.main import app
from pantry.models.user import Role, User

DEFAULT_PASSWORD = "secret1"


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ── Users & sessions ────────────────────────────────────────────────
UserFactory = Callable[..., Awaitable[User]]


@pytest.fixture
def make_user(db_session: AsyncSession) -> UserFactory:
    """Insert a user straight into the database."""
    counter = {"n": 0}

    async def _make(
        role: Role = Role.EMPLOYEE,
        *,
        name: str | None = None,
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
        department: str | None = "Engineering",
    ) -> User:
        counter["n"] += 1
        user = User(
            name=name or f"{role.value.title()} {counter['n']}",
            email=email or f"{role.value}{counter['n']}@office.test",
            hashed_password=get_password_hash(password),
            role=role.value,
            department=department,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


def auth_headers(user: User) -> dict[str, str]:
    token = issue_session_token(user.id, Role(user.role))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin(make_user) -> User:
    return await make_user(Role.ADMIN, name="Asha Admin", email="admin@office.test", department=None)


@pytest.fixture
async def dispatcher(make_user) -> User:
    return await make_user(Role.DISPATCHER, name="Dev Dispatcher", email="peon@office.test")


@pytest.fixture
async def employee(make_user) -> User:
    return await make_user(Role.EMPLOYEE, name="Rahul", email="rahul@x.com", department="Sales")


@pytest.fixture
def headers_for() -> Callable[[User], dict[str, str]]:
    """Bearer header carrying a fresh session token for *user*."""
    return auth_headers
