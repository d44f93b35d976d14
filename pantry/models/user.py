"""
User model: identities that can sign in, and the roles they hold.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from pantry.db.base import Base


class Role(str, enum.Enum):
    EMPLOYEE = "employee"
    DISPATCHER = "dispatcher"
    ADMIN = "admin"

    @property
    def home(self) -> str:
        """Path of this role's own dashboard area."""
        return f"/dashboard/{self.value}"


class User(Base):
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    email: str = Column(String(320), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    hashed_password: str = Column(String(128), nullable=False)  # type: ignore[assignment]
    role: str = Column(String(20), nullable=False)  # type: ignore[assignment]
    department: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    created_by_id: int | None = Column(Integer, nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
