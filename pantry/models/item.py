"""
Item model: the shared menu employees order from.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String

from pantry.db.base import Base


class Item(Base):
    __tablename__ = "items"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    price: float | None = Column(Float, nullable=True)  # type: ignore[assignment]  # None = free
    available: bool = Column(Boolean, default=True, server_default="true", nullable=False)  # type: ignore[assignment]
    category: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
