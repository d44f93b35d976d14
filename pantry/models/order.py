"""
Order & OrderItem models: fulfillment requests and their line items.

``requester_id`` and ``item_id`` are weak references: no foreign keys,
so deleting a user or a menu item leaves historical orders intact.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from pantry.db.base import Base


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in-progress"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

ITEM_ID_MAX_LENGTH = 64
ITEM_NAME_MAX_LENGTH = 200


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (Index("ix_orders_status_created", "status", "created_at"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    requester_id: int = Column(Integer, nullable=False, index=True)  # type: ignore[assignment]
    requester_name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    department: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default=OrderStatus.PENDING.value,
        server_default=OrderStatus.PENDING.value,
    )
    note: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    delivered_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
        lazy="selectin",
    )


class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (CheckConstraint("quantity >= 1", name="ck_order_items_quantity"),)

    id: int = Column(Integer, primary_key=True)  # type: ignore[assignment]
    order_id: int = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)  # type: ignore[assignment]
    position: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    item_id: str = Column(String(ITEM_ID_MAX_LENGTH), nullable=False)  # type: ignore[assignment]
    item_name: str = Column(String(ITEM_NAME_MAX_LENGTH), nullable=False)  # type: ignore[assignment]
    quantity: int = Column(Integer, nullable=False)  # type: ignore[assignment]

    order = relationship("Order", back_populates="items")
