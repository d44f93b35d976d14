"""Pydantic schemas for orders.

Request schemas bound sizes to what the columns can store; the lifecycle
rules (non-empty items, positive quantities, note length) are enforced by
``OrderService`` so they hold for every caller, not only HTTP ones.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from pantry.core.config import settings
from pantry.models.order import ITEM_ID_MAX_LENGTH, ITEM_NAME_MAX_LENGTH, OrderStatus
from pantry.schemas.common import APIModel


class OrderLineIn(APIModel):
    item_id: str = Field(max_length=ITEM_ID_MAX_LENGTH)
    item_name: str = Field(max_length=ITEM_NAME_MAX_LENGTH)
    quantity: int = Field(le=settings.ORDER_MAX_QUANTITY)

    @field_validator("item_id", mode="before")
    @classmethod
    def _item_id(cls, v: object) -> object:
        # Menu ids are integers; accept them unquoted.
        return str(v) if isinstance(v, int) and not isinstance(v, bool) else v


class OrderCreate(APIModel):
    items: list[OrderLineIn]
    note: str | None = None


class OrderStatusUpdate(APIModel):
    status: OrderStatus


class OrderLineRead(APIModel):
    item_id: str
    item_name: str
    quantity: int


class OrderRead(APIModel):
    id: int
    requester_id: int
    requester_name: str
    department: str | None
    items: list[OrderLineRead]
    status: OrderStatus
    note: str | None
    created_at: datetime | None
    delivered_at: datetime | None
