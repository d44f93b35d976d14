"""
Order endpoints: thin HTTP layer over ``OrderService``.

- Any signed-in role may place, list, read and cancel (subject to visibility).
- PUT /orders/{id} (status change) is for dispatchers and admins.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from pantry.api.v1.deps import get_current_session, get_order_service
from pantry.core.security import SessionClaims
from pantry.models.order import Order, OrderStatus
from pantry.schemas.order import OrderCreate, OrderRead, OrderStatusUpdate
from pantry.services.orders import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("", response_model=list[OrderRead])
async def list_orders(
    status: OrderStatus | None = Query(default=None),
    claims: SessionClaims = Depends(get_current_session),
    orders: OrderService = Depends(get_order_service),
) -> list[Order]:
    """Own orders for employees; active queue (or ``?status=``) for everyone else."""
    return await orders.list_for(claims, status)


@router.post("", response_model=OrderRead, status_code=201)
async def create_order(
    body: OrderCreate,
    claims: SessionClaims = Depends(get_current_session),
    orders: OrderService = Depends(get_order_service),
) -> Order:
    return await orders.create(claims, body.items, body.note)


@router.get("/{order_id}", response_model=OrderRead)
async def get_order(
    order_id: int,
    claims: SessionClaims = Depends(get_current_session),
    orders: OrderService = Depends(get_order_service),
) -> Order:
    return await orders.get_for(order_id, claims)


@router.put("/{order_id}", response_model=OrderRead)
async def update_order_status(
    order_id: int,
    body: OrderStatusUpdate,
    claims: SessionClaims = Depends(get_current_session),
    orders: OrderService = Depends(get_order_service),
) -> Order:
    """Advance an order (accepted → in-progress → delivered)."""
    return await orders.transition(order_id, claims, body.status)


@router.post("/{order_id}/cancel", response_model=OrderRead)
async def cancel_order(
    order_id: int,
    claims: SessionClaims = Depends(get_current_session),
    orders: OrderService = Depends(get_order_service),
) -> Order:
    return await orders.cancel(order_id, claims)
