"""
Order lifecycle: creation, role-scoped queries and status transitions.

    pending ──> accepted ──> in-progress ──> delivered
       └───────────┴─────────────┴─────────> cancelled

``delivered`` and ``cancelled`` are terminal. Status writes are a
compare-and-set on the status the caller last saw, so two dispatchers
racing on the same order cannot silently overwrite each other.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pantry.core.config import settings
from pantry.core.exceptions import (AuthorizationFailure, ConflictError, NotFound,
                                    StorageError, ValidationError)
from pantry.core.security import SessionClaims
from pantry.models.order import (ITEM_ID_MAX_LENGTH, ITEM_NAME_MAX_LENGTH, TERMINAL_STATUSES,
                                 Order, OrderItem, OrderStatus)
from pantry.models.user import Role, User
from pantry.schemas.order import OrderLineIn

logger = logging.getLogger(__name__)

FULFILLER_ROLES = frozenset({Role.DISPATCHER, Role.ADMIN})

_FORWARD: dict[OrderStatus, OrderStatus] = {
    OrderStatus.PENDING: OrderStatus.ACCEPTED,
    OrderStatus.ACCEPTED: OrderStatus.IN_PROGRESS,
    OrderStatus.IN_PROGRESS: OrderStatus.DELIVERED,
}


def allowed_successors(status: OrderStatus) -> frozenset[OrderStatus]:
    """Statuses an order in *status* may legally move to."""
    if status in TERMINAL_STATUSES:
        return frozenset()
    return frozenset({_FORWARD[status], OrderStatus.CANCELLED})


class OrderService:
    def __init__(
        self,
        session: AsyncSession,
        *,
        strict_transitions: bool | None = None,
        list_limit: int | None = None,
        note_max_length: int | None = None,
        max_quantity: int | None = None,
    ) -> None:
        self._session = session
        self.strict_transitions = (
            settings.ORDER_STRICT_TRANSITIONS if strict_transitions is None else strict_transitions
        )
        self.list_limit = settings.ORDER_LIST_LIMIT if list_limit is None else list_limit
        self.note_max_length = (
            settings.ORDER_NOTE_MAX_LENGTH if note_max_length is None else note_max_length
        )
        self.max_quantity = settings.ORDER_MAX_QUANTITY if max_quantity is None else max_quantity

    # ── Create ──────────────────────────────────────────────────────
    async def create(
        self,
        caller: SessionClaims,
        items: Sequence[OrderLineIn],
        note: str | None = None,
    ) -> Order:
        """Place a new ``pending`` order on behalf of *caller*.

        The requester's name and department are copied onto the order so
        later edits to (or deletion of) the user do not rewrite history.
        """
        if not items:
            raise ValidationError("Order must contain at least one item")
        for line in items:
            if line.quantity < 1:
                raise ValidationError("Quantity must be at least 1")
            if line.quantity > self.max_quantity:
                raise ValidationError(f"Quantity must not exceed {self.max_quantity}")
            if not line.item_name.strip():
                raise ValidationError("Item name must not be empty")
            if len(line.item_name.strip()) > ITEM_NAME_MAX_LENGTH:
                raise ValidationError(
                    f"Item name must not exceed {ITEM_NAME_MAX_LENGTH} characters"
                )
            if len(line.item_id) > ITEM_ID_MAX_LENGTH:
                raise ValidationError(f"Item id must not exceed {ITEM_ID_MAX_LENGTH} characters")

        # Length counts the note as sent; it is stored unchanged.
        if note is not None and len(note) > self.note_max_length:
            raise ValidationError(f"Note must not exceed {self.note_max_length} characters")
        if note is not None and not note.strip():
            note = None

        requester = await self._session.get(User, caller.subject_id)
        if requester is None:
            raise NotFound("User not found")

        order = Order(
            requester_id=requester.id,
            requester_name=requester.name,
            department=requester.department,
            status=OrderStatus.PENDING.value,
            note=note,
            items=[
                OrderItem(
                    position=pos,
                    item_id=line.item_id,
                    item_name=line.item_name.strip(),
                    quantity=line.quantity,
                )
                for pos, line in enumerate(items)
            ],
        )
        self._session.add(order)
        try:
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise StorageError("Could not save order") from exc

        logger.info(
            "Order %s placed by user %s (%d line(s))", order.id, requester.id, len(order.items)
        )
        return order

    # ── Read ────────────────────────────────────────────────────────
    async def list_for(
        self,
        caller: SessionClaims,
        status: OrderStatus | None = None,
    ) -> list[Order]:
        """Orders *caller* may see, newest first.

        Employees see only their own orders. Dispatchers and admins see
        the exact *status* when given, otherwise the active queue (every
        order that is not delivered or cancelled).
        """
        stmt = select(Order)
        if caller.role is Role.EMPLOYEE:
            stmt = stmt.where(Order.requester_id == caller.subject_id)
        elif caller.role in FULFILLER_ROLES:
            if status is not None:
                stmt = stmt.where(Order.status == OrderStatus(status).value)
            else:
                stmt = stmt.where(Order.status.not_in([s.value for s in TERMINAL_STATUSES]))
        else:
            return []

        stmt = stmt.order_by(Order.created_at.desc(), Order.id.desc()).limit(self.list_limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_for(self, order_id: int, caller: SessionClaims) -> Order:
        """Single order under the same visibility rule as ``list_for``."""
        order = await self._session.get(Order, order_id)
        if order is None:
            raise NotFound("Order not found")
        if caller.role in FULFILLER_ROLES:
            return order
        if caller.role is Role.EMPLOYEE and order.requester_id == caller.subject_id:
            return order
        raise NotFound("Order not found")

    # ── Transitions ─────────────────────────────────────────────────
    async def transition(
        self,
        order_id: int,
        caller: SessionClaims,
        new_status: OrderStatus,
    ) -> Order:
        """Move an order to *new_status* (dispatchers and admins only).

        Re-applying the current status is a no-op, so a repeated
        ``delivered`` keeps the original delivery time. In strict mode
        only the edges drawn in the module docstring are accepted; in
        permissive mode a non-terminal order may jump to any status.
        """
        if caller.role not in FULFILLER_ROLES:
            raise AuthorizationFailure("Only dispatchers and admins can update order status")

        order = await self._session.get(Order, order_id)
        if order is None:
            raise NotFound("Order not found")
        return await self._move(order, OrderStatus(new_status), strict=self.strict_transitions)

    async def cancel(self, order_id: int, caller: SessionClaims) -> Order:
        """Cancel an order.

        Employees may cancel their own order while it is still pending;
        dispatchers and admins may cancel any order that is not terminal.
        """
        order = await self.get_for(order_id, caller)
        current = OrderStatus(order.status)
        if current is OrderStatus.CANCELLED:
            return order
        if caller.role is Role.EMPLOYEE and current is not OrderStatus.PENDING:
            raise ValidationError("Only pending orders can be cancelled")
        return await self._move(order, OrderStatus.CANCELLED, strict=True)

    async def _move(self, order: Order, new_status: OrderStatus, *, strict: bool) -> Order:
        order_id = order.id
        current = OrderStatus(order.status)
        if new_status is current:
            return order
        if current.is_terminal:
            raise ValidationError(f"Order is already {current.value}")
        if strict and new_status not in allowed_successors(current):
            raise ValidationError(
                f"Cannot move order from '{current.value}' to '{new_status.value}'"
            )

        values: dict[str, object] = {"status": new_status.value}
        if new_status is OrderStatus.DELIVERED:
            # First delivery wins; never overwritten or cleared.
            values["delivered_at"] = func.coalesce(
                Order.delivered_at, datetime.now(timezone.utc)
            )

        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.status == current.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(stmt)
            swapped = result.rowcount == 1
            if swapped:
                await self._session.commit()
            else:
                await self._session.rollback()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise StorageError("Could not update order") from exc

        if not swapped:
            logger.warning(
                "Order %s changed concurrently; %s -> %s rejected",
                order_id,
                current.value,
                new_status.value,
            )
            raise ConflictError("Order status was changed by someone else; reload and retry")

        await self._session.refresh(order, attribute_names=["status", "delivered_at"])
        logger.info("Order %s: %s -> %s", order_id, current.value, new_status.value)
        return order
