"""
Menu items.

- GET operations are public (the employee view filters to available items).
- POST / PUT / DELETE require admin role.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pantry.api.v1.deps import get_db, require_admin
from pantry.core.exceptions import ConflictError, NotFound
from pantry.core.security import SessionClaims
from pantry.models.item import Item
from pantry.schemas.common import MessageResponse
from pantry.schemas.item import ItemCreate, ItemRead, ItemUpdate

router = APIRouter(prefix="/items", tags=["items"])
logger = logging.getLogger(__name__)


async def _get_item_or_404(db: AsyncSession, item_id: int) -> Item:
    item = await db.get(Item, item_id)
    if item is None:
        raise NotFound("Item not found")
    return item


async def _ensure_name_free(db: AsyncSession, name: str, exclude_id: int | None = None) -> None:
    stmt = select(Item.id).where(Item.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Item.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise ConflictError(f"Item '{name}' already exists")


async def _commit(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError("Item name already exists") from exc


@router.get("", response_model=list[ItemRead])
async def list_items(db: AsyncSession = Depends(get_db)) -> list[Item]:
    """Every item, available or not (admin view)."""
    result = await db.execute(select(Item).order_by(Item.name))
    return list(result.scalars().all())


@router.get("/available", response_model=list[ItemRead])
async def list_available_items(db: AsyncSession = Depends(get_db)) -> list[Item]:
    """Only items that can currently be ordered (employee view)."""
    result = await db.execute(select(Item).where(Item.available.is_(True)).order_by(Item.name))
    return list(result.scalars().all())


@router.post("", response_model=ItemRead, status_code=201)
async def create_item(
    body: ItemCreate,
    db: AsyncSession = Depends(get_db),
    _admin: SessionClaims = Depends(require_admin),
) -> Item:
    await _ensure_name_free(db, body.name)
    item = Item(**body.model_dump())
    db.add(item)
    await _commit(db)
    await db.refresh(item)
    logger.info("Item %s (%s) created", item.id, item.name)
    return item


@router.put("/{item_id}", response_model=ItemRead)
async def update_item(
    item_id: int,
    body: ItemUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: SessionClaims = Depends(require_admin),
) -> Item:
    """Partial update; availability toggles independently of name / price."""
    item = await _get_item_or_404(db, item_id)

    changes = body.model_dump(exclude_unset=True)
    if changes.get("available", True) is None:
        changes.pop("available")
    if changes.get("name") is None:
        changes.pop("name", None)
    if "name" in changes:
        await _ensure_name_free(db, changes["name"], exclude_id=item_id)

    for field, value in changes.items():
        setattr(item, field, value)
    await _commit(db)
    await db.refresh(item)
    return item


@router.delete("/{item_id}", response_model=MessageResponse)
async def delete_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: SessionClaims = Depends(require_admin),
) -> MessageResponse:
    """Delete an item. Orders keep their copy of its name."""
    item = await _get_item_or_404(db, item_id)
    await db.delete(item)
    await db.commit()
    logger.info("Item %s deleted", item_id)
    return MessageResponse(message="Item deleted successfully")
