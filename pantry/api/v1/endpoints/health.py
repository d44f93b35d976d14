"""Public health check."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pantry.api.v1.deps import get_db
from pantry.core.config import settings
from pantry.schemas.common import APIModel

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


class HealthResponse(APIModel):
    status: str
    db: bool
    version: str


@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Database connectivity."""
    db_ok = True
    try:
        await db.execute(select(1))
    except SQLAlchemyError as e:
        logger.error("Health check DB failure: %s", e)
        db_ok = False
    return HealthResponse(status="ok" if db_ok else "degraded", db=db_ok, version=settings.VERSION)
