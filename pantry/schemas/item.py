"""Pydantic schemas for menu items."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from pantry.schemas.common import APIModel


def _clean_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Name must not be empty")
    if len(v) > 200:
        raise ValueError("Name must not exceed 200 characters")
    return v


class ItemCreate(APIModel):
    name: str
    price: float | None = Field(default=None, ge=0)
    available: bool = True
    category: str | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _clean_name(v)


class ItemUpdate(APIModel):
    """Partial update: only fields present in the body are applied."""

    name: str | None = None
    price: float | None = Field(default=None, ge=0)
    available: bool | None = None
    category: str | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str | None) -> str | None:
        return _clean_name(v) if v is not None else v


class ItemRead(APIModel):
    id: int
    name: str
    price: float | None
    available: bool
    category: str | None
    created_at: datetime | None
