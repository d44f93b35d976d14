"""Pydantic schemas for login and user management."""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, Field, field_validator

from pantry.models.user import Role
from pantry.schemas.common import APIModel


def _clean_email(v: str) -> str:
    # Emails compare case-sensitively; only surrounding whitespace is dropped.
    v = v.strip()
    if "@" not in v:
        raise ValueError("Invalid email address")
    return v


class LoginRequest(APIModel):
    email: str
    password: str = Field(validation_alias=AliasChoices("password", "secret"))

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return v.strip()


class UserCreate(APIModel):
    name: str
    email: str
    password: str = Field(validation_alias=AliasChoices("password", "secret"), min_length=1)
    role: Role
    department: str | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be empty")
        if len(v) > 200:
            raise ValueError("Name must not exceed 200 characters")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _clean_email(v)


class UserDelete(APIModel):
    user_id: int


class UserSummary(APIModel):
    """Identity as returned to callers: never includes the password hash."""

    id: int
    name: str
    email: str
    role: Role
    department: str | None = None


class UserRead(UserSummary):
    created_at: datetime | None = None
    created_by_id: int | None = None
