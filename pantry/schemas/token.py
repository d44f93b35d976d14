"""Pydantic schema for the claims carried inside a session token."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from pantry.models.user import Role


class TokenPayload(BaseModel):
    """Shape a decoded token must have before it is trusted."""

    model_config = ConfigDict(extra="ignore")

    sub: int
    role: Role
    exp: int
