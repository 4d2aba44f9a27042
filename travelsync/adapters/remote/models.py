"""Pydantic models for the remote selections API."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - Pydantic needs this at runtime
from typing import Any

from pydantic import BaseModel, Field


class SelectionsEnvelope(BaseModel):
    """One user's stored snapshot as returned by ``GET /selections/{user_id}``."""

    user_id: str = Field(alias="userId")
    selections: dict[str, Any] = Field(default_factory=dict)
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    model_config = {"populate_by_name": True, "extra": "ignore"}


class UpsertSelectionsRequest(BaseModel):
    """Body of ``PUT /selections/{user_id}``."""

    user_id: str = Field(alias="userId")
    selections: dict[str, Any]
    updated_at: datetime = Field(alias="updatedAt")

    model_config = {"populate_by_name": True}
