"""Trait request/response schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

# "#RRGGBB" or "oklch(L C H)"
COLOR_PATTERN = r"^(#[0-9A-Fa-f]{6}|oklch\(\d+\.?\d*\s+\d+\.?\d*\s+\d+\.?\d*\))$"


class TraitRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    context: str = Field(..., min_length=1, max_length=50000)
    color: str | None = Field(default=None, pattern=COLOR_PATTERN)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("color", mode="before")
    @classmethod
    def blank_color(cls, value: object) -> object:
        return None if value == "" else value


class TraitResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    context: str
    color: str
    updated_at: datetime
