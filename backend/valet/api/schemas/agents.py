"""Agent request/response schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from valet.core.constants import DEFAULT_MODEL_SENTINEL
from valet.llm.models import is_known_model


class AgentRequest(BaseModel):
    """Create/update payload. ``trait_ids=None`` on update keeps assignments."""

    name: str = Field(..., min_length=1, max_length=100)
    instructions: str = Field(..., min_length=1, max_length=10000)
    model: str | None = None
    trait_ids: list[uuid.UUID] | None = None

    @field_validator("name", "instructions", mode="before")
    @classmethod
    def strip_text(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("model")
    @classmethod
    def normalize_model(cls, value: str | None) -> str | None:
        if value is None or value in ("", DEFAULT_MODEL_SENTINEL):
            return None
        if not is_known_model(value):
            raise ValueError(f"Unknown model: {value}")
        return value


class AgentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    instructions: str
    model: str | None
    trait_ids: list[uuid.UUID] = []
    created_at: datetime
    updated_at: datetime


class TraitOption(BaseModel):
    id: uuid.UUID
    name: str


class RunAgentRequest(BaseModel):
    input: str = Field(default="", validate_default=True)

    @field_validator("input")
    @classmethod
    def input_required(cls, value: str) -> str:
        if not value:
            raise ValueError("Input is required")
        return value
