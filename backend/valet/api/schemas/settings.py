"""Settings (API keys, model preference) schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from valet.core.constants import ProviderId
from valet.llm.models import is_known_model


class ApiKeyRequest(BaseModel):
    provider: ProviderId = ProviderId.ANTHROPIC
    api_key: str = Field(..., min_length=1)

    @field_validator("api_key")
    @classmethod
    def key_format(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith("sk-"):
            raise ValueError("Invalid API key format")
        return value


class ModelPreferenceRequest(BaseModel):
    model: str

    @field_validator("model")
    @classmethod
    def known_model(cls, value: str) -> str:
        if not is_known_model(value):
            raise ValueError(f"Unknown model: {value}")
        return value
