"""
Provider-neutral request/response types.

Providers translate these to and from their SDK formats so callers
never touch vendor payloads directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Literal

from valet.core.constants import ToolType


@dataclass(frozen=True)
class ChatMessage:
    role: Literal["system", "user", "assistant"]
    content: str


@dataclass(frozen=True)
class ToolConfig:
    """A provider-side tool the model may call, with a usage cap."""

    type: ToolType
    max_uses: int | None = None


@dataclass
class ChatOptions:
    model: str
    max_tokens: int | None = None
    tools: list[ToolConfig] = field(default_factory=list)


@dataclass
class Usage:
    input_tokens: int = 0
    output_tokens: int = 0

    def __add__(self, other: Usage) -> Usage:
        return Usage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
        )

    def to_dict(self) -> dict[str, int]:
        return {"input_tokens": self.input_tokens, "output_tokens": self.output_tokens}


@dataclass
class Citation:
    url: str
    title: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {"url": self.url, "title": self.title}


@dataclass
class ChatResult:
    content: str
    usage: Usage = field(default_factory=Usage)
    citations: list[Citation] = field(default_factory=list)


@dataclass(frozen=True)
class ProviderModel:
    id: str
    name: str
    provider: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "provider": self.provider}


class AIProvider(ABC):
    """Interface every LLM provider implements."""

    id: str

    @abstractmethod
    async def chat(self, messages: list[ChatMessage], options: ChatOptions) -> ChatResult:
        """Run one completion, optionally with provider-side tools."""

    @abstractmethod
    async def validate_key(self, api_key: str) -> bool:
        """Return True when *api_key* is accepted by the provider."""

    @abstractmethod
    def get_models(self) -> list[ProviderModel]:
        """Models this provider serves."""
