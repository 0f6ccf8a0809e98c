"""
LangSmith tracing for provider calls.

``setup_tracing()`` exports the LangSmith environment once at startup;
``traceable_step`` wraps an async provider call so it shows up as a run
in LangSmith when tracing is on and is a direct call when it is off.

Usage:
    from valet.core.tracing import setup_tracing, traceable_step

    setup_tracing()

    @traceable_step(name="anthropic.chat", run_type="llm", provider="anthropic")
    async def chat(self, messages, options):
        ...
"""

from __future__ import annotations

import functools
import os
from typing import Any, Callable

from langsmith import traceable

from valet.core.config import settings
from valet.core.logging import get_logger

logger = get_logger(__name__)

_tracing_enabled = False


def setup_tracing() -> bool:
    """Enable LangSmith when configured. Returns whether tracing is on."""
    global _tracing_enabled

    if not (settings.LANGSMITH_TRACING and settings.LANGSMITH_API_KEY):
        logger.info("LangSmith tracing disabled")
        _tracing_enabled = False
        return False

    os.environ.update(
        {
            "LANGSMITH_API_KEY": settings.LANGSMITH_API_KEY,
            "LANGSMITH_ENDPOINT": settings.LANGSMITH_ENDPOINT,
            "LANGSMITH_PROJECT": settings.LANGSMITH_PROJECT,
            "LANGSMITH_TRACING": "true",
        }
    )
    logger.info("LangSmith tracing enabled", project=settings.LANGSMITH_PROJECT)
    _tracing_enabled = True
    return True


def traceable_step(
    name: str,
    run_type: str = "chain",
    provider: str | None = None,
    tags: list[str] | None = None,
) -> Callable:
    """
    Wrap an async callable in LangSmith ``@traceable`` while tracing is on.

    Args:
        name: Run name shown in LangSmith.
        run_type: "llm", "chain" or "tool".
        provider: Recorded as ``ls_provider`` metadata on every run.
        tags: Tags for filtering in LangSmith.
    """
    metadata: dict[str, Any] = {}
    if provider:
        metadata["ls_provider"] = provider

    def decorator(func: Callable) -> Callable:
        traced_fn = traceable(
            name=name,
            run_type=run_type,
            metadata=metadata,
            tags=tags or [],
        )(func)

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            target = traced_fn if _tracing_enabled else func
            return await target(*args, **kwargs)

        return wrapper

    return decorator
