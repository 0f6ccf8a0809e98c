"""
Helpers that turn an Anthropic ``Message`` into plain results.

Beta tool blocks (web_fetch) may come back as loosely-typed objects or
dicts depending on the SDK version, so fields are read through
``_field``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from valet.core.config import settings
from valet.core.constants import ToolType
from valet.core.logging import get_logger
from valet.llm.types import Citation, Usage

logger = get_logger(__name__)

WEB_FETCH_BETA = "web-fetch-2025-09-10"

# tool-result block type -> content type signalling an error
_TOOL_ERROR_TYPES = {
    "web_search_tool_result": "web_search_tool_result_error",
    "web_fetch_tool_result": "web_fetch_tool_error",
}


@dataclass
class ToolRunResult:
    content: str
    citations: list[Citation] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)


def _field(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def web_search_tool(max_uses: int | None = None) -> dict[str, Any]:
    return {
        "type": "web_search_20250305",
        "name": ToolType.WEB_SEARCH.value,
        "max_uses": max_uses if max_uses is not None else settings.WEB_SEARCH_MAX_USES,
    }


def web_fetch_tool(
    max_uses: int | None = None,
    max_content_tokens: int | None = None,
) -> dict[str, Any]:
    return {
        "type": "web_fetch_20250910",
        "name": ToolType.WEB_FETCH.value,
        "max_uses": max_uses if max_uses is not None else settings.WEB_FETCH_MAX_USES,
        "max_content_tokens": (
            max_content_tokens
            if max_content_tokens is not None
            else settings.WEB_FETCH_MAX_CONTENT_TOKENS
        ),
        "citations": {"enabled": True},
    }


def text_blocks(response: Any) -> list[Any]:
    return [b for b in _field(response, "content", []) or [] if _field(b, "type") == "text"]


def extract_text(response: Any) -> str:
    """Concatenate every text block in order."""
    return "".join(_field(b, "text", "") or "" for b in text_blocks(response))


def extract_citations(response: Any) -> list[Citation]:
    """Citations carried by text blocks; entries without a url are dropped."""
    citations: list[Citation] = []
    for block in text_blocks(response):
        for citation in _field(block, "citations") or []:
            url = _field(citation, "url")
            if not isinstance(url, str):
                continue
            title = _field(citation, "title")
            citations.append(Citation(url=url, title=title if isinstance(title, str) else None))
    return citations


def extract_usage(response: Any) -> Usage:
    usage = _field(response, "usage")
    return Usage(
        input_tokens=_field(usage, "input_tokens", 0) or 0,
        output_tokens=_field(usage, "output_tokens", 0) or 0,
    )


def log_tool_errors(response: Any) -> list[str]:
    """Log tool-result error blocks and return their error codes."""
    codes: list[str] = []
    for block in _field(response, "content", []) or []:
        block_type = _field(block, "type")
        error_type = _TOOL_ERROR_TYPES.get(block_type)
        if error_type is None:
            continue
        content = _field(block, "content")
        if _field(content, "type") != error_type:
            continue
        code = _field(content, "error_code") or "unknown"
        codes.append(code)
        logger.error("Provider tool returned an error", tool_block=block_type, error_code=code)
    return codes


def to_tool_result(response: Any) -> ToolRunResult:
    log_tool_errors(response)
    return ToolRunResult(
        content=extract_text(response),
        citations=extract_citations(response),
        usage=extract_usage(response),
    )
