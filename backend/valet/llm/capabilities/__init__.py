"""
Single-call wrappers around the Anthropic Messages API.

Each wrapper issues exactly one ``messages.create`` request and shapes
the response into provider-neutral results. No retries, no streaming.
"""

from valet.llm.capabilities.run_with_tools import run_with_tools
from valet.llm.capabilities.text_generation import TextGenerationResult, generate_text
from valet.llm.capabilities.url_fetch import run_with_url_fetch
from valet.llm.capabilities.web_search import run_with_web_search
from valet.llm.capabilities.response import ToolRunResult

__all__ = [
    "generate_text",
    "run_with_web_search",
    "run_with_url_fetch",
    "run_with_tools",
    "TextGenerationResult",
    "ToolRunResult",
]
