"""
Model pricing for cost calculation.

Prices are USD per million tokens. Unknown models are priced as
Claude Sonnet.
"""

from __future__ import annotations

MODEL_PRICING: dict[str, dict[str, float]] = {
    "claude-opus-4-5-20251101": {"input": 5, "output": 25},
    "claude-sonnet-4-5-20250929": {"input": 3, "output": 15},
    "claude-haiku-4-5-20251001": {"input": 1, "output": 5},
    "gpt-4.1": {"input": 2, "output": 8},
    "gpt-4o": {"input": 2.5, "output": 10},
    "o4-mini": {"input": 1.1, "output": 4.4},
}

FALLBACK_PRICING_MODEL = "claude-sonnet-4-5-20250929"


def calculate_cost(model: str, input_tokens: int, output_tokens: int) -> float:
    """Cost in USD of one call."""
    pricing = MODEL_PRICING.get(model, MODEL_PRICING[FALLBACK_PRICING_MODEL])
    input_cost = input_tokens / 1_000_000 * pricing["input"]
    output_cost = output_tokens / 1_000_000 * pricing["output"]
    return input_cost + output_cost

