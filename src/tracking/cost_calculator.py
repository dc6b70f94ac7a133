# src/tracking/cost_calculator.py — v2
"""Cost estimation before a run and cost calculation after it.

Image token counts follow the common vision approximation of one token per
750 pixels, plus a fixed allowance for the prompts.
"""

from __future__ import annotations

import math

from m2md.extraction.metadata import ImageMetadata
from m2md.tracking.models import CostEstimate, EstimateItem, ModelPricing

# Default pricing per 1M tokens
DEFAULT_PRICING: dict[str, ModelPricing] = {
    "claude-sonnet-4-5-20250929": ModelPricing(
        model="claude-sonnet-4-5-20250929",
        input_price_per_1m=3.0, output_price_per_1m=15.0,
    ),
    "claude-opus-4-6": ModelPricing(
        model="claude-opus-4-6",
        input_price_per_1m=15.0, output_price_per_1m=75.0,
    ),
    "claude-haiku-4-5-20251001": ModelPricing(
        model="claude-haiku-4-5-20251001",
        input_price_per_1m=0.80, output_price_per_1m=4.0,
    ),
    "gpt-4o": ModelPricing(
        model="gpt-4o",
        input_price_per_1m=2.50, output_price_per_1m=10.0,
    ),
    "gpt-4o-mini": ModelPricing(
        model="gpt-4o-mini",
        input_price_per_1m=0.15, output_price_per_1m=0.60,
    ),
}

# Unknown models are priced like the default Claude model
FALLBACK_PRICING = ModelPricing(model="*", input_price_per_1m=3.0, output_price_per_1m=15.0)

AVG_OUTPUT_TOKENS = 300
PROMPT_TOKENS = 350
PIXELS_PER_TOKEN = 750
UNKNOWN_DIMENSION = 1000


def pricing_for(model: str, pricing: dict[str, ModelPricing] | None = None) -> ModelPricing:
    return (pricing or DEFAULT_PRICING).get(model, FALLBACK_PRICING)


def estimate_image_tokens(metadata: ImageMetadata) -> int:
    """Input tokens for one image: pixel-based image tokens plus prompt."""
    width = metadata.width or UNKNOWN_DIMENSION
    height = metadata.height or UNKNOWN_DIMENSION
    return math.ceil(width * height / PIXELS_PER_TOKEN) + PROMPT_TOKENS


def calculate_cost(
    input_tokens: int,
    output_tokens: int,
    model: str,
    pricing: dict[str, ModelPricing] | None = None,
) -> float:
    """USD cost of actual token usage."""
    p = pricing_for(model, pricing)
    return (input_tokens * p.input_price_per_1m / 1_000_000
            + output_tokens * p.output_price_per_1m / 1_000_000)


def estimate_cost(
    items: list[EstimateItem],
    model: str,
    pricing: dict[str, ModelPricing] | None = None,
) -> CostEstimate:
    """Project the cost of processing ``items``; cached items cost nothing."""
    to_process = [i for i in items if not i.cached]
    input_tokens = sum(estimate_image_tokens(i.metadata) for i in to_process)
    output_tokens = len(to_process) * AVG_OUTPUT_TOKENS
    return CostEstimate(
        files=len(items),
        cached=len(items) - len(to_process),
        to_process=len(to_process),
        total_input_tokens=input_tokens,
        total_output_tokens=output_tokens,
        estimated_cost_usd=calculate_cost(input_tokens, output_tokens, model, pricing),
        model=model,
    )


def format_model(model: str) -> str:
    """Short display name: ``claude-sonnet-4-5-20250929`` → ``sonnet-4-5``."""
    if model.startswith("claude-"):
        return model[len("claude-"):].split("-2")[0]
    return model


def format_tokens(count: int) -> str:
    """``1234`` → ``1.2K``; counts under 1000 unchanged."""
    if count >= 1000:
        return f"{count / 1000:.1f}K"
    return str(count)


def format_cost(estimate: CostEstimate) -> str:
    """Three-line human summary of an estimate."""
    cost = estimate.estimated_cost_usd
    cost_str = "<$0.01" if cost < 0.01 else f"~${cost:.2f}"
    files_label = f"{estimate.files} image{'' if estimate.files == 1 else 's'}"
    cache_note = (
        f" ({estimate.cached} cached, {estimate.to_process} new)"
        if estimate.cached else ""
    )
    return "\n".join([
        f"  Files     {files_label}{cache_note}",
        f"  Tokens    ~{estimate.total_input_tokens:,} in + ~{estimate.total_output_tokens:,} out",
        f"  Cost      {cost_str} ({format_model(estimate.model)})",
    ])
