# src/tracking/models.py — v2
"""Cost tracking models: ModelPricing, EstimateItem, CostEstimate."""

from __future__ import annotations

from pydantic import BaseModel

from m2md.extraction.metadata import ImageMetadata


class ModelPricing(BaseModel):
    """USD price per million tokens."""

    model: str
    input_price_per_1m: float
    output_price_per_1m: float


class EstimateItem(BaseModel):
    """One image considered for a cost preview."""

    path: str
    metadata: ImageMetadata
    cached: bool = False


class CostEstimate(BaseModel):
    """Projected token use and cost for the uncached part of a run."""

    files: int
    cached: int
    to_process: int
    total_input_tokens: int
    total_output_tokens: int
    estimated_cost_usd: float
    model: str
    currency: str = "USD"
