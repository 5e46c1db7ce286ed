"""
app/schemas/coverage.py

Request and response schemas for coverage analysis endpoints.

Response models validate the plain dicts produced by the core result
types' ``to_dict`` methods.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from policy.rules import AgeSegment

ModelId = int | float | None


class AnalysisRequestBody(BaseModel):
    """
    Parameters of ``POST /coverage/analysis``.

    ``category_filter`` / ``brand_filter`` accept the no-filter sentinel
    (``"ALL"`` by default) or ``null`` to keep every model.
    """

    dimension1: str | None = Field(default=None, description="Restrict products to one dimension1 value.")
    show_dimension1: bool = True
    show_dimension2: bool = True
    category_filter: str | None = None
    brand_filter: str | None = None
    exclude_suppliers: bool = Field(
        default=False,
        description="Drop products from the configured excluded supplier codes.",
    )
    policy_segment: AgeSegment | None = None


# ---------------------------------------------------------------------------
# Pivot
# ---------------------------------------------------------------------------


class ProductDetailResponse(BaseModel):
    equivalence_code: str
    part_number: str
    part_brand: str
    supplier_code: str | int | float | None = None
    dimension1: str
    dimension2: str
    description: str


class ModelCoverageResponse(BaseModel):
    model_id: ModelId = None
    model_name: str
    brand: str
    priority_category: str
    sort_order: int
    counts: dict[str, int]
    details: dict[str, list[ProductDetailResponse]]
    total: int = Field(..., ge=0)


class PivotResponse(BaseModel):
    columns: list[str]
    dimension1_values: list[str]
    dimension2_values: list[str]
    brands: dict[str, dict[str, ModelCoverageResponse]]


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


class TierCoverageResponse(BaseModel):
    total: int = Field(..., ge=0)
    covered: int = Field(..., ge=0)
    percentage: str


class CoverageStatsResponse(BaseModel):
    total_models: int = Field(..., ge=0)
    covered_models: int = Field(..., ge=0)
    uncovered_models: int = Field(..., ge=0)
    coverage_pct: str
    total_products: int = Field(..., ge=0)
    by_tier: dict[str, TierCoverageResponse]


class UncoveredModelResponse(BaseModel):
    model_id: ModelId = None
    brand: str
    model_name: str
    priority_category: str


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


class QualityMixResponse(BaseModel):
    original: int = Field(..., ge=0)
    premium: int = Field(..., ge=0)
    standard: int = Field(..., ge=0)


class PolicyActionResponse(BaseModel):
    action_type: Literal["ADD", "REMOVE", "EVAL", "DEV", "OK"]
    text: str
    team: str | None = None


class PolicyFindingResponse(BaseModel):
    model_id: ModelId = None
    brand: str
    model_name: str
    year_to: int | None = None
    age_segment: AgeSegment
    quality_mix: QualityMixResponse
    status: Literal["OK", "WARNING", "CRITICAL"]
    actions: list[PolicyActionResponse]


class CoverageAnalysisResponse(BaseModel):
    pivot: PivotResponse
    stats: CoverageStatsResponse
    covered_model_ids: list[ModelId]
    uncovered_models: list[UncoveredModelResponse]
    findings: list[PolicyFindingResponse]
    product_count: int = Field(..., ge=0)
    excluded_products: int = Field(..., ge=0)
    meta: dict[str, str | None] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Global summary
# ---------------------------------------------------------------------------


class TierShareResponse(BaseModel):
    total: int = Field(..., ge=0)
    covered: int = Field(..., ge=0)
    percentage: int = Field(..., ge=0, le=100)


class DimensionCoverageResponse(BaseModel):
    dimension1: str
    total_models: int = Field(..., ge=0)
    covered_models: int = Field(..., ge=0)
    uncovered_models: int = Field(..., ge=0)
    percentage: int = Field(..., ge=0, le=100)
    by_tier: dict[str, TierShareResponse]


class GlobalCoverageResponse(BaseModel):
    rows: list[DimensionCoverageResponse]
    best: str | None = None
    worst: str | None = None
