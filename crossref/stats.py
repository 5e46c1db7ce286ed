"""
crossref/stats.py

Coverage statistics over a fleet partition.

Formulas
--------
coverage_pct  = covered / total_models * 100      (one decimal, "0.0" if total is 0)
tier_pct      = tier_covered / tier_total * 100   (one decimal, "0.0" if tier_total is 0)

The per-dimension1 summary used by the global dashboard rounds to whole
percentages (half up) instead.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from crossref.join_index import DEFAULT_PRIORITY_TIERS
from crossref.keys import JoinKey, parse_join_key
from crossref.records import FleetModel


# ---------------------------------------------------------------------------
# Percentage helpers
# ---------------------------------------------------------------------------


def format_percentage(numerator: int, denominator: int) -> str:
    """Return ``numerator / denominator`` as a one-decimal percentage string."""
    if denominator <= 0:
        return "0.0"
    return f"{numerator / denominator * 100:.1f}"


def rounded_percentage(numerator: int, denominator: int) -> int:
    """Return ``numerator / denominator`` as a whole percentage, halves rounded up."""
    if denominator <= 0:
        return 0
    return math.floor(numerator / denominator * 100 + 0.5)


# ---------------------------------------------------------------------------
# Snapshot statistics
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TierCoverage:
    total: int
    covered: int
    percentage: str


@dataclass(frozen=True)
class CoverageStats:
    total_models: int
    covered_models: int
    uncovered_models: int
    coverage_pct: str
    total_products: int
    by_tier: Mapping[str, TierCoverage] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_models": self.total_models,
            "covered_models": self.covered_models,
            "uncovered_models": self.uncovered_models,
            "coverage_pct": self.coverage_pct,
            "total_products": self.total_products,
            "by_tier": {
                tier: {"total": t.total, "covered": t.covered, "percentage": t.percentage}
                for tier, t in self.by_tier.items()
            },
        }


def compute_stats(
    full_fleet: Sequence[FleetModel],
    covered_fleet: Sequence[FleetModel],
    uncovered_fleet: Sequence[FleetModel],
    product_count: int,
    tiers: Sequence[str] = DEFAULT_PRIORITY_TIERS,
) -> CoverageStats:
    """
    Reduce a fleet partition to global and per-tier coverage figures.
    """
    total = len(full_fleet)
    covered = len(covered_fleet)
    tier_totals = Counter(model.priority_category for model in full_fleet)
    tier_covered = Counter(model.priority_category for model in covered_fleet)

    by_tier = {
        tier: TierCoverage(
            total=tier_totals[tier],
            covered=tier_covered[tier],
            percentage=format_percentage(tier_covered[tier], tier_totals[tier]),
        )
        for tier in tiers
    }

    return CoverageStats(
        total_models=total,
        covered_models=covered,
        uncovered_models=len(uncovered_fleet),
        coverage_pct=format_percentage(covered, total),
        total_products=product_count,
        by_tier=by_tier,
    )


# ---------------------------------------------------------------------------
# Per-dimension1 global summary
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TierShare:
    total: int
    covered: int
    percentage: int


@dataclass(frozen=True)
class DimensionCoverage:
    dimension1: str
    total_models: int
    covered_models: int
    uncovered_models: int
    percentage: int
    by_tier: Mapping[str, TierShare] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "dimension1": self.dimension1,
            "total_models": self.total_models,
            "covered_models": self.covered_models,
            "uncovered_models": self.uncovered_models,
            "percentage": self.percentage,
            "by_tier": {
                tier: {"total": s.total, "covered": s.covered, "percentage": s.percentage}
                for tier, s in self.by_tier.items()
            },
        }


@dataclass(frozen=True)
class GlobalCoverageSummary:
    rows: tuple[DimensionCoverage, ...]

    @property
    def best(self) -> DimensionCoverage | None:
        if not self.rows:
            return None
        return max(self.rows, key=lambda row: row.percentage)

    @property
    def worst(self) -> DimensionCoverage | None:
        if not self.rows:
            return None
        return min(self.rows, key=lambda row: row.percentage)


_SORT_KEYS = {"dimension1", "percentage", "covered"}


def compute_dimension_coverage(
    fleet: Sequence[FleetModel],
    keys_by_dimension1: Mapping[str, Iterable[object]],
    tiers: Sequence[str] = DEFAULT_PRIORITY_TIERS,
    *,
    sort_by: str = "dimension1",
) -> GlobalCoverageSummary:
    """
    Compute fleet coverage separately for every dimension1 value.

    ``keys_by_dimension1`` maps each dimension1 value to the join keys of
    its products; keys are parsed like any other join key and unparseable
    ones are ignored.

    ``sort_by`` is one of ``"dimension1"`` (ascending), ``"percentage"`` or
    ``"covered"`` (both descending, ties by name).

    Raises
    ------
    ValueError
        If *sort_by* is not a supported ordering.
    """
    if sort_by not in _SORT_KEYS:
        raise ValueError(f"Unknown sort_by {sort_by!r}. Valid: {sorted(_SORT_KEYS)}")

    fleet_keys: list[tuple[FleetModel, JoinKey | None]] = [(m, m.join_key) for m in fleet]
    total = len(fleet_keys)
    tier_totals = Counter(model.priority_category for model in fleet)

    rows: list[DimensionCoverage] = []
    for dimension1, raw_keys in keys_by_dimension1.items():
        keys = {parse_join_key(raw) for raw in raw_keys} - {None}
        covered_models = [m for m, key in fleet_keys if key is not None and key in keys]
        tier_covered = Counter(model.priority_category for model in covered_models)
        rows.append(
            DimensionCoverage(
                dimension1=dimension1,
                total_models=total,
                covered_models=len(covered_models),
                uncovered_models=total - len(covered_models),
                percentage=rounded_percentage(len(covered_models), total),
                by_tier={
                    tier: TierShare(
                        total=tier_totals[tier],
                        covered=tier_covered[tier],
                        percentage=rounded_percentage(tier_covered[tier], tier_totals[tier]),
                    )
                    for tier in tiers
                },
            )
        )

    if sort_by == "percentage":
        rows.sort(key=lambda row: (-row.percentage, row.dimension1))
    elif sort_by == "covered":
        rows.sort(key=lambda row: (-row.covered_models, row.dimension1))
    else:
        rows.sort(key=lambda row: row.dimension1)

    return GlobalCoverageSummary(rows=tuple(rows))
