"""
tests/test_stats.py

Coverage statistics and the per-dimension1 global summary.

All tests are pure Python; percentage fields are checked as the exact
strings or integers the presentation layer receives.
"""

from __future__ import annotations

import pytest

from crossref.join_index import partition
from crossref.records import FleetModel
from crossref.stats import (
    compute_dimension_coverage,
    compute_stats,
    format_percentage,
    rounded_percentage,
)


def _model(model_id: object, category: str) -> FleetModel:
    return FleetModel(model_id=model_id, brand="Ford", model_name=f"M{model_id}", priority_category=category)


@pytest.fixture()
def fleet() -> list[FleetModel]:
    return [
        _model(1, "AA"),
        _model(2, "AA"),
        _model(3, "A"),
        _model(4, "B"),
        _model(5, "B"),
        _model(6, "B"),
        _model(7, "C"),
        _model(8, "Unranked"),
    ]


# ---------------------------------------------------------------------------
# Percentage helpers
# ---------------------------------------------------------------------------


class TestPercentageHelpers:
    @pytest.mark.parametrize(
        ("numerator", "denominator", "expected"),
        [(1, 3, "33.3"), (2, 3, "66.7"), (3, 3, "100.0"), (0, 5, "0.0"), (0, 0, "0.0"), (5, 0, "0.0")],
    )
    def test_format_percentage(self, numerator: int, denominator: int, expected: str) -> None:
        assert format_percentage(numerator, denominator) == expected

    @pytest.mark.parametrize(
        ("numerator", "denominator", "expected"),
        [(1, 8, 13), (1, 3, 33), (2, 3, 67), (3, 8, 38), (0, 0, 0)],
    )
    def test_rounded_percentage_rounds_half_up(self, numerator: int, denominator: int, expected: int) -> None:
        assert rounded_percentage(numerator, denominator) == expected


# ---------------------------------------------------------------------------
# compute_stats
# ---------------------------------------------------------------------------


class TestComputeStats:
    def test_empty_fleet_is_all_zero_strings(self) -> None:
        stats = compute_stats([], [], [], 0)

        assert stats.total_models == 0
        assert stats.coverage_pct == "0.0"
        assert all(tier.percentage == "0.0" for tier in stats.by_tier.values())
        assert list(stats.by_tier) == ["AA", "A", "B", "C"]

    def test_counts_and_tiers(self, fleet: list[FleetModel]) -> None:
        parts = partition(fleet, frozenset({1, 4, 5, 8}))
        stats = compute_stats(fleet, parts.covered, parts.uncovered, product_count=17)

        assert stats.total_models == 8
        assert stats.covered_models == 4
        assert stats.uncovered_models == 4
        assert stats.coverage_pct == "50.0"
        assert stats.total_products == 17
        assert stats.by_tier["AA"].percentage == "50.0"
        assert stats.by_tier["A"].covered == 0
        assert stats.by_tier["B"].percentage == "66.7"
        assert stats.by_tier["C"].total == 1

    def test_tier_without_models_is_zero(self, fleet: list[FleetModel]) -> None:
        parts = partition(fleet, frozenset())
        stats = compute_stats(fleet, parts.covered, parts.uncovered, 0, tiers=("AA", "D"))
        assert stats.by_tier["D"].total == 0
        assert stats.by_tier["D"].percentage == "0.0"

    def test_to_dict(self, fleet: list[FleetModel]) -> None:
        parts = partition(fleet, frozenset({1}))
        payload = compute_stats(fleet, parts.covered, parts.uncovered, 1).to_dict()
        assert payload["coverage_pct"] == "12.5"
        assert payload["by_tier"]["AA"] == {"total": 2, "covered": 1, "percentage": "50.0"}


# ---------------------------------------------------------------------------
# compute_dimension_coverage
# ---------------------------------------------------------------------------


class TestDimensionCoverage:
    def test_rows_per_dimension1(self, fleet: list[FleetModel]) -> None:
        summary = compute_dimension_coverage(
            fleet,
            {"Filters": {"1", 2, "x"}, "Brakes": {4.0}, "Lights": set()},
        )

        by_name = {row.dimension1: row for row in summary.rows}
        assert [row.dimension1 for row in summary.rows] == ["Brakes", "Filters", "Lights"]
        assert by_name["Filters"].covered_models == 2
        assert by_name["Filters"].percentage == 25
        assert by_name["Filters"].by_tier["AA"].percentage == 100
        assert by_name["Brakes"].percentage == 13
        assert by_name["Lights"].uncovered_models == 8

    def test_best_and_worst(self, fleet: list[FleetModel]) -> None:
        summary = compute_dimension_coverage(fleet, {"Filters": {1, 2}, "Brakes": {4}})
        assert summary.best.dimension1 == "Filters"
        assert summary.worst.dimension1 == "Brakes"

    def test_sort_by_percentage_descending(self, fleet: list[FleetModel]) -> None:
        summary = compute_dimension_coverage(
            fleet,
            {"A-low": {1}, "B-high": {1, 2, 3}, "C-mid": {1, 2}},
            sort_by="percentage",
        )
        assert [row.dimension1 for row in summary.rows] == ["B-high", "C-mid", "A-low"]

    def test_empty_fleet_and_no_rows(self) -> None:
        summary = compute_dimension_coverage([], {"Filters": {1}})
        assert summary.rows[0].percentage == 0
        assert compute_dimension_coverage([], {}).best is None

    def test_unknown_sort_raises(self, fleet: list[FleetModel]) -> None:
        with pytest.raises(ValueError):
            compute_dimension_coverage(fleet, {}, sort_by="brand")
