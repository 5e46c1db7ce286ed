"""
app/services/coverage_orchestrator.py

Coverage analysis orchestrator.

Wires the core layers into a single read-only run. No business logic
lives here; every layer keeps its own responsibility:

    Repositories       – fetch fleet and product snapshots
    crossref           – join index, partition, pivot, statistics
    policy             – quality mix and commercial rule evaluation

Pipeline
--------
1. Optionally drop products from the excluded supplier codes.
2. Detect the dimension1 / dimension2 values of the remaining products.
3. Build the join index and partition the fleet.
4. Reduce the partition to statistics.
5. Build the pivot for the covered fleet.
6. Evaluate the policy category of the full fleet and optionally keep one
   age segment.

Failure contract
----------------
- Database read failure   → raises :class:`CoverageQueryError`
- Unknown sort_by         → raises ``ValueError`` (from the stats layer)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import (
    CoverageSettings,
    UploadSettings,
    get_coverage_settings,
    get_upload_settings,
)
from crossref.join_index import (
    FleetPartition,
    JoinIndex,
    build_index,
    detect_dimension_values,
    exclude_suppliers,
    partition,
)
from crossref.pivot import Pivot, PivotConfig, build_pivot
from crossref.records import FleetModel, ProductRecord
from crossref.stats import CoverageStats, GlobalCoverageSummary, compute_dimension_coverage, compute_stats
from db.repositories.fleet_repository import FleetRepository
from db.repositories.product_repository import ProductRepository
from policy.engine import PolicyEngine, PolicyFinding, filter_by_segment, select_population
from policy.rules import AgeSegment

logger = logging.getLogger(__name__)


class CoverageQueryError(RuntimeError):
    """
    Raised when fleet or product snapshots cannot be read from the database.
    """


# ---------------------------------------------------------------------------
# Request / result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnalysisRequest:
    """
    Parameters of one coverage analysis.

    ``dimension1`` restricts the product snapshot to one classification
    value; ``None`` analyses every product.
    """

    dimension1: str | None = None
    show_dimension1: bool = True
    show_dimension2: bool = True
    category_filter: str | None = None
    brand_filter: str | None = None
    exclude_suppliers: bool = False
    policy_segment: AgeSegment | None = None


@dataclass(frozen=True)
class CoverageAnalysis:
    pivot: Pivot
    stats: CoverageStats
    fleet_partition: FleetPartition
    findings: tuple[PolicyFinding, ...]
    product_count: int
    dimension1_values: tuple[str, ...] = ()
    dimension2_values: tuple[str, ...] = ()
    excluded_products: int = 0
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "pivot": self.pivot.to_dict(),
            "stats": self.stats.to_dict(),
            "covered_model_ids": [m.join_key for m in self.fleet_partition.covered],
            "uncovered_models": [
                {
                    "model_id": m.join_key,
                    "brand": m.brand,
                    "model_name": m.model_name,
                    "priority_category": m.priority_category,
                }
                for m in self.fleet_partition.uncovered
            ],
            "findings": [finding.to_dict() for finding in self.findings],
            "product_count": self.product_count,
            "excluded_products": self.excluded_products,
            "meta": dict(self.meta),
        }


# ---------------------------------------------------------------------------
# Pure pipeline
# ---------------------------------------------------------------------------


def analyze(
    fleet: Sequence[FleetModel],
    products: Iterable[ProductRecord],
    request: AnalysisRequest,
    *,
    settings: CoverageSettings | None = None,
    engine: PolicyEngine | None = None,
) -> CoverageAnalysis:
    """
    Run the full coverage pipeline over in-memory snapshots.

    Never touches the database; :class:`CoverageService` feeds it.
    """
    settings = settings or CoverageSettings()
    engine = engine or PolicyEngine()

    selected = [
        product
        for product in products
        if request.dimension1 is None or product.dimension1 == request.dimension1
    ]
    kept: Sequence[ProductRecord] = selected
    if request.exclude_suppliers:
        kept = exclude_suppliers(selected, settings.excluded_supplier_codes)

    dimension1_values, dimension2_values = detect_dimension_values(kept, settings.priority_tiers)
    join_index: JoinIndex = build_index(kept)
    fleet_partition = partition(fleet, join_index.covered_ids)

    stats = compute_stats(
        fleet,
        fleet_partition.covered,
        fleet_partition.uncovered,
        len(kept),
        settings.priority_tiers,
    )

    pivot = build_pivot(
        fleet_partition.covered,
        join_index,
        PivotConfig(
            dimension1_values=dimension1_values,
            dimension2_values=dimension2_values,
            show_dimension1=request.show_dimension1,
            show_dimension2=request.show_dimension2,
            category_filter=request.category_filter,
            brand_filter=request.brand_filter,
            no_filter=settings.no_filter,
        ),
    )

    population = select_population(fleet, settings.policy_category)
    findings = filter_by_segment(engine.evaluate(population, join_index), request.policy_segment)

    return CoverageAnalysis(
        pivot=pivot,
        stats=stats,
        fleet_partition=fleet_partition,
        findings=tuple(findings),
        product_count=len(kept),
        dimension1_values=dimension1_values,
        dimension2_values=dimension2_values,
        excluded_products=len(selected) - len(kept),
        meta={
            "dimension1": request.dimension1,
            "policy_category": settings.policy_category,
            "policy_segment": request.policy_segment.value if request.policy_segment else None,
        },
    )


# ---------------------------------------------------------------------------
# Database-backed service
# ---------------------------------------------------------------------------


class CoverageService:
    """
    Loads snapshots through the repositories and runs :func:`analyze`.

    Every method is read-only; the caller owns the session lifecycle.
    """

    def __init__(
        self,
        *,
        settings: CoverageSettings | None = None,
        upload_settings: UploadSettings | None = None,
        engine: PolicyEngine | None = None,
    ) -> None:
        self._settings = settings or get_coverage_settings()
        self._upload_settings = upload_settings or get_upload_settings()
        self._engine = engine or PolicyEngine()

    @property
    def settings(self) -> CoverageSettings:
        return self._settings

    def analyze(self, db: Session, request: AnalysisRequest) -> CoverageAnalysis:
        """
        Raises
        ------
        CoverageQueryError
            When the fleet or product snapshot cannot be read.
        """
        run_start = time.monotonic()
        fleet, products = self._load(db, request.dimension1)

        result = analyze(fleet, products, request, settings=self._settings, engine=self._engine)
        logger.info(
            "Coverage analysis dimension1=%r models=%d covered=%d products=%d findings=%d elapsed=%.3fs",
            request.dimension1,
            result.stats.total_models,
            result.stats.covered_models,
            result.product_count,
            len(result.findings),
            time.monotonic() - run_start,
        )
        return result

    def dimension1_values(self, db: Session) -> list[str]:
        """
        Distinct dimension1 values currently stored, sorted.

        Raises
        ------
        CoverageQueryError
            When the database cannot be read.
        """
        try:
            return ProductRepository(db).fetch_dimension1_values()
        except SQLAlchemyError as exc:
            logger.exception("Dimension1 value query failed")
            raise CoverageQueryError("Unable to read dimension1 values.") from exc

    def global_summary(self, db: Session, *, sort_by: str = "dimension1") -> GlobalCoverageSummary:
        """
        Coverage of the full fleet computed separately for every dimension1.

        Raises
        ------
        CoverageQueryError
            When the database cannot be read.
        ValueError
            If *sort_by* is not a supported ordering.
        """
        try:
            fleet = FleetRepository(db).fetch_all()
            keys_by_dimension1 = ProductRepository(
                db, page_size=self._upload_settings.page_size
            ).fetch_join_keys_by_dimension1()
        except SQLAlchemyError as exc:
            logger.exception("Global coverage query failed")
            raise CoverageQueryError("Unable to read coverage snapshots.") from exc

        return compute_dimension_coverage(
            fleet,
            keys_by_dimension1,
            self._settings.priority_tiers,
            sort_by=sort_by,
        )

    def _load(
        self,
        db: Session,
        dimension1: str | None,
    ) -> tuple[list[FleetModel], list[ProductRecord]]:
        products_repo = ProductRepository(db, page_size=self._upload_settings.page_size)
        try:
            fleet = FleetRepository(db).fetch_all()
            if dimension1 is None:
                products = products_repo.fetch_all()
            else:
                products = products_repo.fetch_by_dimension1(dimension1)
        except SQLAlchemyError as exc:
            logger.exception("Coverage snapshot query failed dimension1=%r", dimension1)
            raise CoverageQueryError("Unable to read coverage snapshots.") from exc

        logger.debug("Loaded fleet=%d products=%d", len(fleet), len(products))
        return fleet, products


@lru_cache(maxsize=1)
def get_coverage_service() -> CoverageService:
    """
    Build and cache the coverage service with env-driven settings.
    """
    return CoverageService()
