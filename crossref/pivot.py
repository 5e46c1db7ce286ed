"""
crossref/pivot.py

Coverage pivot: brand → model → product counts per classification column.

Columns are derived from the two classification dimensions and the
visibility toggles in :class:`PivotConfig`:

    both shown      → one column per (d1, d2) pair, labelled ``d1|d2``
    dimension1 only → one column per d1 value, labelled ``d1|ALL``
    dimension2 only → one column per d2 value, labelled ``ALL|d2``
    neither         → a single ``ALL|ALL`` column

A product lands in exactly one key under the current toggles. Products
whose key is not a defined column are not counted.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import asdict, dataclass, field
from typing import Any, Mapping

from crossref.join_index import JoinIndex
from crossref.keys import JoinKey
from crossref.records import FleetModel, ProductRecord

logger = logging.getLogger(__name__)

ALL_LABEL = "ALL"
COLUMN_SEPARATOR = "|"
NO_FILTER = "ALL"

# Models without an explicit sort order are placed after ordered ones.
UNORDERED_SORT_ORDER = 999


@dataclass(frozen=True)
class PivotConfig:
    """
    Immutable description of one pivot computation.

    ``category_filter`` / ``brand_filter`` set to ``None`` or to
    ``no_filter`` pass every model through.
    """

    dimension1_values: tuple[str, ...] = ()
    dimension2_values: tuple[str, ...] = ()
    show_dimension1: bool = True
    show_dimension2: bool = True
    category_filter: str | None = None
    brand_filter: str | None = None
    no_filter: str = NO_FILTER


@dataclass(frozen=True)
class ProductDetail:
    equivalence_code: str
    part_number: str
    part_brand: str
    supplier_code: str | int | float | None
    dimension1: str
    dimension2: str
    description: str

    @classmethod
    def from_product(cls, product: ProductRecord) -> "ProductDetail":
        return cls(
            equivalence_code=product.equivalence_code,
            part_number=product.part_number,
            part_brand=product.part_brand,
            supplier_code=product.supplier_code,
            dimension1=product.dimension1,
            dimension2=product.dimension2,
            description=product.description,
        )


@dataclass(frozen=True)
class ModelCoverage:
    """
    Pivot row for one fleet model.

    ``total`` always equals the sum of ``counts`` and every
    ``details[column]`` has ``counts[column]`` entries.
    """

    model_id: JoinKey | None
    model_name: str
    brand: str
    priority_category: str
    sort_order: int
    counts: Mapping[str, int]
    details: Mapping[str, tuple[ProductDetail, ...]]
    total: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "model_id": self.model_id,
            "model_name": self.model_name,
            "brand": self.brand,
            "priority_category": self.priority_category,
            "sort_order": self.sort_order,
            "counts": dict(self.counts),
            "details": {
                column: [asdict(detail) for detail in items]
                for column, items in self.details.items()
            },
            "total": self.total,
        }


@dataclass(frozen=True)
class Pivot:
    columns: tuple[str, ...]
    dimension1_values: tuple[str, ...]
    dimension2_values: tuple[str, ...]
    brands: Mapping[str, Mapping[str, ModelCoverage]] = field(default_factory=dict)

    def iter_models(self) -> Iterator[ModelCoverage]:
        """Yield rows in presentation order (brand, then sort order)."""
        for models in self.brands.values():
            yield from models.values()

    @property
    def model_count(self) -> int:
        return sum(len(models) for models in self.brands.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "columns": list(self.columns),
            "dimension1_values": list(self.dimension1_values),
            "dimension2_values": list(self.dimension2_values),
            "brands": {
                brand: {name: model.to_dict() for name, model in models.items()}
                for brand, models in self.brands.items()
            },
        }


# ---------------------------------------------------------------------------
# Column helpers
# ---------------------------------------------------------------------------


def column_key(
    dimension1: str,
    dimension2: str,
    *,
    show_dimension1: bool,
    show_dimension2: bool,
) -> str:
    """Return the column a product with these labels falls into."""
    left = dimension1 if show_dimension1 else ALL_LABEL
    right = dimension2 if show_dimension2 else ALL_LABEL
    return f"{left}{COLUMN_SEPARATOR}{right}"


def build_columns(config: PivotConfig) -> tuple[str, ...]:
    """Build the ordered column list for *config*; repeated values are collapsed."""
    if config.show_dimension1 and config.show_dimension2:
        labels: Iterable[str] = (
            f"{d1}{COLUMN_SEPARATOR}{d2}"
            for d1 in config.dimension1_values
            for d2 in config.dimension2_values
        )
    elif config.show_dimension1:
        labels = (f"{d1}{COLUMN_SEPARATOR}{ALL_LABEL}" for d1 in config.dimension1_values)
    elif config.show_dimension2:
        labels = (f"{ALL_LABEL}{COLUMN_SEPARATOR}{d2}" for d2 in config.dimension2_values)
    else:
        labels = (f"{ALL_LABEL}{COLUMN_SEPARATOR}{ALL_LABEL}",)
    return tuple(dict.fromkeys(labels))


def split_column(column: str) -> tuple[str, str]:
    left, _, right = column.partition(COLUMN_SEPARATOR)
    return left, right


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


def _passes(value: str, selected: str | None, no_filter: str) -> bool:
    if selected is None or selected == no_filter:
        return True
    return value == selected


def filter_fleet(models: Iterable[FleetModel], config: PivotConfig) -> list[FleetModel]:
    return [
        model
        for model in models
        if _passes(model.priority_category, config.category_filter, config.no_filter)
        and _passes(model.brand, config.brand_filter, config.no_filter)
    ]


def resolve_sort_order(model: FleetModel) -> int:
    return model.sort_order if model.sort_order is not None else UNORDERED_SORT_ORDER


def _model_coverage(
    model: FleetModel,
    products: Sequence[ProductRecord],
    columns: tuple[str, ...],
    config: PivotConfig,
) -> ModelCoverage:
    counts: dict[str, int] = {column: 0 for column in columns}
    details: dict[str, list[ProductDetail]] = {column: [] for column in columns}

    for product in products:
        key = column_key(
            product.dimension1,
            product.dimension2,
            show_dimension1=config.show_dimension1,
            show_dimension2=config.show_dimension2,
        )
        if key not in counts:
            continue
        counts[key] += 1
        details[key].append(ProductDetail.from_product(product))

    return ModelCoverage(
        model_id=model.join_key,
        model_name=model.model_name,
        brand=model.brand,
        priority_category=model.priority_category,
        sort_order=resolve_sort_order(model),
        counts=counts,
        details={column: tuple(items) for column, items in details.items()},
        total=sum(counts.values()),
    )


def build_pivot(
    covered_fleet: Iterable[FleetModel],
    join_index: JoinIndex,
    config: PivotConfig,
) -> Pivot:
    """
    Build the coverage pivot for the covered part of the fleet.

    Brands are ordered lexicographically; models inside a brand by ascending
    sort order, ties keeping input order. Two models sharing brand and name
    collapse into one row (the later one wins).
    """
    columns = build_columns(config)
    rows: dict[str, dict[str, ModelCoverage]] = {}

    for model in filter_fleet(covered_fleet, config):
        brand_rows = rows.setdefault(model.brand, {})
        if model.model_name in brand_rows:
            logger.debug(
                "Duplicate model name %r under brand %r; keeping the later row",
                model.model_name,
                model.brand,
            )
        brand_rows[model.model_name] = _model_coverage(
            model, join_index.products_for(model), columns, config
        )

    ordered: dict[str, dict[str, ModelCoverage]] = {}
    for brand in sorted(rows):
        ranked = sorted(rows[brand].items(), key=lambda item: item[1].sort_order)
        ordered[brand] = dict(ranked)

    return Pivot(
        columns=columns,
        dimension1_values=tuple(config.dimension1_values),
        dimension2_values=tuple(config.dimension2_values),
        brands=ordered,
    )
