"""
crossref/join_index.py

Fleet/product join index and the covered/uncovered fleet partition.

The join is best-effort: rows whose key does not parse as a number are
left out of the index without raising.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Mapping

from crossref.keys import JoinKey, parse_join_key
from crossref.records import FleetModel, ProductRecord

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY_TIERS: tuple[str, ...] = ("AA", "A", "B", "C")


@dataclass(frozen=True)
class JoinIndex:
    """
    Lookup from numeric model id to the products joined to it.

    Every key maps to at least one product; ``covered_ids`` is exactly the
    key set.
    """

    products_by_model: Mapping[JoinKey, tuple[ProductRecord, ...]] = field(default_factory=dict)

    @property
    def covered_ids(self) -> frozenset[JoinKey]:
        return frozenset(self.products_by_model)

    def products_for(self, model: FleetModel) -> tuple[ProductRecord, ...]:
        key = model.join_key
        if key is None:
            return ()
        return self.products_by_model.get(key, ())

    def __contains__(self, key: object) -> bool:
        return key in self.products_by_model

    def __len__(self) -> int:
        return len(self.products_by_model)


@dataclass(frozen=True)
class FleetPartition:
    covered: tuple[FleetModel, ...]
    uncovered: tuple[FleetModel, ...]


def build_index(products: Iterable[ProductRecord]) -> JoinIndex:
    """
    Group products by their parsed join key.

    Products keep their input order inside each group.
    """
    grouped: dict[JoinKey, list[ProductRecord]] = {}
    skipped = 0
    for product in products:
        key = product.join_key
        if key is None:
            skipped += 1
            continue
        grouped.setdefault(key, []).append(product)

    if skipped:
        logger.debug("Join index skipped %d product(s) with unparseable model keys", skipped)

    return JoinIndex(products_by_model={key: tuple(group) for key, group in grouped.items()})


def partition(
    fleet: Iterable[FleetModel],
    covered_ids: frozenset[JoinKey] | set[JoinKey],
) -> FleetPartition:
    """
    Split the fleet into covered and uncovered models.

    A model with an unparseable id is always uncovered. Input order is kept
    in both outputs.
    """
    covered: list[FleetModel] = []
    uncovered: list[FleetModel] = []
    for model in fleet:
        key = model.join_key
        if key is not None and key in covered_ids:
            covered.append(model)
        else:
            uncovered.append(model)
    return FleetPartition(covered=tuple(covered), uncovered=tuple(uncovered))


def exclude_suppliers(
    products: Iterable[ProductRecord],
    supplier_codes: Iterable[int],
) -> tuple[ProductRecord, ...]:
    """
    Drop products whose supplier code numerically equals one of *supplier_codes*.

    Non-numeric supplier codes never match.
    """
    excluded = {parse_join_key(code) for code in supplier_codes} - {None}
    if not excluded:
        return tuple(products)
    return tuple(p for p in products if parse_join_key(p.supplier_code) not in excluded)


def detect_dimension_values(
    products: Iterable[ProductRecord],
    priority_order: Sequence[str] = DEFAULT_PRIORITY_TIERS,
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """
    Return the distinct non-empty dimension1 and dimension2 values.

    Dimension1 values listed in *priority_order* come first in that order;
    the rest follow lexicographically. Dimension2 values are lexicographic.
    """
    dim1: set[str] = set()
    dim2: set[str] = set()
    for product in products:
        if product.dimension1:
            dim1.add(product.dimension1)
        if product.dimension2:
            dim2.add(product.dimension2)

    rank = {value: position for position, value in enumerate(priority_order)}
    unranked = len(rank)
    ordered_dim1 = sorted(dim1, key=lambda value: (rank.get(value, unranked), value))
    return tuple(ordered_dim1), tuple(sorted(dim2))
