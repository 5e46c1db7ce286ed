"""
crossref/records.py

Input record types for the coverage cross-reference.

Both record types carry a strict set of core fields plus an opaque
``extra`` mapping holding any additional source columns. Core logic never
reads ``extra``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from crossref.keys import JoinKey, parse_join_key


@dataclass(frozen=True)
class ProductRecord:
    """
    One parts-catalog entry.

    ``model_key`` is kept exactly as loaded; it is parsed only when the
    join index is built, so an unparseable key stays visible in raw listings.
    """

    model_key: object
    dimension1: str
    dimension2: str
    supplier_code: str | int | float | None = None
    equivalence_code: str = ""
    part_number: str = ""
    part_brand: str = ""
    description: str = ""
    extra: Mapping[str, Any] = field(default_factory=dict)

    @property
    def join_key(self) -> JoinKey | None:
        return parse_join_key(self.model_key)


@dataclass(frozen=True)
class FleetModel:
    """
    One vehicle model from the fleet registry ("park").
    """

    model_id: object
    brand: str
    model_name: str
    year_from: int | None = None
    year_to: int | None = None
    priority_category: str = ""
    fleet_size: int | None = None
    sort_order: int | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    @property
    def join_key(self) -> JoinKey | None:
        return parse_join_key(self.model_id)
