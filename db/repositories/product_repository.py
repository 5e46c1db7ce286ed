"""
db/repositories/product_repository.py

Persistence layer for parts-catalog products.

Uploads replace every product sharing a dimension1 value with the new
batch. The caller controls commit/rollback.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from crossref.keys import JoinKey, parse_code, parse_join_key
from crossref.records import ProductRecord
from db.models.product import ProductRow
from db.repositories.errors import SnapshotPersistenceError

logger = logging.getLogger(__name__)

_DEFAULT_BATCH_SIZE = 500
_DEFAULT_PAGE_SIZE = 1000
_MODEL_KEY_LENGTH: int = ProductRow.__table__.c.model_key.type.length


def to_product_record(row: ProductRow) -> ProductRecord:
    return ProductRecord(
        model_key=row.model_key,
        dimension1=row.dimension1,
        dimension2=row.dimension2 or "",
        supplier_code=row.supplier_code,
        equivalence_code=row.equivalence_code or "",
        part_number=row.part_number or "",
        part_brand=row.part_brand or "",
        description=row.description or "",
        extra=dict(row.extra or {}),
    )


def _stored_key(value: object) -> str | None:
    # Keys that cannot join any fleet model are stored as NULL.
    key = parse_join_key(value)
    if key is None:
        return None
    text = str(key)
    return text if len(text) <= _MODEL_KEY_LENGTH else None


def _payload(product: ProductRecord) -> dict[str, Any]:
    return {
        "model_key": _stored_key(product.model_key),
        "dimension1": product.dimension1,
        "dimension2": product.dimension2,
        "supplier_code": parse_code(product.supplier_code),
        "equivalence_code": product.equivalence_code or None,
        "part_number": product.part_number or None,
        "part_brand": product.part_brand or None,
        "description": product.description or None,
        "extra": dict(product.extra) or None,
    }


class ProductRepository:
    """
    Repository for ``products`` rows.
    """

    def __init__(self, session: Session, *, page_size: int = _DEFAULT_PAGE_SIZE) -> None:
        self._session = session
        self._page_size = max(1, page_size)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def fetch_dimension1_values(self) -> list[str]:
        """Return the distinct non-empty dimension1 values, sorted."""
        stmt = select(ProductRow.dimension1).distinct()
        values = {value for value in self._session.scalars(stmt) if value}
        return sorted(values)

    def fetch_by_dimension1(self, dimension1: str) -> list[ProductRecord]:
        """Return every product with the given dimension1, fetched page by page."""
        stmt = select(ProductRow).where(ProductRow.dimension1 == dimension1)
        return self._fetch_paged(stmt)

    def fetch_all(self) -> list[ProductRecord]:
        return self._fetch_paged(select(ProductRow))

    def fetch_join_keys_by_dimension1(self) -> dict[str, set[JoinKey]]:
        """
        Map each dimension1 value to the distinct parsed join keys of its products.

        Unparseable keys are left out.
        """
        stmt = select(ProductRow.dimension1, ProductRow.model_key)
        result: dict[str, set[JoinKey]] = {}
        for dimension1, raw_key in self._session.execute(stmt):
            keys = result.setdefault(dimension1, set())
            key = parse_join_key(raw_key)
            if key is not None:
                keys.add(key)
        return result

    def _fetch_paged(self, stmt: Any) -> list[ProductRecord]:
        records: list[ProductRecord] = []
        offset = 0
        ordered = stmt.order_by(ProductRow.id.asc())
        while True:
            page = list(self._session.scalars(ordered.offset(offset).limit(self._page_size)))
            records.extend(to_product_record(row) for row in page)
            if len(page) < self._page_size:
                break
            offset += self._page_size
        return records

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def replace_for_dimension1(
        self,
        products: Sequence[ProductRecord],
        *,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> int:
        """
        Delete existing products for every dimension1 in *products*, then insert them.

        Raises
        ------
        SnapshotPersistenceError
            When the delete or any insert batch fails.
        """
        dimension1_values = sorted({p.dimension1 for p in products if p.dimension1})
        payloads = [_payload(p) for p in products]
        size = max(1, batch_size)

        try:
            if dimension1_values:
                self._session.execute(
                    delete(ProductRow).where(ProductRow.dimension1.in_(dimension1_values))
                )
            for start in range(0, len(payloads), size):
                self._session.execute(insert(ProductRow), payloads[start : start + size])
        except SQLAlchemyError as exc:
            raise SnapshotPersistenceError("Unable to replace product snapshot.") from exc

        logger.info(
            "Replaced products dimension1=%s rows=%d",
            dimension1_values,
            len(payloads),
        )
        return len(payloads)
