"""
db/repositories/fleet_repository.py

Persistence layer for the fleet registry snapshot.

The caller controls commit/rollback; this repository never commits on
its own.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from crossref.records import FleetModel
from db.models.fleet_model import FleetModelRow
from db.repositories.errors import SnapshotPersistenceError

logger = logging.getLogger(__name__)

_DEFAULT_BATCH_SIZE = 500
# Range of the BIGINT model_id column.
_MIN_MODEL_ID = -(2**63)
_MAX_MODEL_ID = 2**63 - 1
_UPDATABLE_COLUMNS = (
    "brand",
    "model_name",
    "model_variant",
    "year_from",
    "year_to",
    "priority_category",
    "fleet_size",
    "sort_order",
    "extra",
)


def to_fleet_model(row: FleetModelRow) -> FleetModel:
    extra: dict[str, Any] = dict(row.extra or {})
    if row.model_variant:
        extra.setdefault("model_variant", row.model_variant)
    return FleetModel(
        model_id=row.model_id,
        brand=row.brand,
        model_name=row.model_name,
        year_from=row.year_from,
        year_to=row.year_to,
        priority_category=row.priority_category or "",
        fleet_size=row.fleet_size,
        sort_order=row.sort_order,
        extra=extra,
    )


def _payload(model: FleetModel) -> dict[str, Any] | None:
    key = model.join_key
    if key is None or not isinstance(key, int):
        return None
    if not _MIN_MODEL_ID <= key <= _MAX_MODEL_ID:
        return None
    extra = dict(model.extra)
    variant = extra.pop("model_variant", None)
    return {
        "model_id": key,
        "brand": model.brand,
        "model_name": model.model_name,
        "model_variant": str(variant) if variant else None,
        "year_from": model.year_from,
        "year_to": model.year_to,
        "priority_category": model.priority_category or None,
        "fleet_size": model.fleet_size,
        "sort_order": model.sort_order,
        "extra": extra or None,
    }


class FleetRepository:
    """
    Repository for reading and upserting ``fleet_models`` rows.

    Upsert semantics: a model whose ``model_id`` already exists is updated
    in place rather than raising a duplicate-key error.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def fetch_all(self) -> list[FleetModel]:
        """Return the full fleet snapshot ordered by sort order, unordered rows last."""
        stmt = select(FleetModelRow).order_by(
            FleetModelRow.sort_order.asc().nulls_last(),
            FleetModelRow.model_id.asc(),
        )
        return [to_fleet_model(row) for row in self._session.scalars(stmt)]

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def upsert(
        self,
        models: Sequence[FleetModel],
        *,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> int:
        """
        Upsert fleet models keyed by model id, in batches.

        Models without an integral id in the BIGINT range cannot be keyed and
        are skipped.
        Within one call the last occurrence of an id wins.

        Raises
        ------
        SnapshotPersistenceError
            When the database rejects a batch.
        """
        payloads: dict[int, dict[str, Any]] = {}
        skipped = 0
        for model in models:
            payload = _payload(model)
            if payload is None:
                skipped += 1
                continue
            payloads[payload["model_id"]] = payload

        if skipped:
            logger.warning("Fleet upsert skipped %d model(s) without an integral model id", skipped)
        if not payloads:
            return 0

        rows = list(payloads.values())
        size = max(1, batch_size)
        written = 0
        try:
            for start in range(0, len(rows), size):
                chunk = rows[start : start + size]
                stmt = insert(FleetModelRow).values(chunk)
                stmt = stmt.on_conflict_do_update(
                    index_elements=[FleetModelRow.model_id],
                    set_={
                        **{column: stmt.excluded[column] for column in _UPDATABLE_COLUMNS},
                        "updated_at": func.now(),
                    },
                )
                self._session.execute(stmt)
                written += len(chunk)
        except SQLAlchemyError as exc:
            raise SnapshotPersistenceError("Unable to upsert fleet snapshot.") from exc

        return written
