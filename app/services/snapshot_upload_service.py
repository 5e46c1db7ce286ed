"""
app/services/snapshot_upload_service.py

Service layer for fleet and product snapshot uploads.

Each upload is one transaction: the table is parsed and shape-checked,
valid rows are written through the repository, and the session is
committed. Any persistence failure rolls the whole upload back.

    fleet     → FleetRepository.upsert (keyed by model id)
    products  → ProductRepository.replace_for_dimension1
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import BinaryIO

from sqlalchemy.orm import Session

from app.config import get_upload_settings
from app.domain.snapshot import LoadedSnapshot, RowValidationError, UploadSummary
from app.services.snapshot_loader import SnapshotLoader
from db.repositories.errors import SnapshotPersistenceError
from db.repositories.fleet_repository import FleetRepository
from db.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class SnapshotUploadService:
    """
    Coordinates parsing, row validation and persistence of uploaded snapshots.
    """

    def __init__(
        self,
        *,
        batch_size: int,
        max_validation_errors: int,
        log_validation_errors: bool = True,
        loader: SnapshotLoader | None = None,
    ) -> None:
        self._batch_size = max(1, batch_size)
        self._log_validation_errors = log_validation_errors
        self._loader = loader or SnapshotLoader(max_validation_errors=max_validation_errors)

    def upload_fleet(self, *, source: BinaryIO, db: Session) -> UploadSummary:
        """
        Parse a fleet table and upsert its models.

        Raises
        ------
        SnapshotShapeError
            When the table cannot be read or lacks required columns.
        SnapshotPersistenceError
            When the database rejects the upsert; the session is rolled back.
        """
        snapshot = self._loader.load_fleet_csv(source.read())
        self._log_errors("fleet", snapshot.validation_errors)

        try:
            written = FleetRepository(db).upsert(snapshot.records, batch_size=self._batch_size)
            db.commit()
        except SnapshotPersistenceError:
            db.rollback()
            logger.exception("Fleet upload failed rows=%d", len(snapshot.records))
            raise

        logger.info(
            "Fleet upload complete read=%d written=%d failed=%d",
            snapshot.rows_read,
            written,
            snapshot.rows_failed,
        )
        return _summary(snapshot, written)

    def upload_products(self, *, source: BinaryIO, db: Session) -> UploadSummary:
        """
        Parse a product table and replace the stored products of every
        dimension1 value it contains.

        Raises
        ------
        SnapshotShapeError
            When the table cannot be read or lacks required columns.
        SnapshotPersistenceError
            When the database rejects the replace; the session is rolled back.
        """
        snapshot = self._loader.load_products_csv(source.read())
        self._log_errors("products", snapshot.validation_errors)

        try:
            written = ProductRepository(db).replace_for_dimension1(
                snapshot.records,
                batch_size=self._batch_size,
            )
            db.commit()
        except SnapshotPersistenceError:
            db.rollback()
            logger.exception("Product upload failed rows=%d", len(snapshot.records))
            raise

        logger.info(
            "Product upload complete read=%d written=%d failed=%d",
            snapshot.rows_read,
            written,
            snapshot.rows_failed,
        )
        return _summary(snapshot, written)

    def _log_errors(self, table: str, errors: list[RowValidationError]) -> None:
        if not self._log_validation_errors:
            return
        for error in errors:
            logger.warning(
                "%s validation error row=%s column=%s message=%s value=%r",
                table,
                error.row_number,
                error.column,
                error.message,
                error.value,
            )


def _summary(snapshot: LoadedSnapshot, written: int) -> UploadSummary:
    # Rows dropped by the repository (e.g. fleet rows without an integral id)
    # count as failed.
    return UploadSummary(
        rows_processed=written,
        rows_failed=snapshot.rows_failed + (len(snapshot.records) - written),
        validation_errors=list(snapshot.validation_errors),
    )


@lru_cache(maxsize=1)
def get_snapshot_upload_service() -> SnapshotUploadService:
    """
    Build and cache the upload service with env-driven settings.
    """
    settings = get_upload_settings()
    return SnapshotUploadService(
        batch_size=settings.batch_size,
        max_validation_errors=settings.max_validation_errors,
    )
