"""
app/services/snapshot_loader.py

Turns uploaded fleet and product tables into core records.

Shape problems (unreadable file, missing required columns) raise
:class:`SnapshotShapeError` before any record is produced. Row-level
problems are collected as :class:`RowValidationError` and the row is
skipped. Unparseable join keys are NOT row errors: such rows are kept and
simply never join.
"""

from __future__ import annotations

import io
import logging
from typing import Any, Mapping

import pandas as pd

from app.domain.snapshot import LoadedSnapshot, RowValidationError
from app.validators.snapshot_validator import (
    ShapeErrorDetail,
    SnapshotHeaderValidator,
    SnapshotShapeError,
    fleet_header_validator,
    product_header_validator,
)
from crossref.keys import parse_code, parse_int, parse_text
from crossref.records import FleetModel, ProductRecord
from db.models.fleet_model import FleetModelRow
from db.models.product import ProductRow

logger = logging.getLogger(__name__)

_DEFAULT_MAX_ERRORS = 500


def _text_limits(model: type, fields: tuple[str, ...]) -> dict[str, int]:
    columns = model.__table__.columns
    return {field: columns[field].type.length for field in fields}


# Cells longer than the stored column are row errors, not upload failures.
PRODUCT_TEXT_LIMITS: dict[str, int] = _text_limits(
    ProductRow,
    ("dimension1", "dimension2", "supplier_code", "equivalence_code", "part_number", "part_brand"),
)
FLEET_TEXT_LIMITS: dict[str, int] = _text_limits(
    FleetModelRow,
    ("brand", "model_name", "model_variant", "priority_category"),
)


def read_csv_table(data: bytes) -> pd.DataFrame:
    """
    Parse CSV bytes into a DataFrame of strings; blank cells become ``""``.

    Raises
    ------
    SnapshotShapeError
        When the payload is empty, not UTF-8, or not parseable as CSV.
    """
    try:
        return pd.read_csv(
            io.BytesIO(data),
            dtype=str,
            keep_default_na=False,
            encoding="utf-8-sig",
        )
    except pd.errors.EmptyDataError as exc:
        raise SnapshotShapeError(
            message="The uploaded table is empty.",
            errors=[ShapeErrorDetail(code="empty_table", message="No header row or data.")],
        ) from exc
    except UnicodeDecodeError as exc:
        raise SnapshotShapeError(message="The uploaded table must be UTF-8 encoded.") from exc
    except pd.errors.ParserError as exc:
        raise SnapshotShapeError(message=f"Invalid CSV format: {exc}") from exc


class SnapshotLoader:
    """
    Maps source rows to :class:`ProductRecord` / :class:`FleetModel`.
    """

    def __init__(
        self,
        *,
        max_validation_errors: int = _DEFAULT_MAX_ERRORS,
        product_validator: SnapshotHeaderValidator | None = None,
        fleet_validator: SnapshotHeaderValidator | None = None,
    ) -> None:
        self._max_validation_errors = max(1, max_validation_errors)
        self._product_validator = product_validator or product_header_validator()
        self._fleet_validator = fleet_validator or fleet_header_validator()

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def load_products_csv(self, data: bytes) -> LoadedSnapshot[ProductRecord]:
        return self.load_products(read_csv_table(data))

    def load_products(self, frame: pd.DataFrame) -> LoadedSnapshot[ProductRecord]:
        mapping = self._product_validator.resolve([str(c) for c in frame.columns])
        records: list[ProductRecord] = []
        errors: list[RowValidationError] = []
        failed = 0

        for row_number, row in enumerate(frame.to_dict("records"), start=2):
            if _is_blank_row(row):
                failed += 1
                self._record(errors, RowValidationError(
                    row_number=row_number,
                    message="Completely empty rows are not allowed.",
                ))
                continue

            dimension1 = parse_text(row.get(mapping["dimension1"]))
            if not dimension1:
                failed += 1
                self._record(errors, RowValidationError(
                    row_number=row_number,
                    column=mapping["dimension1"],
                    message="Dimension 1 value is required.",
                ))
                continue

            oversized = self._check_lengths(row, mapping, PRODUCT_TEXT_LIMITS, row_number)
            if oversized is not None:
                failed += 1
                self._record(errors, oversized)
                continue

            records.append(
                ProductRecord(
                    model_key=_cell(row, mapping, "model_key"),
                    dimension1=dimension1,
                    dimension2=parse_text(_cell(row, mapping, "dimension2")),
                    supplier_code=parse_code(_cell(row, mapping, "supplier_code")),
                    equivalence_code=parse_text(_cell(row, mapping, "equivalence_code")),
                    part_number=parse_text(_cell(row, mapping, "part_number")),
                    part_brand=parse_text(_cell(row, mapping, "part_brand")),
                    description=parse_text(_cell(row, mapping, "description")),
                    extra=_extra(row, mapping),
                )
            )

        logger.info("Loaded products rows=%d failed=%d", len(records), failed)
        return LoadedSnapshot(
            records=tuple(records),
            rows_read=len(frame),
            rows_failed=failed,
            validation_errors=errors,
        )

    # ------------------------------------------------------------------
    # Fleet
    # ------------------------------------------------------------------

    def load_fleet_csv(self, data: bytes) -> LoadedSnapshot[FleetModel]:
        return self.load_fleet(read_csv_table(data))

    def load_fleet(self, frame: pd.DataFrame) -> LoadedSnapshot[FleetModel]:
        mapping = self._fleet_validator.resolve([str(c) for c in frame.columns])
        records: list[FleetModel] = []
        errors: list[RowValidationError] = []
        failed = 0

        for row_number, row in enumerate(frame.to_dict("records"), start=2):
            if _is_blank_row(row):
                failed += 1
                self._record(errors, RowValidationError(
                    row_number=row_number,
                    message="Completely empty rows are not allowed.",
                ))
                continue

            oversized = self._check_lengths(row, mapping, FLEET_TEXT_LIMITS, row_number)
            if oversized is not None:
                failed += 1
                self._record(errors, oversized)
                continue

            sort_order = parse_int(_cell(row, mapping, "sort_order_override"))
            if sort_order is None:
                sort_order = parse_int(_cell(row, mapping, "sort_order"))

            extra = _extra(row, mapping)
            variant = parse_text(_cell(row, mapping, "model_variant"))
            if variant:
                extra["model_variant"] = variant

            records.append(
                FleetModel(
                    model_id=_cell(row, mapping, "model_id"),
                    brand=parse_text(_cell(row, mapping, "brand")),
                    model_name=parse_text(_cell(row, mapping, "model_name")),
                    year_from=parse_int(_cell(row, mapping, "year_from")),
                    year_to=parse_int(_cell(row, mapping, "year_to")),
                    priority_category=parse_text(_cell(row, mapping, "priority_category")),
                    fleet_size=parse_int(_cell(row, mapping, "fleet_size")),
                    sort_order=sort_order,
                    extra=extra,
                )
            )

        logger.info("Loaded fleet rows=%d failed=%d", len(records), failed)
        return LoadedSnapshot(
            records=tuple(records),
            rows_read=len(frame),
            rows_failed=failed,
            validation_errors=errors,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_lengths(
        self,
        row: Mapping[str, Any],
        mapping: Mapping[str, str],
        limits: Mapping[str, int],
        row_number: int,
    ) -> RowValidationError | None:
        for field, limit in limits.items():
            header = mapping.get(field)
            if header is None:
                continue
            text = parse_text(row.get(header))
            if len(text) > limit:
                return RowValidationError(
                    row_number=row_number,
                    column=header,
                    message=f"Value is longer than {limit} characters.",
                    value=text[:limit],
                )
        return None

    def _record(self, errors: list[RowValidationError], error: RowValidationError) -> None:
        if len(errors) < self._max_validation_errors:
            errors.append(error)


def _cell(row: Mapping[str, Any], mapping: Mapping[str, str], field: str) -> Any:
    header = mapping.get(field)
    if header is None:
        return None
    return row.get(header)


def _is_blank_row(row: Mapping[str, Any]) -> bool:
    return all(not parse_text(value) for value in row.values())


def _extra(row: Mapping[str, Any], mapping: Mapping[str, str]) -> dict[str, Any]:
    claimed = set(mapping.values())
    return {
        str(header): parse_text(value)
        for header, value in row.items()
        if header not in claimed and parse_text(value)
    }

