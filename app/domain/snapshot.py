"""
app/domain/snapshot.py

Domain models used by the snapshot upload flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RowValidationError:
    """
    One spreadsheet row validation error detail.
    """

    row_number: int
    message: str
    column: str | None = None
    value: str | None = None


@dataclass(frozen=True)
class LoadedSnapshot(Generic[T]):
    """
    Records parsed from one uploaded table.

    ``rows_failed`` counts rows rejected by row-level validation; they are
    not present in ``records``.
    """

    records: tuple[T, ...]
    rows_read: int
    rows_failed: int = 0
    validation_errors: list[RowValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class UploadSummary:
    """
    End-of-run upload summary.
    """

    rows_processed: int
    rows_failed: int
    validation_errors: list[RowValidationError] = field(default_factory=list)
