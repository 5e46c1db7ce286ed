"""
app/services/export_service.py

Tabular exports of coverage, policy and annotation data.

Three datasets, each a flat pandas DataFrame with a fixed column order:

    coverage    → one row per pivot model, one column per pivot column
    policy      → one row per policy finding
    annotations → one row per model annotation

Pivot column labels are rendered with their ``|`` separator replaced by a
space (``AA|Filter`` → ``AA Filter``); labels that would collide keep the
raw key. No business logic lives here: the
DataFrames only reshape results computed by the core packages.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

import pandas as pd

from crossref.pivot import COLUMN_SEPARATOR, Pivot
from db.repositories.types import AnnotationRecord
from policy.engine import PolicyFinding

COVERAGE_LEADING_COLUMNS: tuple[str, ...] = ("Brand", "Model")
COVERAGE_TRAILING_COLUMNS: tuple[str, ...] = ("Total Products", "Strategic Comments")
POLICY_COLUMNS: tuple[str, ...] = (
    "Brand",
    "Model",
    "Year To",
    "Segment",
    "Status",
    "Original",
    "Premium",
    "Standard",
    "Suggested Actions",
)
ANNOTATION_COLUMNS: tuple[str, ...] = ("Model", "Comment", "Team", "Date")

ACTION_SEPARATOR = " | "


@dataclass(frozen=True)
class ExportResult:
    """
    Export payload ready for download.

    Attributes
    ----------
    frame:    Flat table in presentation order.
    filename: Suggested download file name.
    """

    frame: pd.DataFrame
    filename: str

    @property
    def row_count(self) -> int:
        return len(self.frame)

    def to_csv_bytes(self) -> bytes:
        return frame_to_csv_bytes(self.frame)


def display_column(column: str) -> str:
    """Render a pivot column label for humans (``d1|d2`` → ``d1 d2``)."""
    return column.replace(COLUMN_SEPARATOR, " ")


def display_columns(columns: Iterable[str]) -> list[str]:
    """
    Render pivot column labels, keeping them unique.

    Columns whose rendered labels collide keep their raw ``d1|d2`` key;
    a numeric suffix resolves any clash that remains, including clashes
    with the fixed coverage headers.
    """
    columns = list(columns)
    rendered = [display_column(column) for column in columns]
    counts = Counter(rendered)
    reserved = {*COVERAGE_LEADING_COLUMNS, *COVERAGE_TRAILING_COLUMNS}

    labels: list[str] = []
    for column, label in zip(columns, rendered):
        base = column if counts[label] > 1 else label
        unique = base
        suffix = 2
        while unique in reserved:
            unique = f"{base} ({suffix})"
            suffix += 1
        reserved.add(unique)
        labels.append(unique)
    return labels


def frame_to_csv_bytes(frame: pd.DataFrame) -> bytes:
    return frame.to_csv(index=False).encode("utf-8")


# ---------------------------------------------------------------------------
# Frames
# ---------------------------------------------------------------------------


def coverage_frame(
    pivot: Pivot,
    annotations: Mapping[str, AnnotationRecord] | None = None,
) -> pd.DataFrame:
    """
    Flatten *pivot* into one row per model.

    ``annotations`` is keyed by model name; models without one get an empty
    ``Strategic Comments`` cell.
    """
    annotations = annotations or {}
    value_columns = display_columns(pivot.columns)
    columns = [*COVERAGE_LEADING_COLUMNS, *value_columns, *COVERAGE_TRAILING_COLUMNS]

    rows: list[dict[str, Any]] = []
    for model in pivot.iter_models():
        row: dict[str, Any] = {"Brand": model.brand, "Model": model.model_name}
        for column, label in zip(pivot.columns, value_columns):
            row[label] = model.counts.get(column, 0)
        annotation = annotations.get(model.model_name)
        row["Total Products"] = model.total
        row["Strategic Comments"] = annotation.describe() if annotation else ""
        rows.append(row)

    return pd.DataFrame(rows, columns=columns)


def policy_frame(findings: Iterable[PolicyFinding]) -> pd.DataFrame:
    rows = [
        {
            "Brand": finding.brand,
            "Model": finding.model_name,
            "Year To": finding.year_to if finding.year_to is not None else "",
            "Segment": finding.age_segment.value,
            "Status": finding.status.value,
            "Original": finding.quality_mix.original,
            "Premium": finding.quality_mix.premium,
            "Standard": finding.quality_mix.standard,
            "Suggested Actions": ACTION_SEPARATOR.join(a.describe() for a in finding.actions),
        }
        for finding in findings
    ]
    return pd.DataFrame(rows, columns=list(POLICY_COLUMNS))


def annotation_frame(records: Iterable[AnnotationRecord]) -> pd.DataFrame:
    rows = [
        {
            "Model": record.model_name,
            "Comment": record.text,
            "Team": record.team,
            "Date": record.noted_on.isoformat(),
        }
        for record in records
    ]
    return pd.DataFrame(rows, columns=list(ANNOTATION_COLUMNS))


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


def _slug(value: str | None) -> str:
    if not value:
        return "all"
    return "_".join(value.split()).lower()


def export_coverage(
    pivot: Pivot,
    annotations: Iterable[AnnotationRecord] = (),
    *,
    dimension1: str | None = None,
) -> ExportResult:
    by_model = {record.model_name: record for record in annotations}
    return ExportResult(
        frame=coverage_frame(pivot, by_model),
        filename=f"coverage_{_slug(dimension1)}.csv",
    )


def export_policy(
    findings: Iterable[PolicyFinding],
    *,
    dimension1: str | None = None,
) -> ExportResult:
    return ExportResult(
        frame=policy_frame(findings),
        filename=f"policy_{_slug(dimension1)}.csv",
    )


def export_annotations(records: Iterable[AnnotationRecord]) -> ExportResult:
    return ExportResult(frame=annotation_frame(records), filename="annotations_report.csv")
