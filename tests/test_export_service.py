"""
tests/test_export_service.py

Coverage, policy and annotation exports.
"""

from __future__ import annotations

from datetime import date

import pytest

from app.services.export_service import (
    annotation_frame,
    coverage_frame,
    display_column,
    display_columns,
    export_annotations,
    export_coverage,
    export_policy,
    policy_frame,
)
from crossref.join_index import build_index, partition
from crossref.pivot import PivotConfig, build_pivot
from crossref.records import FleetModel, ProductRecord
from db.repositories.types import AnnotationRecord
from policy.engine import evaluate


@pytest.fixture()
def fleet() -> list[FleetModel]:
    return [
        FleetModel(model_id=1, brand="VW", model_name="Golf", year_to=2010, priority_category="AA", sort_order=1),
        FleetModel(model_id=2, brand="Ford", model_name="Fiesta", year_to=1995, priority_category="AA"),
        FleetModel(model_id=3, brand="Ford", model_name="Ka", year_to=2020, priority_category="AA"),
    ]


@pytest.fixture()
def products() -> list[ProductRecord]:
    return [
        ProductRecord(model_key=1, dimension1="AA", dimension2="Filters", supplier_code="BOSCH"),
        ProductRecord(model_key=1, dimension1="AA", dimension2="Filters", supplier_code="GENERIC"),
        ProductRecord(model_key=2, dimension1="B", dimension2="Brakes", supplier_code="3"),
    ]


def _pivot(fleet: list[FleetModel], products: list[ProductRecord]):
    index = build_index(products)
    covered = partition(fleet, index.covered_ids).covered
    config = PivotConfig(dimension1_values=("AA", "B"), show_dimension2=False)
    return build_pivot(covered, index, config)


class TestCoverageExport:
    def test_columns_and_rows(self, fleet: list[FleetModel], products: list[ProductRecord]) -> None:
        frame = coverage_frame(_pivot(fleet, products))

        assert list(frame.columns) == ["Brand", "Model", "AA ALL", "B ALL", "Total Products", "Strategic Comments"]
        assert frame["Model"].tolist() == ["Fiesta", "Golf"]
        assert frame["Total Products"].tolist() == [1, 2]
        assert frame["AA ALL"].tolist() == [0, 2]

    def test_annotations_are_joined_by_model_name(self, fleet: list[FleetModel], products: list[ProductRecord]) -> None:
        note = AnnotationRecord(model_name="Golf", text="push premium", team="Sales", noted_on=date(2026, 10, 1))
        result = export_coverage(_pivot(fleet, products), [note], dimension1="AA")

        comments = dict(zip(result.frame["Model"], result.frame["Strategic Comments"]))
        assert comments == {"Fiesta": "", "Golf": "[Sales] push premium (2026-10-01)"}
        assert result.filename == "coverage_aa.csv"

    def test_csv_bytes(self, fleet: list[FleetModel], products: list[ProductRecord]) -> None:
        payload = export_coverage(_pivot(fleet, products)).to_csv_bytes().decode("utf-8")
        assert payload.splitlines()[0] == "Brand,Model,AA ALL,B ALL,Total Products,Strategic Comments"

    def test_colliding_labels_keep_raw_keys(self) -> None:
        fleet = [FleetModel(model_id=1, brand="VW", model_name="Golf")]
        products = [
            ProductRecord(model_key=1, dimension1="A", dimension2="B C"),
            ProductRecord(model_key=1, dimension1="A B", dimension2="C"),
            ProductRecord(model_key=1, dimension1="A B", dimension2="C"),
        ]
        index = build_index(products)
        config = PivotConfig(dimension1_values=("A", "A B"), dimension2_values=("B C", "C"))
        frame = coverage_frame(build_pivot(fleet, index, config))

        value_columns = ["A|B C", "A C", "A B B C", "A B|C"]
        assert list(frame.columns) == ["Brand", "Model", *value_columns, "Total Products", "Strategic Comments"]
        row = frame.iloc[0]
        assert [row[c] for c in value_columns] == [1, 0, 0, 2]
        assert sum(row[c] for c in value_columns) == row["Total Products"] == 3

    def test_labels_never_shadow_fixed_headers(self) -> None:
        assert display_columns(["Total|Products", "AA|ALL"]) == ["Total Products (2)", "AA ALL"]

    def test_display_column(self) -> None:
        assert display_column("AA|Filters") == "AA Filters"


class TestPolicyExport:
    def test_rows_follow_severity(self, fleet: list[FleetModel], products: list[ProductRecord]) -> None:
        frame = policy_frame(evaluate(fleet, build_index(products)))

        assert frame["Status"].tolist() == ["CRITICAL", "OK", "OK"]
        ka = frame.iloc[0]
        assert ka["Model"] == "Ka"
        assert ka["Segment"] == "New"
        assert ka["Suggested Actions"] == "[ADD] missing premium/original line (Purchasing)"

    def test_quality_columns(self, fleet: list[FleetModel], products: list[ProductRecord]) -> None:
        frame = policy_frame(evaluate(fleet, build_index(products)))
        golf = frame[frame["Model"] == "Golf"].iloc[0]
        assert (golf["Original"], golf["Premium"], golf["Standard"]) == (0, 1, 1)

    def test_empty_findings_keep_header(self) -> None:
        result = export_policy([])
        assert result.row_count == 0
        assert result.to_csv_bytes().decode("utf-8").startswith("Brand,Model,Year To,Segment,Status")


class TestAnnotationExport:
    def test_report_rows(self) -> None:
        records = [
            AnnotationRecord(model_name="Golf", text="push premium", team="Sales", noted_on=date(2026, 10, 1)),
            AnnotationRecord(model_name="Ka", text="review", team="Product", noted_on=date(2026, 9, 30)),
        ]
        frame = annotation_frame(records)
        assert list(frame.columns) == ["Model", "Comment", "Team", "Date"]
        assert frame["Date"].tolist() == ["2026-10-01", "2026-09-30"]
        assert export_annotations(records).filename == "annotations_report.csv"
