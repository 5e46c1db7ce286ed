"""
tests/test_api_routes.py

HTTP contract tests for the upload, coverage and annotation routers.

The database is never touched: ``get_db`` yields an in-memory fake
session, the coverage service runs the pure pipeline over fixed
snapshots, and the annotation repository is replaced by a dict-backed
fake so the real AnnotationService logic is exercised.
"""

from __future__ import annotations

from datetime import date

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.routers import annotation_router, coverage_router, upload_router
from app.config import CoverageSettings
from app.domain.snapshot import UploadSummary
from app.services import annotation_service as annotation_module
from app.services.annotation_service import AnnotationService, get_annotation_service
from app.services.coverage_orchestrator import AnalysisRequest, analyze, get_coverage_service
from app.services.snapshot_loader import SnapshotLoader
from app.services.snapshot_upload_service import get_snapshot_upload_service
from crossref.records import FleetModel, ProductRecord
from crossref.stats import compute_dimension_coverage
from db.repositories.errors import AnnotationNotFoundError
from db.repositories.types import AnnotationRecord
from db.session import get_db

FLEET = [
    FleetModel(model_id=1, brand="Ford", model_name="Fiesta", year_to=2012, priority_category="AA"),
    FleetModel(model_id=2, brand="VW", model_name="Golf", year_to=2019, priority_category="AA"),
]
PRODUCTS = [
    ProductRecord(model_key=1, dimension1="AA", dimension2="Filters", supplier_code="BOSCH"),
    ProductRecord(model_key=1, dimension1="AA", dimension2="Filters", supplier_code="GENERIC"),
]


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class _FakeSession:
    def __init__(self) -> None:
        self.annotations: dict[str, AnnotationRecord] = {}
        self.commits = 0
        self.rollbacks = 0

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


class _MemoryAnnotationRepository:
    def __init__(self, session: _FakeSession) -> None:
        self._store = session.annotations

    def list_all(self) -> list[AnnotationRecord]:
        return [self._store[name] for name in sorted(self._store)]

    def get(self, model_name: str) -> AnnotationRecord:
        if model_name not in self._store:
            raise AnnotationNotFoundError(f"No annotation for model {model_name!r}.")
        return self._store[model_name]

    def save(self, *, model_name: str, text: str, team: str, noted_on: date) -> AnnotationRecord:
        record = AnnotationRecord(model_name=model_name, text=text, team=team, noted_on=noted_on)
        self._store[model_name] = record
        return record

    def delete(self, model_name: str) -> bool:
        return self._store.pop(model_name, None) is not None


class _FakeCoverageService:
    settings = CoverageSettings()

    def analyze(self, db: object, request: AnalysisRequest):
        return analyze(FLEET, PRODUCTS, request, settings=self.settings)

    def dimension1_values(self, db: object) -> list[str]:
        return sorted({p.dimension1 for p in PRODUCTS})

    def global_summary(self, db: object, *, sort_by: str = "dimension1"):
        return compute_dimension_coverage(FLEET, {"AA": {1}, "B": {1, 2}}, sort_by=sort_by)


class _LoaderOnlyUploadService:
    def __init__(self) -> None:
        self._loader = SnapshotLoader()

    def upload_fleet(self, *, source, db) -> UploadSummary:
        snapshot = self._loader.load_fleet_csv(source.read())
        return UploadSummary(len(snapshot.records), snapshot.rows_failed, snapshot.validation_errors)

    def upload_products(self, *, source, db) -> UploadSummary:
        snapshot = self._loader.load_products_csv(source.read())
        return UploadSummary(len(snapshot.records), snapshot.rows_failed, snapshot.validation_errors)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def session() -> _FakeSession:
    return _FakeSession()


@pytest.fixture()
def client(session: _FakeSession, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    monkeypatch.setattr(annotation_module, "AnnotationRepository", _MemoryAnnotationRepository)

    application = FastAPI()
    application.include_router(upload_router)
    application.include_router(coverage_router)
    application.include_router(annotation_router)

    def _fake_db():
        yield session

    annotations = AnnotationService(teams=("Sales", "Purchasing"))
    application.dependency_overrides[get_db] = _fake_db
    application.dependency_overrides[get_coverage_service] = _FakeCoverageService
    application.dependency_overrides[get_annotation_service] = lambda: annotations
    application.dependency_overrides[get_snapshot_upload_service] = _LoaderOnlyUploadService
    return TestClient(application)


# ---------------------------------------------------------------------------
# Uploads
# ---------------------------------------------------------------------------


class TestUploadRoutes:
    def test_fleet_upload_summary(self, client: TestClient) -> None:
        data = b"IDMODELO,MARCA,MODELO\n1,Ford,Fiesta\n,,\n"
        response = client.post("/uploads/fleet", files={"file": ("fleet.csv", data, "text/csv")})

        assert response.status_code == 200
        body = response.json()
        assert body["table"] == "fleet"
        assert body["rows_processed"] == 1
        assert body["rows_failed"] == 1
        assert body["validation_errors"][0]["row_number"] == 3

    def test_missing_columns_is_bad_request(self, client: TestClient) -> None:
        data = b"Stmvid,Nivel 1\n1,AA\n"
        response = client.post("/uploads/products", files={"file": ("products.csv", data, "text/csv")})

        assert response.status_code == 400
        assert response.json()["detail"]["errors"][0]["field"] == "dimension2"

    def test_non_csv_file_is_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/uploads/fleet",
            files={"file": ("fleet.xlsx", b"binary", "application/octet-stream")},
        )
        assert response.status_code == 400


# ---------------------------------------------------------------------------
# Coverage
# ---------------------------------------------------------------------------


class TestCoverageRoutes:
    def test_analysis(self, client: TestClient) -> None:
        response = client.post("/coverage/analysis", json={"show_dimension2": False})

        assert response.status_code == 200
        body = response.json()
        assert body["stats"]["coverage_pct"] == "50.0"
        assert body["pivot"]["columns"] == ["AA|ALL"]
        assert body["pivot"]["brands"]["Ford"]["Fiesta"]["total"] == 2
        assert body["uncovered_models"][0]["model_name"] == "Golf"
        assert body["findings"][0]["status"] == "CRITICAL"

    def test_analysis_rejects_unknown_segment(self, client: TestClient) -> None:
        response = client.post("/coverage/analysis", json={"policy_segment": "Classic"})
        assert response.status_code == 422

    def test_dimension1_values(self, client: TestClient) -> None:
        response = client.get("/coverage/dimensions")
        assert response.status_code == 200
        assert response.json() == ["AA"]

    def test_global_summary(self, client: TestClient) -> None:
        response = client.get("/coverage/global", params={"sort_by": "percentage"})

        assert response.status_code == 200
        body = response.json()
        assert [row["dimension1"] for row in body["rows"]] == ["B", "AA"]
        assert body["best"] == "B"
        assert body["worst"] == "AA"

    def test_global_summary_bad_sort(self, client: TestClient) -> None:
        assert client.get("/coverage/global", params={"sort_by": "brand"}).status_code == 400

    def test_coverage_export_includes_comments(self, client: TestClient, session: _FakeSession) -> None:
        session.annotations["Fiesta"] = AnnotationRecord(
            model_name="Fiesta", text="keep stock", team="Sales", noted_on=date(2026, 10, 2)
        )
        response = client.get("/coverage/export.csv", params={"show_dimension2": "false"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.headers["x-row-count"] == "1"
        lines = response.text.splitlines()
        assert lines[0] == "Brand,Model,AA ALL,Total Products,Strategic Comments"
        assert lines[1] == "Ford,Fiesta,2,2,[Sales] keep stock (2026-10-02)"

    def test_policy_export_segment_filter(self, client: TestClient) -> None:
        response = client.get("/policy/export.csv", params={"segment": "New"})

        assert response.status_code == 200
        lines = response.text.splitlines()
        assert len(lines) == 2
        assert lines[1].startswith("VW,Golf,2019,New,CRITICAL")

    def test_policy_export_bad_segment(self, client: TestClient) -> None:
        assert client.get("/policy/export.csv", params={"segment": "Classic"}).status_code == 400


# ---------------------------------------------------------------------------
# Annotations
# ---------------------------------------------------------------------------


class TestAnnotationRoutes:
    def test_put_then_get(self, client: TestClient, session: _FakeSession) -> None:
        response = client.put(
            "/annotations/Golf",
            json={"text": "  push premium ", "team": "Sales", "noted_on": "2026-10-19"},
        )

        assert response.status_code == 200
        assert response.json()["text"] == "push premium"
        assert session.commits == 1
        assert client.get("/annotations/Golf").json()["team"] == "Sales"

    def test_blank_text_deletes(self, client: TestClient, session: _FakeSession) -> None:
        client.put("/annotations/Golf", json={"text": "note", "team": "Sales"})
        response = client.put("/annotations/Golf", json={"text": "   ", "team": "Sales"})

        assert response.status_code == 204
        assert "Golf" not in session.annotations
        assert client.get("/annotations/Golf").status_code == 404

    def test_unknown_team_is_rejected(self, client: TestClient, session: _FakeSession) -> None:
        response = client.put("/annotations/Golf", json={"text": "note", "team": "Marketing"})
        assert response.status_code == 400
        assert session.annotations == {}

    def test_delete_missing_is_not_found(self, client: TestClient) -> None:
        assert client.delete("/annotations/Nope").status_code == 404

    def test_list_and_export(self, client: TestClient) -> None:
        client.put("/annotations/Ka", json={"text": "review", "team": "Purchasing", "noted_on": "2026-10-01"})

        listing = client.get("/annotations").json()
        assert listing["teams"] == ["Sales", "Purchasing"]
        assert [a["model_name"] for a in listing["annotations"]] == ["Ka"]

        report = client.get("/annotations/export.csv").text.splitlines()
        assert report == ["Model,Comment,Team,Date", "Ka,review,Purchasing,2026-10-01"]
