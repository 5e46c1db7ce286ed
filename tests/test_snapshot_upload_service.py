"""
tests/test_snapshot_upload_service.py

Transaction handling of SnapshotUploadService with fake repositories.
"""

from __future__ import annotations

import io

import pytest

from app.services import snapshot_upload_service as upload_module
from app.services.snapshot_upload_service import SnapshotUploadService
from app.validators.snapshot_validator import SnapshotShapeError
from db.repositories.errors import SnapshotPersistenceError


class _FakeSession:
    def __init__(self) -> None:
        self.commits = 0
        self.rollbacks = 0

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


class _FakeFleetRepository:
    written: list = []
    fail = False

    def __init__(self, session: _FakeSession) -> None:
        self._session = session

    def upsert(self, models, *, batch_size: int) -> int:
        if self.fail:
            raise SnapshotPersistenceError("boom")
        keyed = [m for m in models if isinstance(m.join_key, int)]
        type(self).written = keyed
        return len(keyed)


class _FakeProductRepository:
    written: list = []

    def __init__(self, session: _FakeSession) -> None:
        self._session = session

    def replace_for_dimension1(self, products, *, batch_size: int) -> int:
        type(self).written = list(products)
        return len(products)


@pytest.fixture()
def service(monkeypatch: pytest.MonkeyPatch) -> SnapshotUploadService:
    _FakeFleetRepository.fail = False
    _FakeFleetRepository.written = []
    _FakeProductRepository.written = []
    monkeypatch.setattr(upload_module, "FleetRepository", _FakeFleetRepository)
    monkeypatch.setattr(upload_module, "ProductRepository", _FakeProductRepository)
    return SnapshotUploadService(batch_size=100, max_validation_errors=10, log_validation_errors=False)


class TestFleetUpload:
    def test_commits_and_summarises(self, service: SnapshotUploadService) -> None:
        session = _FakeSession()
        data = b"IDMODELO,MARCA,MODELO,HASTA\n1,Ford,Fiesta,2012\n2,VW,Golf,2019\n"

        summary = service.upload_fleet(source=io.BytesIO(data), db=session)

        assert session.commits == 1
        assert session.rollbacks == 0
        assert summary.rows_processed == 2
        assert summary.rows_failed == 0
        assert [m.model_name for m in _FakeFleetRepository.written] == ["Fiesta", "Golf"]

    def test_unkeyable_rows_count_as_failed(self, service: SnapshotUploadService) -> None:
        data = b"IDMODELO,MARCA,MODELO\n1,Ford,Fiesta\nabc,VW,Golf\n"

        summary = service.upload_fleet(source=io.BytesIO(data), db=_FakeSession())

        assert summary.rows_processed == 1
        assert summary.rows_failed == 1

    def test_persistence_failure_rolls_back(self, service: SnapshotUploadService) -> None:
        _FakeFleetRepository.fail = True
        session = _FakeSession()

        with pytest.raises(SnapshotPersistenceError):
            service.upload_fleet(source=io.BytesIO(b"IDMODELO\n1\n"), db=session)

        assert session.commits == 0
        assert session.rollbacks == 1

    def test_shape_error_touches_nothing(self, service: SnapshotUploadService) -> None:
        session = _FakeSession()

        with pytest.raises(SnapshotShapeError):
            service.upload_fleet(source=io.BytesIO(b"MARCA,MODELO\nFord,Fiesta\n"), db=session)

        assert session.commits == 0
        assert session.rollbacks == 0


class TestProductUpload:
    def test_validation_errors_reported(self, service: SnapshotUploadService) -> None:
        session = _FakeSession()
        data = b"Stmvid,Nivel 1,Nivel 2,Proveedor\n1,AA,Filters,BOSCH\n2,,Brakes,SKF\n"

        summary = service.upload_products(source=io.BytesIO(data), db=session)

        assert session.commits == 1
        assert summary.rows_processed == 1
        assert summary.rows_failed == 1
        assert summary.validation_errors[0].row_number == 3
        assert _FakeProductRepository.written[0].supplier_code == "BOSCH"

    def test_oversized_cell_skips_only_its_row(self, service: SnapshotUploadService) -> None:
        session = _FakeSession()
        long_key = "k" * 70
        data = (
            "Stmvid,Nivel 1,Nivel 2,Proveedor\n"
            f"{long_key},AA,Filters,BOSCH\n"
            f"2,AA,Filters,{'S' * 130}\n"
            "3,AA,Brakes,SKF\n"
        ).encode("utf-8")

        summary = service.upload_products(source=io.BytesIO(data), db=session)

        assert session.commits == 1
        assert summary.rows_processed == 2
        assert summary.rows_failed == 1
        assert summary.validation_errors[0].column == "Proveedor"
        assert [p.model_key for p in _FakeProductRepository.written] == [long_key, "3"]
