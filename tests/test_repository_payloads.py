"""
tests/test_repository_payloads.py

Row payloads written by the fleet and product repositories.

No database is needed: payloads are plain dicts built before the insert
statement, so stored values can be checked against the column limits.
"""

from __future__ import annotations

import pytest

from crossref.records import FleetModel, ProductRecord
from db.models.product import ProductRow
from db.repositories import fleet_repository, product_repository


def _product(key: object, supplier: object = None) -> ProductRecord:
    return ProductRecord(model_key=key, dimension1="AA", dimension2="Filters", supplier_code=supplier)


class TestProductPayload:
    @pytest.mark.parametrize("key", ["abc", "x" * 70, "", None, "9" * 70])
    def test_keys_that_cannot_join_are_stored_as_null(self, key: object) -> None:
        assert product_repository._payload(_product(key))["model_key"] is None

    @pytest.mark.parametrize("key, stored", [("12", "12"), (12.0, "12"), (" 7 ", "7"), ("12.5", "12.5")])
    def test_parsed_keys_are_stored_as_text(self, key: object, stored: str) -> None:
        assert product_repository._payload(_product(key))["model_key"] == stored

    def test_stored_key_fits_the_column(self) -> None:
        limit = ProductRow.__table__.c.model_key.type.length
        key = "9" * limit
        assert product_repository._payload(_product(key))["model_key"] == key

    @pytest.mark.parametrize("supplier, stored", [(" Bosch ", "Bosch"), (3.0, "3"), (None, ""), ("oem parts", "oem parts")])
    def test_supplier_code_keeps_raw_text(self, supplier: object, stored: str) -> None:
        assert product_repository._payload(_product(1, supplier))["supplier_code"] == stored


class TestFleetPayload:
    def test_integral_id_is_keyed(self) -> None:
        payload = fleet_repository._payload(FleetModel(model_id="101", brand="Ford", model_name="Fiesta"))
        assert payload is not None
        assert payload["model_id"] == 101

    @pytest.mark.parametrize("model_id", ["x1", 12.5, 2**63, -(2**63) - 1, "9" * 30])
    def test_ids_outside_bigint_are_skipped(self, model_id: object) -> None:
        model = FleetModel(model_id=model_id, brand="Ford", model_name="Fiesta")
        assert fleet_repository._payload(model) is None

    def test_bigint_bounds_are_accepted(self) -> None:
        for model_id in (2**63 - 1, -(2**63)):
            payload = fleet_repository._payload(FleetModel(model_id=model_id, brand="Ford", model_name="Fiesta"))
            assert payload is not None
