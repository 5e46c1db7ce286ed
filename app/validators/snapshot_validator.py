"""
app/validators/snapshot_validator.py

Header resolution and shape validation for fleet and product tables.

Source spreadsheets use a handful of historical header spellings; each
core field lists the headers it accepts. Matching ignores surrounding
whitespace and case. Every header not claimed by a core field is kept as
an extra attribute.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence


@dataclass(frozen=True)
class ShapeErrorDetail:
    """
    Structured shape error detail.
    """

    code: str
    message: str
    field: str | None = None
    context: dict[str, Any] | None = None


class SnapshotShapeError(ValueError):
    """
    Raised before any computation when an uploaded table has the wrong shape.
    """

    def __init__(self, *, message: str, errors: Sequence[ShapeErrorDetail] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.errors = tuple(errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "errors": [
                {
                    "code": error.code,
                    "message": error.message,
                    "field": error.field,
                    "context": error.context,
                }
                for error in self.errors
            ],
        }


PRODUCT_HEADERS: dict[str, tuple[str, ...]] = {
    "model_key": ("Stmvid", "model_key"),
    "dimension1": ("Nivel 1", "nivel1", "dimension1"),
    "dimension2": ("Nivel 2", "nivel2", "dimension2"),
    "supplier_code": ("Proveedor", "supplier_code", "supplier"),
    "equivalence_code": ("Equivalencia", "equivalence_code"),
    "part_number": ("Numero", "Número", "part_number"),
    "part_brand": ("Marca", "part_brand"),
    "description": ("Descripción", "Descripcion", "description"),
}
PRODUCT_REQUIRED: tuple[str, ...] = ("model_key", "dimension1", "dimension2")

# sort_order_override wins over sort_order when both are present.
FLEET_HEADERS: dict[str, tuple[str, ...]] = {
    "model_id": ("IDMODELO", "id_modelo", "model_id"),
    "brand": ("MARCA", "brand"),
    "model_name": ("MODELO", "model_name"),
    "model_variant": ("MODELO2", "model_variant"),
    "year_from": ("DESDE", "year_from"),
    "year_to": ("HASTA", "year_to"),
    "priority_category": ("Clasificacion", "Clasificación", "priority_category"),
    "fleet_size": ("Parque", "fleet_size"),
    "sort_order_override": ("Nuevo Orden", "new_order"),
    "sort_order": ("Orden", "sort_order"),
}
FLEET_REQUIRED: tuple[str, ...] = ("model_id",)


def _normalize(header: str) -> str:
    return " ".join(str(header).split()).casefold()


class SnapshotHeaderValidator:
    """
    Resolves source headers to core fields and rejects tables missing
    required fields.
    """

    def __init__(
        self,
        *,
        table: str,
        accepted_headers: Mapping[str, Sequence[str]],
        required_fields: Sequence[str],
    ) -> None:
        self._table = table
        self._accepted = {
            field: tuple(_normalize(h) for h in headers)
            for field, headers in accepted_headers.items()
        }
        self._required = tuple(required_fields)

    def resolve(self, source_headers: Sequence[str]) -> dict[str, str]:
        """
        Return ``{core_field: source_header}`` for every recognised field.

        Raises
        ------
        SnapshotShapeError
            When the table has no header row or a required field is absent.
        """
        if not source_headers:
            raise SnapshotShapeError(
                message=f"The {self._table} table has no header row.",
                errors=[ShapeErrorDetail(code="missing_header", message="Header row is missing.")],
            )

        by_normalized: dict[str, str] = {}
        for header in source_headers:
            by_normalized.setdefault(_normalize(header), header)

        mapping: dict[str, str] = {}
        for field, candidates in self._accepted.items():
            for candidate in candidates:
                if candidate in by_normalized:
                    mapping[field] = by_normalized[candidate]
                    break

        errors = [
            ShapeErrorDetail(
                code="required_field_missing",
                message="Required column is missing.",
                field=field,
                context={"accepted_headers": list(self._accepted[field])},
            )
            for field in self._required
            if field not in mapping
        ]
        if errors:
            missing = ", ".join(error.field or "" for error in errors)
            raise SnapshotShapeError(
                message=f"The {self._table} table is missing required columns: {missing}.",
                errors=errors,
            )
        return mapping


def product_header_validator() -> SnapshotHeaderValidator:
    return SnapshotHeaderValidator(
        table="products",
        accepted_headers=PRODUCT_HEADERS,
        required_fields=PRODUCT_REQUIRED,
    )


def fleet_header_validator() -> SnapshotHeaderValidator:
    return SnapshotHeaderValidator(
        table="fleet",
        accepted_headers=FLEET_HEADERS,
        required_fields=FLEET_REQUIRED,
    )
