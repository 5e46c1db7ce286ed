"""
db/models/product.py

Parts-catalog entries. A product upload replaces every row sharing its
dimension1 value.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import BigInteger, Identity, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class ProductRow(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(BigInteger, Identity(), primary_key=True)
    model_key: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        comment="Parsed join key as text; NULL when the source key cannot join fleet_models.model_id",
    )
    dimension1: Mapped[str] = mapped_column(String(255), nullable=False)
    dimension2: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    supplier_code: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    equivalence_code: Mapped[str | None] = mapped_column(String(255), nullable=True)
    part_number: Mapped[str | None] = mapped_column(String(255), nullable=True)
    part_brand: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    extra: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)

    __table_args__ = (
        Index("ix_products_dimension1", "dimension1"),
        Index("ix_products_model_key", "model_key"),
    )
