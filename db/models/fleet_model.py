"""
db/models/fleet_model.py

Fleet registry ("park") snapshot, one row per vehicle model.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import BigInteger, Index, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class FleetModelRow(TimestampMixin, Base):
    """
    Persisted fleet model.

    ``model_id`` is the join key shared with ``products.model_key``;
    re-uploading a snapshot upserts on it.
    """

    __tablename__ = "fleet_models"

    model_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    brand: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    model_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    model_variant: Mapped[str | None] = mapped_column(String(255), nullable=True)
    year_from: Mapped[int | None] = mapped_column(Integer, nullable=True)
    year_to: Mapped[int | None] = mapped_column(Integer, nullable=True)
    priority_category: Mapped[str | None] = mapped_column(
        String(16),
        nullable=True,
        comment="Ordinal tier label, e.g. AA / A / B / C",
    )
    fleet_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sort_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    extra: Mapped[dict[str, Any] | None] = mapped_column(
        JSONB,
        nullable=True,
        comment="Additional source columns kept verbatim",
    )

    __table_args__ = (
        Index("ix_fleet_models_sort_order", "sort_order"),
        Index("ix_fleet_models_priority_category", "priority_category"),
    )
