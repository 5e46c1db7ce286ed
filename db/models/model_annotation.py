"""
db/models/model_annotation.py

Free-text strategic comment attached to a fleet model by name.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import Date, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class ModelAnnotation(TimestampMixin, Base):
    """
    One annotation per model name; keys match the pivot's ``model_name``.
    """

    __tablename__ = "model_annotations"

    model_name: Mapped[str] = mapped_column(String(255), primary_key=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    team: Mapped[str] = mapped_column(String(64), nullable=False)
    noted_on: Mapped[date] = mapped_column(Date, nullable=False)
