"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.fleet_model import FleetModelRow
from db.models.model_annotation import ModelAnnotation
from db.models.product import ProductRow

__all__ = [
    "FleetModelRow",
    "ModelAnnotation",
    "ProductRow",
]
