"""
Repository layer exports.
"""

from db.repositories.annotation_repository import AnnotationRepository
from db.repositories.errors import (
    AnnotationNotFoundError,
    CatalogRepositoryError,
    SnapshotPersistenceError,
)
from db.repositories.fleet_repository import FleetRepository
from db.repositories.product_repository import ProductRepository
from db.repositories.types import AnnotationRecord

__all__ = [
    "AnnotationRecord",
    "AnnotationRepository",
    "FleetRepository",
    "ProductRepository",
    "CatalogRepositoryError",
    "SnapshotPersistenceError",
    "AnnotationNotFoundError",
]
