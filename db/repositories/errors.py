"""
Repository-layer exceptions for catalog persistence.
"""

from __future__ import annotations


class CatalogRepositoryError(RuntimeError):
    """Base exception for fleet/product/annotation persistence failures."""


class SnapshotPersistenceError(CatalogRepositoryError):
    """Raised when a fleet or product snapshot cannot be written."""


class AnnotationNotFoundError(CatalogRepositoryError):
    """Raised when an annotation for the requested model does not exist."""
