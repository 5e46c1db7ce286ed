"""
app/services package marker.
"""

from app.services.annotation_service import (
    AnnotationPersistenceError,
    AnnotationService,
    AnnotationValidationError,
    get_annotation_service,
)
from app.services.coverage_orchestrator import (
    AnalysisRequest,
    CoverageAnalysis,
    CoverageQueryError,
    CoverageService,
    analyze,
    get_coverage_service,
)
from app.services.snapshot_loader import SnapshotLoader, read_csv_table
from app.services.snapshot_upload_service import (
    SnapshotUploadService,
    get_snapshot_upload_service,
)

__all__ = [
    "AnalysisRequest",
    "AnnotationPersistenceError",
    "AnnotationService",
    "AnnotationValidationError",
    "CoverageAnalysis",
    "CoverageQueryError",
    "CoverageService",
    "SnapshotLoader",
    "SnapshotUploadService",
    "analyze",
    "get_annotation_service",
    "get_coverage_service",
    "get_snapshot_upload_service",
    "read_csv_table",
]
