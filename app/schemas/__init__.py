"""
app/schemas package marker.
"""

from app.schemas.annotations import AnnotationListResponse, AnnotationRequest, AnnotationResponse
from app.schemas.coverage import (
    AnalysisRequestBody,
    CoverageAnalysisResponse,
    GlobalCoverageResponse,
)
from app.schemas.uploads import RowValidationErrorResponse, UploadSummaryResponse

__all__ = [
    "AnalysisRequestBody",
    "AnnotationListResponse",
    "AnnotationRequest",
    "AnnotationResponse",
    "CoverageAnalysisResponse",
    "GlobalCoverageResponse",
    "RowValidationErrorResponse",
    "UploadSummaryResponse",
]
