"""
app/domain package marker.
"""

from app.domain.snapshot import LoadedSnapshot, RowValidationError, UploadSummary

__all__ = [
    "LoadedSnapshot",
    "RowValidationError",
    "UploadSummary",
]
