"""
app/schemas/uploads.py

Response schemas for snapshot upload endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class RowValidationErrorResponse(BaseModel):
    """
    API response model for one row-level validation error.
    """

    row_number: int = Field(..., ge=1)
    message: str
    column: str | None = None
    value: str | None = None


class UploadSummaryResponse(BaseModel):
    """
    API response model for a snapshot upload.
    """

    table: str
    rows_processed: int = Field(..., ge=0)
    rows_failed: int = Field(..., ge=0)
    validation_errors: list[RowValidationErrorResponse] = Field(default_factory=list)
