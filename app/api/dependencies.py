"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from fastapi import File, HTTPException, Query, UploadFile, status

from policy.rules import AgeSegment

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
}


def get_snapshot_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded snapshot is a CSV by extension or MIME type.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    if not filename.endswith(".csv") and content_type not in CSV_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Snapshots must be uploaded as CSV files.",
        )

    return file


def get_age_segment(
    segment: str | None = Query(default=None, description="Vintage, Modern or New."),
) -> AgeSegment | None:
    """
    Parse the optional age segment filter of policy endpoints.
    """

    if segment is None or not segment.strip():
        return None
    try:
        return AgeSegment(segment.strip())
    except ValueError as exc:
        valid = [s.value for s in AgeSegment]
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid segment {segment!r}. Must be one of: {valid}.",
        ) from exc
