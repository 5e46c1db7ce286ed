"""
app/api/routers/upload_router.py

Fleet and product snapshot upload endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_snapshot_upload
from app.domain.snapshot import UploadSummary
from app.schemas.uploads import RowValidationErrorResponse, UploadSummaryResponse
from app.services.snapshot_upload_service import (
    SnapshotUploadService,
    get_snapshot_upload_service,
)
from app.validators.snapshot_validator import SnapshotShapeError
from db.repositories.errors import SnapshotPersistenceError
from db.session import get_db

router = APIRouter(prefix="/uploads", tags=["uploads"])


def _to_response(table: str, summary: UploadSummary) -> UploadSummaryResponse:
    return UploadSummaryResponse(
        table=table,
        rows_processed=summary.rows_processed,
        rows_failed=summary.rows_failed,
        validation_errors=[
            RowValidationErrorResponse(
                row_number=error.row_number,
                column=error.column,
                message=error.message,
                value=error.value,
            )
            for error in summary.validation_errors
        ],
    )


@router.post("/fleet", response_model=UploadSummaryResponse)
def upload_fleet(
    file: UploadFile = Depends(get_snapshot_upload),
    db: Session = Depends(get_db),
    service: SnapshotUploadService = Depends(get_snapshot_upload_service),
) -> UploadSummaryResponse:
    """
    Upsert the fleet registry from a CSV snapshot.
    """

    try:
        summary = service.upload_fleet(source=file.file, db=db)
    except SnapshotShapeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.to_dict()) from exc
    except SnapshotPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to persist fleet snapshot.",
        ) from exc
    finally:
        file.file.close()

    return _to_response("fleet", summary)


@router.post("/products", response_model=UploadSummaryResponse)
def upload_products(
    file: UploadFile = Depends(get_snapshot_upload),
    db: Session = Depends(get_db),
    service: SnapshotUploadService = Depends(get_snapshot_upload_service),
) -> UploadSummaryResponse:
    """
    Replace the stored products of every dimension1 value in the CSV snapshot.
    """

    try:
        summary = service.upload_products(source=file.file, db=db)
    except SnapshotShapeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.to_dict()) from exc
    except SnapshotPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to persist product snapshot.",
        ) from exc
    finally:
        file.file.close()

    return _to_response("products", summary)
