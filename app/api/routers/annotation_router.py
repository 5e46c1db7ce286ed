"""
app/api/routers/annotation_router.py

Model annotation (strategic comment) endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.schemas.annotations import AnnotationListResponse, AnnotationRequest, AnnotationResponse
from app.services.annotation_service import (
    AnnotationPersistenceError,
    AnnotationService,
    AnnotationValidationError,
    get_annotation_service,
)
from app.services.export_service import export_annotations
from db.repositories.errors import AnnotationNotFoundError
from db.repositories.types import AnnotationRecord
from db.session import get_db

router = APIRouter(prefix="/annotations", tags=["annotations"])


def _to_response(record: AnnotationRecord) -> AnnotationResponse:
    return AnnotationResponse(
        model_name=record.model_name,
        text=record.text,
        team=record.team,
        noted_on=record.noted_on,
    )


@router.get("", response_model=AnnotationListResponse)
def list_annotations(
    db: Session = Depends(get_db),
    service: AnnotationService = Depends(get_annotation_service),
) -> AnnotationListResponse:
    return AnnotationListResponse(
        teams=list(service.teams),
        annotations=[_to_response(record) for record in service.list_all(db)],
    )


@router.get("/export.csv", summary="Export every annotation as CSV")
def export_annotations_csv(
    db: Session = Depends(get_db),
    service: AnnotationService = Depends(get_annotation_service),
) -> Response:
    export = export_annotations(service.list_all(db))
    return Response(
        content=export.to_csv_bytes(),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{export.filename}"',
            "X-Row-Count": str(export.row_count),
        },
    )


@router.get("/{model_name}", response_model=AnnotationResponse)
def get_annotation(
    model_name: str,
    db: Session = Depends(get_db),
    service: AnnotationService = Depends(get_annotation_service),
) -> AnnotationResponse:
    try:
        record = service.get(db, model_name)
    except AnnotationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _to_response(record)


@router.put(
    "/{model_name}",
    response_model=AnnotationResponse,
    responses={204: {"description": "Blank text removed the annotation."}},
)
def put_annotation(
    model_name: str,
    body: AnnotationRequest,
    db: Session = Depends(get_db),
    service: AnnotationService = Depends(get_annotation_service),
) -> AnnotationResponse | Response:
    """
    Create or replace the annotation of *model_name*; blank text deletes it.
    """
    try:
        record = service.save(
            db,
            model_name=model_name,
            text=body.text,
            team=body.team,
            noted_on=body.noted_on,
        )
    except AnnotationValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except AnnotationPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to save annotation.",
        ) from exc

    if record is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return _to_response(record)


@router.delete("/{model_name}", status_code=status.HTTP_204_NO_CONTENT)
def delete_annotation(
    model_name: str,
    db: Session = Depends(get_db),
    service: AnnotationService = Depends(get_annotation_service),
) -> Response:
    try:
        removed = service.delete(db, model_name)
    except AnnotationPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to delete annotation.",
        ) from exc

    if not removed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No annotation for model {model_name!r}.",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
