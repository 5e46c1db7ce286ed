"""
app/api/routers/coverage_router.py

Coverage analysis, global summary and CSV export endpoints.

POST /coverage/analysis     pivot + stats + partition + policy findings
GET  /coverage/dimensions   distinct stored dimension1 values
GET  /coverage/global       coverage of the fleet per dimension1 value
GET  /coverage/export.csv   coverage table with strategic comments
GET  /policy/export.csv     policy findings

All computation lives in CoverageService and the export helpers; the
router only handles HTTP plumbing (parameters, content-type, error mapping).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.api.dependencies import get_age_segment
from app.schemas.coverage import (
    AnalysisRequestBody,
    CoverageAnalysisResponse,
    GlobalCoverageResponse,
)
from app.services.annotation_service import AnnotationService, get_annotation_service
from app.services.coverage_orchestrator import (
    AnalysisRequest,
    CoverageAnalysis,
    CoverageQueryError,
    CoverageService,
    get_coverage_service,
)
from app.services.export_service import ExportResult, export_coverage, export_policy
from db.session import get_db
from policy.rules import AgeSegment

logger = logging.getLogger(__name__)

router = APIRouter(tags=["coverage"])


# ---------------------------------------------------------------------------
# Helpers (no business logic)
# ---------------------------------------------------------------------------


def _run_analysis(
    service: CoverageService,
    db: Session,
    request: AnalysisRequest,
) -> CoverageAnalysis:
    try:
        return service.analyze(db, request)
    except CoverageQueryError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Coverage analysis failed; see server logs for details.",
        ) from exc


def _csv_response(result: ExportResult) -> Response:
    return Response(
        content=result.to_csv_bytes(),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename}"',
            "X-Row-Count": str(result.row_count),
        },
    )


def _export_request(
    dimension1: str | None = Query(default=None, description="Restrict products to one dimension1 value."),
    show_dimension1: bool = Query(default=True),
    show_dimension2: bool = Query(default=True),
    category: str | None = Query(default=None, description="Priority category filter."),
    brand: str | None = Query(default=None, description="Brand filter."),
    exclude_suppliers: bool = Query(default=False),
    segment: AgeSegment | None = Depends(get_age_segment),
) -> AnalysisRequest:
    return AnalysisRequest(
        dimension1=dimension1,
        show_dimension1=show_dimension1,
        show_dimension2=show_dimension2,
        category_filter=category,
        brand_filter=brand,
        exclude_suppliers=exclude_suppliers,
        policy_segment=segment,
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/coverage/analysis", response_model=CoverageAnalysisResponse)
def analyze_coverage(
    body: AnalysisRequestBody,
    db: Session = Depends(get_db),
    service: CoverageService = Depends(get_coverage_service),
) -> CoverageAnalysisResponse:
    """
    Cross-reference the fleet against the product catalog.
    """
    request = AnalysisRequest(**body.model_dump())
    result = _run_analysis(service, db, request)
    return CoverageAnalysisResponse.model_validate(result.to_dict())


@router.get("/coverage/dimensions", response_model=list[str])
def list_dimension1_values(
    db: Session = Depends(get_db),
    service: CoverageService = Depends(get_coverage_service),
) -> list[str]:
    try:
        return service.dimension1_values(db)
    except CoverageQueryError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Dimension1 query failed; see server logs for details.",
        ) from exc


@router.get("/coverage/global", response_model=GlobalCoverageResponse)
def global_coverage(
    sort_by: str = Query(
        default="dimension1",
        description='"dimension1" (ascending), "percentage" or "covered" (descending).',
    ),
    db: Session = Depends(get_db),
    service: CoverageService = Depends(get_coverage_service),
) -> GlobalCoverageResponse:
    """
    Fleet coverage computed separately for every dimension1 value.
    """
    try:
        summary = service.global_summary(db, sort_by=sort_by)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except CoverageQueryError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Global coverage query failed; see server logs for details.",
        ) from exc

    return GlobalCoverageResponse.model_validate(
        {
            "rows": [row.to_dict() for row in summary.rows],
            "best": summary.best.dimension1 if summary.best else None,
            "worst": summary.worst.dimension1 if summary.worst else None,
        }
    )


@router.get("/coverage/export.csv", summary="Export the coverage table as CSV")
def export_coverage_csv(
    request: AnalysisRequest = Depends(_export_request),
    db: Session = Depends(get_db),
    service: CoverageService = Depends(get_coverage_service),
    annotations: AnnotationService = Depends(get_annotation_service),
) -> Response:
    result = _run_analysis(service, db, request)
    export = export_coverage(
        result.pivot,
        annotations.list_all(db),
        dimension1=request.dimension1,
    )
    logger.info("Coverage export dimension1=%r rows=%d", request.dimension1, export.row_count)
    return _csv_response(export)


@router.get("/policy/export.csv", summary="Export policy findings as CSV")
def export_policy_csv(
    request: AnalysisRequest = Depends(_export_request),
    db: Session = Depends(get_db),
    service: CoverageService = Depends(get_coverage_service),
) -> Response:
    result = _run_analysis(service, db, request)
    export = export_policy(result.findings, dimension1=request.dimension1)
    logger.info("Policy export dimension1=%r rows=%d", request.dimension1, export.row_count)
    return _csv_response(export)
