from fastapi import APIRouter, Depends, Header, Query, Request, Response, status
from sqlalchemy.orm import Session

from outage_board.database import get_db
from outage_board.schemas.outage import (
    OutageActionResponse,
    OutageImpact,
    OutageInsights,
    OutageRead,
    OutageStats,
    ReportRequest,
    ReportResponse,
)
from outage_board.services.outage_service import OutageService
from outage_board.services.outage_store import OutageStore

router = APIRouter(prefix="/outages", tags=["outages"])


def get_outage_service(request: Request, db: Session = Depends(get_db)) -> OutageService:
    """Service wired with this request's session and the app's settings."""
    return OutageService(OutageStore(db), request.app.state.settings, clock=request.app.state.clock)


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
def report_outage(
    body: ReportRequest,
    response: Response,
    svc: OutageService = Depends(get_outage_service),
):
    """Report an outage, or confirm the matching ongoing one."""
    result = svc.report_or_confirm(body.service, body.area)
    if result.is_duplicate:
        response.status_code = status.HTTP_200_OK
    return ReportResponse(message=result.message, outage=result.outage, is_duplicate=result.is_duplicate)


@router.get("", response_model=list[OutageRead])
def list_outages(
    status: str | None = Query(None, pattern="^(ongoing|resolved)$"),
    svc: OutageService = Depends(get_outage_service),
):
    """All outages, newest first, optionally filtered by status."""
    return svc.list_outages(status)


@router.get("/stats", response_model=OutageStats)
def get_stats(svc: OutageService = Depends(get_outage_service)):
    return svc.stats()


@router.get("/insights", response_model=OutageInsights)
def get_insights(svc: OutageService = Depends(get_outage_service)):
    return svc.insights()


@router.get("/impact", response_model=OutageImpact)
def get_impact(svc: OutageService = Depends(get_outage_service)):
    return svc.impact()


@router.put("/{outage_id}/restore", response_model=OutageActionResponse)
def restore_outage(outage_id: str, svc: OutageService = Depends(get_outage_service)):
    """Mark an ongoing outage as resolved."""
    outage = svc.restore(outage_id)
    return OutageActionResponse(message="Service restored", outage=outage)


@router.delete("/{outage_id}", response_model=OutageActionResponse)
def delete_outage(
    outage_id: str,
    x_admin_password: str | None = Header(None),
    svc: OutageService = Depends(get_outage_service),
):
    """Admin-only permanent delete."""
    outage = svc.delete_outage(outage_id, x_admin_password)
    return OutageActionResponse(message="Outage deleted", outage=outage)
