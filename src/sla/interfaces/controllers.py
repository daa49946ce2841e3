"""
SLA Controllers (API Routes)
=============================

FastAPI routes for SLA tracking endpoints.

Controllers are thin - they delegate to application services.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from src.config import Settings, HistoryFilter
from src.core import ResourceNotFoundException
from src.shared.infrastructure.logging import get_logger, log_latency
from src.sla.application import (
    SLATrackingService, ComplianceService, ICatalogProvider,
    ElapsedRequest, ElapsedResponse,
    SLACreateRequest, SLAUpdateRequest, TimeAdjustmentRequest, CompleteRequest,
    SLAResponse, SOPResponse, SLATypeResponse,
    TimerResponse, ReportResponse, ComplianceResponse
)
from src.sla.application.dto import HistoryFilterStr
from src.sla.domain import SLACalculator
from src.sla.domain.formatting import format_countdown

logger = get_logger(__name__)
router = APIRouter(prefix="/sla", tags=["SLA Tracking"])


# ========== Example payloads for Swagger ==========

ELAPSED_RESPONSE_EXAMPLE = {
    "start": 1705312800000,
    "end": 1705320000000,
    "use_business_window": True,
    "timezone": "America/Mexico_City",
    "elapsed_ms": 7200000,
    "display": "2:00:00"
}

TIMER_RESPONSE_EXAMPLE = {
    "sla_id": "sla_1705312800000_k3j9x0a1b",
    "sampled_at": 1705320000000,
    "elapsed_ms": 7200000,
    "duration_ms": 86400000,
    "remaining_ms": 79200000,
    "overrun_ms": 0,
    "is_overdue": False,
    "progress": 0.0833,
    "band": "green",
    "business_days": False,
    "display": "22:00:00",
    "remaining_label": "22h"
}


# ========== Dependencies ==========

def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_tracking_service(request: Request) -> SLATrackingService:
    """Get SLA tracking service instance."""
    return request.app.state.tracking_service


def get_compliance_service(request: Request) -> ComplianceService:
    """Get compliance service instance."""
    return request.app.state.compliance_service


def get_catalog_provider(request: Request) -> ICatalogProvider:
    return request.app.state.catalog_provider


# ========== Route Handlers ==========

@router.post(
    "/elapsed",
    response_model=ElapsedResponse,
    summary="Compute counted elapsed time",
    description="""
    Compute the counted time between two instants (ms since epoch).

    - `use_business_window = false`: wall-clock difference
    - `use_business_window = true`: only Monday 08:00 - Friday 17:00 counts,
      read in the configured business timezone

    A start after the end counts as zero.
    """,
    responses={
        200: {
            "description": "Counted elapsed time",
            "content": {"application/json": {"example": ELAPSED_RESPONSE_EXAMPLE}}
        }
    }
)
def compute_elapsed(
    payload: ElapsedRequest,
    settings: Settings = Depends(get_settings_dep)
):
    elapsed = SLACalculator.compute_counted_elapsed(
        payload.start,
        payload.end,
        payload.use_business_window,
        tz=settings.business_timezone
    )
    return ElapsedResponse(
        start=payload.start,
        end=payload.end,
        use_business_window=payload.use_business_window,
        timezone=settings.business_timezone,
        elapsed_ms=elapsed,
        display=format_countdown(elapsed)
    )


@router.get("/sops", response_model=List[SOPResponse], summary="List SOPs and their SLA types")
async def list_sops(catalog_provider: ICatalogProvider = Depends(get_catalog_provider)):
    return [SOPResponse.from_domain(sop) for sop in catalog_provider.get_catalog().sops]


@router.get(
    "/sops/{sop_id}/types",
    response_model=List[SLATypeResponse],
    summary="SLA types offered by a SOP"
)
async def list_sop_types(
    sop_id: str,
    catalog_provider: ICatalogProvider = Depends(get_catalog_provider)
):
    catalog = catalog_provider.get_catalog()
    if catalog.get_sop(sop_id) is None:
        raise ResourceNotFoundException("SOP", sop_id)
    return [SLATypeResponse.from_domain(t) for t in catalog.get_sla_types_for_sop(sop_id)]


@router.post(
    "/records",
    response_model=SLAResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a new SLA timer"
)
async def create_record(
    payload: SLACreateRequest,
    service: SLATrackingService = Depends(get_tracking_service)
):
    record = service.create_sla(
        payload.name, payload.type, payload.sop_id,
        assignment=payload.assignment, owner=payload.owner
    )
    return SLAResponse.from_domain(record, service.catalog)


@router.get(
    "/records",
    response_model=List[SLAResponse],
    summary="SLA history",
    description="Active records first, then newest start first."
)
async def list_records(
    sop_id: Optional[str] = Query(None, description="Filter by SOP id"),
    record_status: HistoryFilterStr = Query(HistoryFilter.ALL, alias="status", description="all, active or completed"),
    service: SLATrackingService = Depends(get_tracking_service)
):
    records = service.list_history(sop_id, record_status)
    catalog = service.catalog
    return [SLAResponse.from_domain(record, catalog) for record in records]


@router.get("/records/{sla_id}", response_model=SLAResponse, summary="Get one SLA")
async def get_record(
    sla_id: str,
    service: SLATrackingService = Depends(get_tracking_service)
):
    return SLAResponse.from_domain(service.get_sla(sla_id), service.catalog)


@router.patch("/records/{sla_id}", response_model=SLAResponse, summary="Rename or reassign an SLA")
async def update_record(
    sla_id: str,
    payload: SLAUpdateRequest,
    service: SLATrackingService = Depends(get_tracking_service)
):
    record = service.update_details(
        sla_id, name=payload.name, assignment=payload.assignment, owner=payload.owner
    )
    return SLAResponse.from_domain(record, service.catalog)


@router.post(
    "/records/{sla_id}/adjust",
    response_model=SLAResponse,
    summary="Add or subtract time from an SLA budget"
)
async def adjust_record(
    sla_id: str,
    payload: TimeAdjustmentRequest,
    service: SLATrackingService = Depends(get_tracking_service)
):
    record = service.adjust_time(
        sla_id, payload.hours, payload.minutes, add=payload.operation == "add"
    )
    return SLAResponse.from_domain(record, service.catalog)


@router.post("/records/{sla_id}/complete", response_model=SLAResponse, summary="Complete an SLA")
async def complete_record(
    sla_id: str,
    payload: Optional[CompleteRequest] = None,
    service: SLATrackingService = Depends(get_tracking_service)
):
    comments = payload.comments if payload else None
    record = service.complete_sla(sla_id, comments)
    return SLAResponse.from_domain(record, service.catalog)


@router.delete(
    "/records/{sla_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an SLA"
)
async def delete_record(
    sla_id: str,
    service: SLATrackingService = Depends(get_tracking_service)
):
    service.delete_sla(sla_id)


@router.get(
    "/records/{sla_id}/timer",
    response_model=TimerResponse,
    summary="Timer snapshot",
    description="Sample the timer with the current time. Poll to refresh a countdown.",
    responses={
        200: {
            "description": "Timer snapshot",
            "content": {"application/json": {"example": TIMER_RESPONSE_EXAMPLE}}
        }
    }
)
async def get_timer(
    sla_id: str,
    service: SLATrackingService = Depends(get_tracking_service)
):
    return TimerResponse.from_domain(service.timer_snapshot(sla_id))


@router.get("/records/{sla_id}/report", response_model=ReportResponse, summary="SLA report data")
async def get_report(
    sla_id: str,
    service: SLATrackingService = Depends(get_tracking_service)
):
    return ReportResponse.from_domain(service.report(sla_id))


@router.get(
    "/sops/{sop_id}/compliance",
    response_model=ComplianceResponse,
    summary="Compliance statistics for one SOP"
)
async def get_sop_compliance(
    sop_id: str,
    compliance: ComplianceService = Depends(get_compliance_service),
    catalog_provider: ICatalogProvider = Depends(get_catalog_provider)
):
    with log_latency(logger, "sop_compliance", sop_id=sop_id):
        stats = compliance.stats_for_sop(sop_id)
    return ComplianceResponse.from_domain(
        stats, catalog_provider.get_catalog().get_sop_title(sop_id)
    )


@router.get("/compliance", response_model=ComplianceResponse, summary="Global compliance statistics")
async def get_global_compliance(compliance: ComplianceService = Depends(get_compliance_service)):
    with log_latency(logger, "global_compliance"):
        stats = compliance.global_stats()
    return ComplianceResponse.from_domain(stats)


# Export router for inclusion in main app
sla_router = router
