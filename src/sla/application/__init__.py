"""
SLA Application Layer
======================

Application layer for SLA tracking module.

Contains:
- Services: Orchestrate business logic and coordinate with repositories
- DTOs: Data transfer objects for API serialization

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from src.sla.application.dto import (
    ElapsedRequest,
    ElapsedResponse,
    SLACreateRequest,
    SLAUpdateRequest,
    TimeAdjustmentRequest,
    CompleteRequest,
    SLAResponse,
    SLATypeResponse,
    SOPResponse,
    TimerResponse,
    ReportResponse,
    ComplianceResponse,
)
from src.sla.application.services import (
    SLATrackingService,
    ComplianceService,
    ISLARepository,
    ICatalogProvider,
)

__all__ = [
    # DTOs
    "ElapsedRequest",
    "ElapsedResponse",
    "SLACreateRequest",
    "SLAUpdateRequest",
    "TimeAdjustmentRequest",
    "CompleteRequest",
    "SLAResponse",
    "SLATypeResponse",
    "SOPResponse",
    "TimerResponse",
    "ReportResponse",
    "ComplianceResponse",
    # Services
    "SLATrackingService",
    "ComplianceService",
    # Repository Interfaces
    "ISLARepository",
    "ICatalogProvider",
]
