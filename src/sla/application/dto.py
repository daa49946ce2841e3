"""
SLA Application DTOs
=====================

Data Transfer Objects for SLA API layer.

These Pydantic models handle serialization/deserialization and validation
for API requests and responses. Following YAGNI - only what's needed.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from src.sla.domain import (
    SLARecord, SLACatalog, TimerSnapshot, SLAReport, ComplianceStats,
    SOPDefinition, SLATypeDefinition
)


# ========== Type Aliases for Literals ==========
SLAStatusStr = Literal["active", "completed"]
HistoryFilterStr = Literal["all", "active", "completed"]
ProgressBandStr = Literal["green", "yellow", "red"]
AdjustOperationStr = Literal["add", "subtract"]


# ========== Request DTOs ==========

class ElapsedRequest(BaseModel):
    """Request model for a counted-elapsed computation."""
    start: int = Field(..., description="Start instant, ms since epoch")
    end: int = Field(..., description="End instant, ms since epoch")
    use_business_window: bool = Field(
        default=False,
        description="Count only Monday 08:00 - Friday 17:00 time"
    )


class SLACreateRequest(BaseModel):
    """Request model for starting a new SLA."""
    name: str = Field(..., min_length=1, description="SLA name")
    type: str = Field(..., min_length=1, description="SLA type id within the SOP")
    sop_id: str = Field(..., min_length=1, description="SOP id")
    assignment: Optional[str] = Field(None, description="Assignment")
    owner: Optional[str] = Field(None, description="Person in charge")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name cannot be blank")
        return v.strip()


class SLAUpdateRequest(BaseModel):
    """Request model for renaming or reassigning an SLA."""
    name: Optional[str] = Field(None, description="New name")
    assignment: Optional[str] = Field(None, description="New assignment, blank clears it")
    owner: Optional[str] = Field(None, description="New owner, blank clears it")


class TimeAdjustmentRequest(BaseModel):
    """Request model for extending or shortening an SLA budget."""
    hours: int = Field(default=0, ge=0, description="Whole hours")
    minutes: int = Field(default=0, ge=0, le=59, description="Minutes (0-59)")
    operation: AdjustOperationStr = Field(default="add", description="add or subtract")


class CompleteRequest(BaseModel):
    """Request model for completing an SLA."""
    comments: Optional[str] = Field(None, description="Closing comments")


# ========== Response DTOs ==========

class ElapsedResponse(BaseModel):
    """Response model for a counted-elapsed computation."""
    start: int
    end: int
    use_business_window: bool
    timezone: str = Field(..., description="Timezone used for weekday / hour")
    elapsed_ms: int = Field(..., description="Counted elapsed milliseconds")
    display: str = Field(..., description="Elapsed time as H:MM:SS or M:SS")


class SLATypeResponse(BaseModel):
    """Response model for an SLA type."""
    id: str
    name: str
    duration_ms: int
    duration_label: str
    business_days: bool

    @classmethod
    def from_domain(cls, sla_type: SLATypeDefinition) -> "SLATypeResponse":
        from src.sla.domain.formatting import format_duration_label

        return cls(
            id=sla_type.id,
            name=sla_type.name,
            duration_ms=sla_type.duration_ms,
            duration_label=format_duration_label(sla_type.duration_ms),
            business_days=sla_type.business_days
        )


class SOPResponse(BaseModel):
    """Response model for a SOP with its SLA types."""
    id: str
    title: str
    sla_types: List[SLATypeResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, sop: SOPDefinition) -> "SOPResponse":
        return cls(
            id=sop.id,
            title=sop.title,
            sla_types=[SLATypeResponse.from_domain(t) for t in sop.sla_types]
        )


class SLAResponse(BaseModel):
    """Response model for an SLA record."""
    id: str
    name: str
    type: str
    type_name: str
    sop_id: str
    status: SLAStatusStr
    start_time: int
    end_time: Optional[int] = None
    start_date: str
    end_date: str
    duration_ms: int = Field(..., description="Type budget plus adjustment")
    time_adjustment: int = 0
    business_days: bool
    assignment: Optional[str] = None
    owner: Optional[str] = None
    comments: Optional[str] = None

    @classmethod
    def from_domain(cls, record: SLARecord, catalog: SLACatalog) -> "SLAResponse":
        return cls(
            id=record.id,
            name=record.name,
            type=record.type,
            type_name=catalog.get_sla_type_name(record.sop_id, record.type),
            sop_id=record.sop_id,
            status=record.status,
            start_time=record.start_time,
            end_time=record.end_time,
            start_date=record.start_date,
            end_date=record.end_date,
            duration_ms=record.effective_duration(catalog),
            time_adjustment=record.time_adjustment,
            business_days=record.uses_business_window(catalog),
            assignment=record.assignment,
            owner=record.owner,
            comments=record.comments
        )


class TimerResponse(BaseModel):
    """Response model for a timer snapshot."""
    sla_id: str
    sampled_at: int
    elapsed_ms: int
    duration_ms: int
    remaining_ms: int
    overrun_ms: int
    is_overdue: bool
    progress: float = Field(..., ge=0.0, le=1.0)
    band: ProgressBandStr
    business_days: bool
    display: str
    remaining_label: str

    @classmethod
    def from_domain(cls, snapshot: TimerSnapshot) -> "TimerResponse":
        return cls(**snapshot.to_dict())


class ReportResponse(BaseModel):
    """Response model for an SLA completion report."""
    sla_id: str
    name: str
    sop_title: str
    type_name: str
    start_date: str
    end_date: str
    completed_at: Optional[str] = None
    elapsed_ms: int
    duration_ms: int
    difference_ms: int = Field(..., description="Elapsed minus budget; positive when overdue")
    is_overdue: bool
    business_days: bool
    assignment: Optional[str] = None
    owner: Optional[str] = None
    comments: Optional[str] = None

    @classmethod
    def from_domain(cls, report: SLAReport) -> "ReportResponse":
        return cls(**report.__dict__)


class ComplianceResponse(BaseModel):
    """Response model for compliance statistics."""
    sop_id: Optional[str] = None
    sop_title: Optional[str] = None
    counts: Dict[str, int]
    total: int
    overdue: int
    on_time_rate: float = Field(..., description="Percentage of records not overdue")

    @classmethod
    def from_domain(
        cls,
        stats: ComplianceStats,
        sop_title: Optional[str] = None
    ) -> "ComplianceResponse":
        return cls(
            sop_id=stats.sop_id,
            sop_title=sop_title,
            counts=dict(stats.counts),
            total=stats.total,
            overdue=stats.overdue,
            on_time_rate=round(stats.on_time_rate, 2)
        )
