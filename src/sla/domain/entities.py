"""
SLA Domain Entities
====================

Pure Python domain entities for SLA tracking.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns.
"""

import secrets
import string
from dataclasses import dataclass, field
from typing import Dict, Optional

from src.config import SLAStatus, ProgressBand, ComplianceBucket, COMPLIANCE_BUCKETS, VALID_STATUSES
from src.core import DomainException
from src.sla.domain.value_objects import SLACatalog

_BASE36 = string.digits + string.ascii_lowercase


def generate_sla_id(now_ms: int) -> str:
    """Record id of the form ``sla_<ms>_<9 base36 chars>``."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"sla_{now_ms}_{suffix}"


@dataclass
class SLARecord:
    """
    A tracked SLA instance.

    Instants are milliseconds since the epoch. ``time_adjustment`` extends
    (positive) or shortens (negative) the budget of the SLA type.
    """

    # Core attributes
    id: str
    name: str
    type: str
    sop_id: str
    status: SLAStatus
    start_time: int

    # Formatted dates, refreshed by the repository on every save
    start_date: str = ""
    end_date: str = ""

    # Optional tracking fields
    end_time: Optional[int] = None
    comments: Optional[str] = None
    assignment: Optional[str] = None
    owner: Optional[str] = None
    time_adjustment: int = 0

    def __post_init__(self):
        """Validate record on initialization."""
        if self.status not in VALID_STATUSES:
            raise DomainException(f"Unknown SLA status: {self.status}", {"sla_id": self.id})
        if self.end_time is not None and self.end_time < self.start_time:
            raise DomainException(
                "end_time cannot be before start_time",
                {"sla_id": self.id, "start_time": self.start_time, "end_time": self.end_time}
            )

    @property
    def is_active(self) -> bool:
        return self.status == SLAStatus.ACTIVE

    @property
    def is_completed(self) -> bool:
        return self.status == SLAStatus.COMPLETED

    def effective_duration(self, catalog: SLACatalog) -> int:
        """Type budget plus manual adjustment, in milliseconds."""
        return catalog.get_sla_type_duration(self.sop_id, self.type) + (self.time_adjustment or 0)

    def uses_business_window(self, catalog: SLACatalog) -> bool:
        return catalog.is_business_days_type(self.sop_id, self.type)

    def counting_end(self, now_ms: int) -> int:
        """Instant the timer counts up to: now while active, else the end time."""
        if self.is_completed and self.end_time is not None:
            return self.end_time
        return now_ms

    def complete(self, now_ms: int, comments: Optional[str] = None) -> None:
        """Stop the timer."""
        self.status = SLAStatus.COMPLETED
        self.end_time = max(now_ms, self.start_time)
        self.comments = comments.strip() if comments and comments.strip() else None

    def to_dict(self) -> dict:
        """Storage representation (camelCase keys)."""
        data = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "status": self.status,
            "startTime": self.start_time,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "sopId": self.sop_id,
        }
        optional = {
            "endTime": self.end_time,
            "comments": self.comments,
            "asignacion": self.assignment,
            "encargado": self.owner,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        if self.time_adjustment:
            data["timeAdjustment"] = self.time_adjustment
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SLARecord":
        """Build from the storage representation."""
        return cls(
            id=data["id"],
            name=data["name"],
            type=data["type"],
            sop_id=str(data["sopId"]),
            status=data.get("status", SLAStatus.ACTIVE),
            start_time=int(data["startTime"]),
            start_date=data.get("startDate") or "",
            end_date=data.get("endDate") or "",
            end_time=int(data["endTime"]) if data.get("endTime") is not None else None,
            comments=data.get("comments"),
            assignment=data.get("asignacion"),
            owner=data.get("encargado"),
            time_adjustment=int(data.get("timeAdjustment") or 0),
        )


@dataclass
class TimerSnapshot:
    """
    Point-in-time view of an SLA timer.

    Sampled with a fresh "now" on every refresh; holds no live state.
    """

    sla_id: str
    sampled_at: int
    elapsed_ms: int
    duration_ms: int
    remaining_ms: int
    is_overdue: bool
    progress: float
    band: ProgressBand
    business_days: bool

    # Display fields
    display: str = ""
    remaining_label: str = ""

    @property
    def overrun_ms(self) -> int:
        """Time past the budget (0 while on time)."""
        return max(0, self.elapsed_ms - self.duration_ms)

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "sla_id": self.sla_id,
            "sampled_at": self.sampled_at,
            "elapsed_ms": self.elapsed_ms,
            "duration_ms": self.duration_ms,
            "remaining_ms": self.remaining_ms,
            "overrun_ms": self.overrun_ms,
            "is_overdue": self.is_overdue,
            "progress": self.progress,
            "band": self.band,
            "business_days": self.business_days,
            "display": self.display,
            "remaining_label": self.remaining_label,
        }


@dataclass
class SLAReport:
    """Completion report data for one SLA."""

    sla_id: str
    name: str
    sop_title: str
    type_name: str
    start_date: str
    end_date: str
    completed_at: Optional[str]
    elapsed_ms: int
    duration_ms: int
    difference_ms: int
    is_overdue: bool
    business_days: bool
    assignment: Optional[str] = None
    owner: Optional[str] = None
    comments: Optional[str] = None


@dataclass
class ComplianceStats:
    """
    Counts for the four compliance buckets.

    Computed over a set of records, either one SOP or all of them.
    """

    sop_id: Optional[str] = None
    counts: Dict[str, int] = field(
        default_factory=lambda: {bucket: 0 for bucket in COMPLIANCE_BUCKETS}
    )

    def add(self, bucket: ComplianceBucket) -> None:
        self.counts[bucket] = self.counts.get(bucket, 0) + 1

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def overdue(self) -> int:
        return (self.counts[ComplianceBucket.COMPLETED_OVERDUE]
                + self.counts[ComplianceBucket.ACTIVE_OVERDUE])

    @property
    def on_time_rate(self) -> float:
        """Percentage of records not overdue (0 when empty)."""
        if self.total == 0:
            return 0.0
        return (self.total - self.overdue) * 100 / self.total
