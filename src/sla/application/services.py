"""
SLA Application Services
=========================

Application services orchestrate business logic and coordinate between
domain entities and repositories.

Following SOLID principles:
- Single Responsibility: Each service has one clear purpose
- Dependency Inversion: Depend on abstractions (repositories), not concrete implementations
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from src.config import HistoryFilter, SLAStatus, ComplianceBucket, VALID_HISTORY_FILTERS
from src.core import ResourceNotFoundException, ValidationException
from src.shared.infrastructure.clock import Clock, system_clock_ms
from src.shared.infrastructure.logging import get_logger
from src.sla.domain import (
    SLARecord, TimerSnapshot, SLAReport, ComplianceStats,
    SLACalculator, SLACatalog, BusinessWindow, DEFAULT_BUSINESS_WINDOW,
    generate_sla_id
)
from src.sla.domain.business_time import MS_PER_HOUR, MS_PER_MINUTE, TimezoneLike
from src.sla.domain.formatting import (
    format_countdown, format_timestamp, remaining_label
)

logger = get_logger(__name__)


# ========== Repository Interfaces (Dependency Inversion) ==========

class ISLARepository(ABC):
    """Interface for SLA record data access."""

    @abstractmethod
    def save(self, record: SLARecord) -> SLARecord:
        """Insert or replace a record by id."""

    @abstractmethod
    def get_all(self) -> List[SLARecord]:
        """Get every stored record."""

    @abstractmethod
    def get_by_sop(self, sop_id: str) -> List[SLARecord]:
        """Get records of one SOP."""

    @abstractmethod
    def get_by_id(self, sla_id: str) -> Optional[SLARecord]:
        """Get record by id."""

    @abstractmethod
    def delete(self, sla_id: str) -> None:
        """Delete record by id (no-op when missing)."""


class ICatalogProvider(ABC):
    """Interface for SOP / SLA type catalog access."""

    @abstractmethod
    def get_catalog(self) -> SLACatalog:
        """Get current catalog."""


# ========== Application Services ==========

class SLATrackingService:
    """
    Service for SLA record lifecycle and timers.

    Coordinates between domain logic and data access. Every elapsed-time
    figure goes through :class:`SLACalculator`.
    """

    def __init__(
        self,
        repository: ISLARepository,
        catalog_provider: ICatalogProvider,
        clock: Clock = system_clock_ms,
        tz: Optional[TimezoneLike] = None,
        window: BusinessWindow = DEFAULT_BUSINESS_WINDOW
    ):
        self._repo = repository
        self._catalog_provider = catalog_provider
        self._clock = clock
        self._tz = tz
        self._window = window

    @property
    def catalog(self) -> SLACatalog:
        return self._catalog_provider.get_catalog()

    # ----- record lifecycle -----

    def create_sla(
        self,
        name: str,
        type_id: str,
        sop_id: str,
        assignment: Optional[str] = None,
        owner: Optional[str] = None
    ) -> SLARecord:
        """
        Start a new SLA timer.

        Raises:
            ValidationException: blank name
            UnknownSLATypeException: type not offered by the SOP
        """
        name = (name or "").strip()
        if not name:
            raise ValidationException("SLA name is required", {"field": "name"})
        self.catalog.require_sla_type(sop_id, type_id)

        now = self._clock()
        record = SLARecord(
            id=generate_sla_id(now),
            name=name,
            type=type_id,
            sop_id=sop_id,
            status=SLAStatus.ACTIVE,
            start_time=now,
            assignment=_clean(assignment),
            owner=_clean(owner)
        )
        record = self._repo.save(record)

        logger.info(
            "SLA created",
            extra={"sla_id": record.id, "sop_id": sop_id, "sla_type": type_id}
        )
        return record

    def get_sla(self, sla_id: str) -> SLARecord:
        record = self._repo.get_by_id(sla_id)
        if record is None:
            raise ResourceNotFoundException("SLA", sla_id)
        return record

    def list_history(
        self,
        sop_id: Optional[str] = None,
        status_filter: str = HistoryFilter.ALL
    ) -> List[SLARecord]:
        """
        Records for the history view.

        Active records come first, then each group newest start first.
        """
        if status_filter not in VALID_HISTORY_FILTERS:
            raise ValidationException(
                f"Unknown history filter: {status_filter}",
                {"allowed": VALID_HISTORY_FILTERS}
            )

        records = self._repo.get_by_sop(sop_id) if sop_id else self._repo.get_all()
        if status_filter != HistoryFilter.ALL:
            records = [r for r in records if r.status == status_filter]

        return sorted(records, key=lambda r: (not r.is_active, -r.start_time))

    def update_details(
        self,
        sla_id: str,
        name: Optional[str] = None,
        assignment: Optional[str] = None,
        owner: Optional[str] = None
    ) -> SLARecord:
        """
        Rename or reassign a record.

        ``None`` leaves a field untouched; a blank assignment or owner
        clears it, a blank name is rejected.
        """
        record = self.get_sla(sla_id)

        if name is not None:
            if not name.strip():
                raise ValidationException("SLA name cannot be blank", {"field": "name"})
            record.name = name.strip()
        if assignment is not None:
            record.assignment = _clean(assignment)
        if owner is not None:
            record.owner = _clean(owner)

        return self._repo.save(record)

    def adjust_time(
        self,
        sla_id: str,
        hours: int,
        minutes: int,
        add: bool = True
    ) -> SLARecord:
        """
        Extend or shorten a record's budget.

        Raises:
            ValidationException: negative hours, minutes outside 0-59, or a
                zero adjustment
        """
        if hours < 0:
            raise ValidationException("hours cannot be negative", {"hours": hours})
        if not 0 <= minutes <= 59:
            raise ValidationException("minutes must be between 0 and 59", {"minutes": minutes})

        adjustment = hours * MS_PER_HOUR + minutes * MS_PER_MINUTE
        if adjustment == 0:
            raise ValidationException("adjustment must not be zero")

        record = self.get_sla(sla_id)
        record.time_adjustment = (record.time_adjustment or 0) + (adjustment if add else -adjustment)
        record = self._repo.save(record)

        logger.info(
            "SLA time adjusted",
            extra={
                "sla_id": sla_id,
                "adjustment_ms": adjustment if add else -adjustment,
                "time_adjustment_ms": record.time_adjustment
            }
        )
        return record

    def complete_sla(self, sla_id: str, comments: Optional[str] = None) -> SLARecord:
        """Stop a timer; completing twice keeps the first end time."""
        record = self.get_sla(sla_id)
        if record.is_completed:
            return record

        record.complete(self._clock(), comments)
        record = self._repo.save(record)

        logger.info(
            "SLA completed",
            extra={"sla_id": sla_id, "end_time": record.end_time}
        )
        return record

    def delete_sla(self, sla_id: str) -> None:
        self.get_sla(sla_id)
        self._repo.delete(sla_id)
        logger.info("SLA deleted", extra={"sla_id": sla_id})

    # ----- timers and reports -----

    def counted_elapsed(self, record: SLARecord, now_ms: Optional[int] = None) -> int:
        """Counted elapsed time of a record under its type's policy."""
        now = self._clock() if now_ms is None else now_ms
        return SLACalculator.compute_counted_elapsed(
            record.start_time,
            record.counting_end(now),
            record.uses_business_window(self.catalog),
            tz=self._tz,
            window=self._window
        )

    def snapshot(self, record: SLARecord, now_ms: Optional[int] = None) -> TimerSnapshot:
        """Timer view of a record sampled at ``now_ms``."""
        now = self._clock() if now_ms is None else now_ms
        catalog = self.catalog

        elapsed = self.counted_elapsed(record, now)
        duration = record.effective_duration(catalog)
        remaining = SLACalculator.calculate_remaining(elapsed, duration)
        overdue = SLACalculator.is_overdue(elapsed, duration)
        progress = SLACalculator.calculate_progress(elapsed, duration)

        display = format_countdown(elapsed - duration if overdue else remaining)
        if overdue:
            display = "+" + display

        return TimerSnapshot(
            sla_id=record.id,
            sampled_at=now,
            elapsed_ms=elapsed,
            duration_ms=duration,
            remaining_ms=remaining,
            is_overdue=overdue,
            progress=progress,
            band=SLACalculator.calculate_band(progress, overdue),
            business_days=record.uses_business_window(catalog),
            display=display,
            remaining_label=remaining_label(duration - elapsed)
        )

    def timer_snapshot(self, sla_id: str) -> TimerSnapshot:
        return self.snapshot(self.get_sla(sla_id))

    def report(self, sla_id: str) -> SLAReport:
        """Completion report; active records are measured up to now."""
        record = self.get_sla(sla_id)
        catalog = self.catalog

        elapsed = self.counted_elapsed(record)
        duration = record.effective_duration(catalog)

        return SLAReport(
            sla_id=record.id,
            name=record.name,
            sop_title=catalog.get_sop_title(record.sop_id),
            type_name=catalog.get_sla_type_name(record.sop_id, record.type),
            start_date=record.start_date,
            end_date=record.end_date,
            completed_at=(
                format_timestamp(record.end_time, self._tz)
                if record.end_time is not None else None
            ),
            elapsed_ms=elapsed,
            duration_ms=duration,
            difference_ms=elapsed - duration,
            is_overdue=SLACalculator.is_overdue(elapsed, duration),
            business_days=record.uses_business_window(catalog),
            assignment=record.assignment,
            owner=record.owner,
            comments=record.comments
        )


class ComplianceService:
    """
    Service for SLA compliance statistics.

    Buckets every record as completed/active and overdue/on time. Active
    records are measured up to now, completed ones up to their end time.
    """

    def __init__(self, tracking_service: SLATrackingService, repository: ISLARepository):
        self._tracking = tracking_service
        self._repo = repository

    def stats_for_sop(self, sop_id: str) -> ComplianceStats:
        return self._collect(self._repo.get_by_sop(sop_id), sop_id)

    def global_stats(self) -> ComplianceStats:
        return self._collect(self._repo.get_all(), None)

    def _collect(self, records: List[SLARecord], sop_id: Optional[str]) -> ComplianceStats:
        stats = ComplianceStats(sop_id=sop_id)
        catalog = self._tracking.catalog

        for record in records:
            if record.is_completed and record.end_time is None:
                continue

            elapsed = self._tracking.counted_elapsed(record)
            overdue = SLACalculator.is_overdue(elapsed, record.effective_duration(catalog))

            if record.is_active:
                bucket = ComplianceBucket.ACTIVE_OVERDUE if overdue else ComplianceBucket.ACTIVE_ON_TIME
            else:
                bucket = ComplianceBucket.COMPLETED_OVERDUE if overdue else ComplianceBucket.COMPLETED_ON_TIME
            stats.add(bucket)

        return stats


def _clean(value: Optional[str]) -> Optional[str]:
    """Trimmed text, or None when blank."""
    if value is None:
        return None
    value = value.strip()
    return value or None
