"""
SLA Domain Layer
================

Domain layer for SLA tracking module.

Contains:
- Entities: Core business objects with identity (SLARecord, TimerSnapshot,
  SLAReport, ComplianceStats)
- Value Objects: Immutable objects defined by attributes (SLACatalog,
  SOPDefinition, SLATypeDefinition, BusinessWindow)
- Domain Services: Stateless business logic (SLACalculator,
  compute_counted_elapsed)

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from src.sla.domain.business_time import (
    BusinessWindow,
    DEFAULT_BUSINESS_WINDOW,
    compute_counted_elapsed,
    counted_elapsed_between,
    from_epoch_ms,
    to_epoch_ms,
)
from src.sla.domain.entities import (
    SLARecord,
    TimerSnapshot,
    SLAReport,
    ComplianceStats,
    generate_sla_id,
)
from src.sla.domain.value_objects import (
    SLACalculator,
    SLACatalog,
    SOPDefinition,
    SLATypeDefinition,
)

__all__ = [
    # Business time
    "BusinessWindow",
    "DEFAULT_BUSINESS_WINDOW",
    "compute_counted_elapsed",
    "counted_elapsed_between",
    "from_epoch_ms",
    "to_epoch_ms",
    # Entities
    "SLARecord",
    "TimerSnapshot",
    "SLAReport",
    "ComplianceStats",
    "generate_sla_id",
    # Value Objects & Services
    "SLACalculator",
    "SLACatalog",
    "SOPDefinition",
    "SLATypeDefinition",
]
