"""
SLA Value Objects
==================

Immutable value objects for SLA domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.config import ProgressBand
from src.core import UnknownSLATypeException
from src.sla.domain.business_time import (
    DEFAULT_BUSINESS_WINDOW, MS_PER_DAY, MS_PER_HOUR,
    BusinessWindow, TimezoneLike, compute_counted_elapsed
)

UNKNOWN_SOP_TITLE = "Unknown SOP"

GREEN_BAND_LIMIT = 0.33
YELLOW_BAND_LIMIT = 0.66


class SLACalculator:
    """
    Pure functions for SLA calculations.

    Stateless utility class following DRY principle -
    all SLA calculation logic in one place.
    """

    @staticmethod
    def compute_counted_elapsed(
        start: int,
        end: int,
        use_business_window: bool,
        tz: Optional[TimezoneLike] = None,
        window: BusinessWindow = DEFAULT_BUSINESS_WINDOW
    ) -> int:
        """
        Counted elapsed milliseconds between two instants.

        See :func:`src.sla.domain.business_time.compute_counted_elapsed`.
        """
        return compute_counted_elapsed(
            start, end, use_business_window, tz=tz, window=window
        )

    @staticmethod
    def calculate_remaining(elapsed_ms: int, duration_ms: int) -> int:
        """Budget left, never below zero."""
        return max(0, duration_ms - elapsed_ms)

    @staticmethod
    def is_overdue(elapsed_ms: int, duration_ms: int) -> bool:
        """An SLA is overdue once counted time strictly exceeds its budget."""
        return elapsed_ms > duration_ms

    @staticmethod
    def calculate_progress(elapsed_ms: int, duration_ms: int) -> float:
        """
        Consumed share of the budget in [0, 1].

        Overdue timers report 0 so the progress bar empties; a non-positive
        budget also reports 0.
        """
        if duration_ms <= 0 or elapsed_ms > duration_ms:
            return 0.0
        return min(1.0, elapsed_ms / duration_ms)

    @staticmethod
    def calculate_band(progress: float, is_overdue: bool = False) -> ProgressBand:
        """
        Colour band for a timer.

        Returns:
            green up to 33%, yellow up to 66%, red above that or when overdue
        """
        if is_overdue:
            return ProgressBand.RED
        if progress <= GREEN_BAND_LIMIT:
            return ProgressBand.GREEN
        if progress <= YELLOW_BAND_LIMIT:
            return ProgressBand.YELLOW
        return ProgressBand.RED


class SLATypeDefinition(BaseModel):
    """One SLA type offered by a SOP, with its maximum duration."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="SLA type identifier")
    name: str = Field(..., min_length=1, description="Display name")
    duration_ms: int = Field(..., gt=0, description="Budget in milliseconds")
    business_days: bool = Field(
        default=False,
        description="Count only business-window time for this type"
    )

    @model_validator(mode="before")
    @classmethod
    def expand_duration_units(cls, data: Any) -> Any:
        """Accept ``duration_days`` or ``duration_hours`` in YAML."""
        if not isinstance(data, dict) or "duration_ms" in data:
            return data
        data = dict(data)
        if "duration_days" in data:
            data["duration_ms"] = int(data.pop("duration_days") * MS_PER_DAY)
        elif "duration_hours" in data:
            data["duration_ms"] = int(data.pop("duration_hours") * MS_PER_HOUR)
        return data


class SOPDefinition(BaseModel):
    """A standard operating procedure and the SLA types it tracks."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    sla_types: List[SLATypeDefinition] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("sla_types")
    @classmethod
    def validate_unique_types(cls, v: List[SLATypeDefinition]) -> List[SLATypeDefinition]:
        seen = set()
        for sla_type in v:
            if sla_type.id in seen:
                raise ValueError(f"duplicate SLA type id: {sla_type.id}")
            seen.add(sla_type.id)
        return v

    def get_type(self, type_id: str) -> Optional[SLATypeDefinition]:
        for sla_type in self.sla_types:
            if sla_type.id == type_id:
                return sla_type
        return None


def _t(type_id: str, name: str, duration_ms: int, business_days: bool = False) -> Dict[str, Any]:
    return {"id": type_id, "name": name, "duration_ms": duration_ms, "business_days": business_days}


DAY = MS_PER_DAY
HOUR = MS_PER_HOUR

DEFAULT_SOPS: List[Dict[str, Any]] = [
    {"id": "1", "title": "SOP 1-Cotizaciones (distribución, proyectos y compuestos)", "sla_types": [
        _t("cotizacion-estandar", "Cotización estándar", 3 * DAY, True),
        _t("proyecto-medida", "Proyecto a medida", 10 * DAY, True),
    ]},
    {"id": "2", "title": "SOP 2-Requisiciones", "sla_types": [
        _t("aprobacion-estandar", "Aprobación estándar", 48 * HOUR),
        _t("urgencias", "Urgencias", 24 * HOUR),
    ]},
    {"id": "3", "title": "SOP 3-Control de materiales para proyecto", "sla_types": [
        _t("atencion-solicitud", "Atención de solicitud", 24 * HOUR),
        _t("conciliacion-mensual", "Conciliación mensual", 5 * DAY, True),
    ]},
    {"id": "4", "title": "SOP 4-Préstamo de equipo", "sla_types": [
        _t("aprobacion-estandar", "Aprobación estándar", 48 * HOUR),
        _t("entrega-recibo", "Entrega/recibo", 1 * HOUR),
    ]},
    {"id": "5", "title": "SOP 5-Soporte de servicios", "sla_types": [
        _t("agendar-cita", "Agendar cita", 72 * HOUR),
        _t("s1-respuesta", "S1: Respuesta", 2 * HOUR),
        _t("s1-onsite", "S1: Onsite", 48 * HOUR),
        _t("s2", "S2", 8 * HOUR),
        _t("s3", "S3", 48 * HOUR),
    ]},
    {"id": "6", "title": "SOP 6-Ciclo de proyectos", "sla_types": [
        _t("kickoff", "Kickoff", 5 * DAY, True),
        _t("fat-sat", "FAT/SAT", 1 * HOUR),
        _t("cierres-administrativos", "Cierres administrativos", 10 * DAY),
    ]},
    {"id": "7", "title": "SOP 7-Fabricación de partes con proveedores", "sla_types": [
        _t("rfq-po", "RFQ→PO", 5 * DAY),
        _t("lead-time", "Lead time", 1 * HOUR),
    ]},
    {"id": "8", "title": "SOP 8-Ensamble en systems integration", "sla_types": [
        _t("tiempo-ensamble", "Tiempo de ensamble", 1 * HOUR),
    ]},
    {"id": "9", "title": "SOP 9-Puesta en marcha (Commisioning)", "sla_types": [
        _t("sat-fat", "SAT y FAT", 1 * HOUR),
        _t("resolucion-pendientes", "Tiempo de resolución de pendientes", 10 * DAY),
    ]},
    {"id": "10", "title": "SOP 10-Diseño", "sla_types": [
        _t("recepcion-validacion", "Recepción y validación del requerimiento", 1 * DAY, True),
        _t("convocatoria-validacion", "Convocatoria a validación de información", 1 * DAY, True),
        _t("convocatoria-revision", "Convocatoria a revisión y aprobación conjunta", 1 * DAY, True),
    ]},
    {"id": "11", "title": "SOP 11-Ventas", "sla_types": [
        _t("generar-orden-venta", "Generar orden de venta", 1 * DAY),
        _t("liberacion-bom", "Liberación de BOM", 24 * HOUR),
        _t("creacion-requisicion", "Creación de requisición única", 24 * HOUR),
        _t("ejecucion-compra", "Ejecución de la compra", 48 * HOUR),
    ]},
    {"id": "12", "title": "SOP 12-Tráfico y logística", "sla_types": [
        _t("embarque-inc", "Almacén HTL INC embarca mercancía a aduana", 1 * DAY),
        _t("embarque-aduana", "Embarque en aduana", 3 * DAY, True),
        _t("picking-mexico", "Almacén HTL México realiza el picking", 1 * DAY, True),
    ]},
]


class SLACatalog(BaseModel):
    """
    SOP / SLA type catalog loaded from YAML.

    Answers the two lookups every timer needs: the duration budget of a
    type and whether the type counts business-window time only.

    This is a value object - immutable and defined by its attributes.
    """
    model_config = ConfigDict(frozen=True)

    sops: List[SOPDefinition] = Field(
        default_factory=lambda: [SOPDefinition(**sop) for sop in DEFAULT_SOPS],
        description="SOPs with their SLA types"
    )

    @field_validator("sops")
    @classmethod
    def validate_unique_sops(cls, v: List[SOPDefinition]) -> List[SOPDefinition]:
        seen = set()
        for sop in v:
            if sop.id in seen:
                raise ValueError(f"duplicate SOP id: {sop.id}")
            seen.add(sop.id)
        return v

    def get_sop(self, sop_id: str) -> Optional[SOPDefinition]:
        for sop in self.sops:
            if sop.id == sop_id:
                return sop
        return None

    def get_sop_title(self, sop_id: str) -> str:
        sop = self.get_sop(sop_id)
        return sop.title if sop else UNKNOWN_SOP_TITLE

    def get_sla_types_for_sop(self, sop_id: str) -> List[SLATypeDefinition]:
        sop = self.get_sop(sop_id)
        return list(sop.sla_types) if sop else []

    def get_sla_type(self, sop_id: str, type_id: str) -> Optional[SLATypeDefinition]:
        sop = self.get_sop(sop_id)
        return sop.get_type(type_id) if sop else None

    def require_sla_type(self, sop_id: str, type_id: str) -> SLATypeDefinition:
        """Like :meth:`get_sla_type` but raises for unknown combinations."""
        sla_type = self.get_sla_type(sop_id, type_id)
        if sla_type is None:
            raise UnknownSLATypeException(sop_id, type_id)
        return sla_type

    def get_sla_type_duration(self, sop_id: str, type_id: str) -> int:
        """Budget in milliseconds, 0 for unknown types."""
        sla_type = self.get_sla_type(sop_id, type_id)
        return sla_type.duration_ms if sla_type else 0

    def get_sla_type_name(self, sop_id: str, type_id: str) -> str:
        """Display name, falling back to the raw type id."""
        sla_type = self.get_sla_type(sop_id, type_id)
        return sla_type.name if sla_type else type_id

    def is_business_days_type(self, sop_id: str, type_id: str) -> bool:
        """Policy lookup: does this SOP/type pair count business time only."""
        sla_type = self.get_sla_type(sop_id, type_id)
        return sla_type.business_days if sla_type else False
