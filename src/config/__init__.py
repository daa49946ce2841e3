"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from pathlib import Path
from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="sop-sla-tracker", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root logging level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Business Calendar ==========
    business_timezone: str = Field(
        default="America/Mexico_City",
        description="IANA timezone used to read weekday and hour-of-day of instants"
    )

    # ========== SLA Catalog ==========
    sla_catalog_path: Path = Field(
        default=Path("sla_catalog.yaml"),
        description="Path to SOP / SLA type catalog YAML file"
    )
    watch_catalog: bool = Field(
        default=True,
        description="Reload the catalog when the YAML file changes"
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()

    @field_validator("business_timezone")
    @classmethod
    def validate_business_timezone(cls, v: str) -> str:
        """Reject timezone names the tz database cannot load."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone: {v}") from exc
        return v


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# ========== Constants ==========

class SLAStatus(str):
    """SLA record lifecycle statuses."""
    ACTIVE = "active"
    COMPLETED = "completed"


class HistoryFilter(str):
    """History list filters."""
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


class ProgressBand(str):
    """Timer colour bands by consumed share of the budget."""
    GREEN = "green"      # up to 33%
    YELLOW = "yellow"    # up to 66%
    RED = "red"          # above 66% or overdue


class ComplianceBucket(str):
    """Buckets of the SLA compliance chart."""
    COMPLETED_OVERDUE = "completed_overdue"
    COMPLETED_ON_TIME = "completed_on_time"
    ACTIVE_OVERDUE = "active_overdue"
    ACTIVE_ON_TIME = "active_on_time"


# ========== Lists for validation ==========

VALID_STATUSES = [SLAStatus.ACTIVE, SLAStatus.COMPLETED]
VALID_HISTORY_FILTERS = [HistoryFilter.ALL, HistoryFilter.ACTIVE, HistoryFilter.COMPLETED]
COMPLIANCE_BUCKETS = [
    ComplianceBucket.COMPLETED_OVERDUE, ComplianceBucket.COMPLETED_ON_TIME,
    ComplianceBucket.ACTIVE_OVERDUE, ComplianceBucket.ACTIVE_ON_TIME
]

# Type ids used before per-SOP catalogs existed
LEGACY_SLA_TYPES = ["A", "B"]
