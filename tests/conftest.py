from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from src.config import Settings
from src.sla.application import ComplianceService, SLATrackingService
from src.sla.domain.business_time import to_epoch_ms
from src.sla.infrastructure import (
    InMemoryKeyValueStore,
    KeyValueSLARepository,
    StaticCatalogProvider,
)

# Monday 2024-01-15 08:00 UTC
MON_0800 = to_epoch_ms(datetime(2024, 1, 15, 8, tzinfo=timezone.utc))


class FixedClock:
    """Clock returning a settable instant in epoch milliseconds."""

    def __init__(self, now_ms: int):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> int:
        self.now_ms += ms
        return self.now_ms


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(MON_0800)


@pytest.fixture
def catalog_provider() -> StaticCatalogProvider:
    return StaticCatalogProvider()


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def repository(store, catalog_provider) -> KeyValueSLARepository:
    return KeyValueSLARepository(store, catalog_provider, tz="UTC")


@pytest.fixture
def service(repository, catalog_provider, clock) -> SLATrackingService:
    return SLATrackingService(repository, catalog_provider, clock=clock, tz="UTC")


@pytest.fixture
def compliance(service, repository) -> ComplianceService:
    return ComplianceService(service, repository)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        environment="development",
        business_timezone="UTC",
        sla_catalog_path=tmp_path / "missing_catalog.yaml",
        watch_catalog=False,
    )


@pytest.fixture
def app(settings, clock):
    from src.main import create_app

    return create_app(settings, clock=clock)


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client
