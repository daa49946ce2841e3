from __future__ import annotations

import json

import pytest

from src.config import SLAStatus
from src.core import DomainException, RepositoryException
from src.sla.domain import SLARecord, generate_sla_id
from src.sla.infrastructure import InMemoryKeyValueStore, KeyValueSLARepository
from src.sla.infrastructure.repositories import STORAGE_KEY

MON_0800 = 1705305600000  # 2024-01-15 08:00 UTC
HOUR = 3_600_000


def _record(**overrides) -> SLARecord:
    values = dict(
        id="sla_1705305600000_abc123xyz",
        name="Cotización Acme",
        type="cotizacion-estandar",
        sop_id="1",
        status=SLAStatus.ACTIVE,
        start_time=MON_0800,
    )
    values.update(overrides)
    return SLARecord(**values)


def test_generated_ids_have_expected_shape() -> None:
    first = generate_sla_id(MON_0800)
    prefix, ms, suffix = first.split("_")
    assert (prefix, ms) == ("sla", str(MON_0800))
    assert len(suffix) == 9 and suffix.isalnum() and suffix == suffix.lower()
    assert generate_sla_id(MON_0800) != first


def test_save_refreshes_formatted_dates(repository, store) -> None:
    saved = repository.save(_record())
    assert saved.start_date == "15/01/2024 08:00"
    # three calendar days of budget, dates are plain start + duration
    assert saved.end_date == "18/01/2024 08:00"

    stored = json.loads(store.get_item(STORAGE_KEY))
    assert stored == [
        {
            "id": "sla_1705305600000_abc123xyz",
            "name": "Cotización Acme",
            "type": "cotizacion-estandar",
            "status": "active",
            "startTime": MON_0800,
            "startDate": "15/01/2024 08:00",
            "endDate": "18/01/2024 08:00",
            "sopId": "1",
        }
    ]


def test_save_upserts_by_id(repository) -> None:
    repository.save(_record())
    repository.save(_record(name="Renamed", time_adjustment=2 * HOUR))
    records = repository.get_all()
    assert len(records) == 1
    assert records[0].name == "Renamed"
    assert records[0].end_date == "18/01/2024 10:00"


def test_optional_fields_round_trip_with_storage_keys(repository, store) -> None:
    repository.save(
        _record(
            status=SLAStatus.COMPLETED,
            end_time=MON_0800 + HOUR,
            comments="Enviada",
            assignment="Ventas",
            owner="Ana",
            time_adjustment=-30 * 60_000,
        )
    )
    stored = json.loads(store.get_item(STORAGE_KEY))[0]
    assert stored["endTime"] == MON_0800 + HOUR
    assert stored["asignacion"] == "Ventas"
    assert stored["encargado"] == "Ana"
    assert stored["timeAdjustment"] == -1_800_000

    loaded = repository.get_by_id(stored["id"])
    assert loaded.owner == "Ana"
    assert loaded.assignment == "Ventas"
    assert loaded.comments == "Enviada"
    assert loaded.is_completed


def test_queries_and_delete(repository) -> None:
    repository.save(_record(id="a"))
    repository.save(_record(id="b", sop_id="2", type="urgencias"))
    assert [r.id for r in repository.get_by_sop("2")] == ["b"]
    assert repository.get_by_id("missing") is None

    repository.delete("a")
    repository.delete("missing")
    assert [r.id for r in repository.get_all()] == ["b"]


def test_legacy_records_are_migrated_on_read(catalog_provider) -> None:
    legacy = [
        {"id": "old", "name": "Legacy", "type": "A", "status": "active",
         "startTime": MON_0800, "sopId": 2},
    ]
    store = InMemoryKeyValueStore({STORAGE_KEY: json.dumps(legacy)})
    repository = KeyValueSLARepository(store, catalog_provider, tz="UTC")

    record = repository.get_all()[0]
    assert record.sop_id == "2"
    assert record.type == "aprobacion-estandar"
    assert record.start_date == "15/01/2024 08:00"
    assert record.end_date == "17/01/2024 08:00"


def test_empty_store_reads_as_no_records(repository) -> None:
    assert repository.get_all() == []


@pytest.mark.parametrize("raw", ["{not json", json.dumps({"slas": []})])
def test_corrupt_storage_raises(catalog_provider, raw: str) -> None:
    store = InMemoryKeyValueStore({STORAGE_KEY: raw})
    repository = KeyValueSLARepository(store, catalog_provider, tz="UTC")
    with pytest.raises(RepositoryException):
        repository.get_all()


def test_malformed_record_raises(catalog_provider) -> None:
    store = InMemoryKeyValueStore({STORAGE_KEY: json.dumps([{"id": "x"}])})
    repository = KeyValueSLARepository(store, catalog_provider, tz="UTC")
    with pytest.raises(RepositoryException):
        repository.get_all()


def test_record_rejects_end_before_start() -> None:
    with pytest.raises(DomainException):
        _record(end_time=MON_0800 - 1)


def test_deleting_last_record_clears_storage_key(repository, store) -> None:
    repository.save(_record())
    repository.delete("sla_1705305600000_abc123xyz")
    assert store.get_item(STORAGE_KEY) is None
    assert repository.get_all() == []


def test_record_rejects_unknown_status() -> None:
    with pytest.raises(DomainException):
        _record(status="paused")
