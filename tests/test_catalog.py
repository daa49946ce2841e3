from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from src.core import ConfigurationException, UnknownSLATypeException
from src.sla.domain import SLACatalog, SLATypeDefinition, SOPDefinition
from src.sla.infrastructure import SLACatalogManager, YAMLCatalogProvider, load_catalog_file

REPO_ROOT = Path(__file__).resolve().parents[1]

BUSINESS_DAY_TYPES = {
    ("1", "cotizacion-estandar"),
    ("1", "proyecto-medida"),
    ("3", "conciliacion-mensual"),
    ("6", "kickoff"),
    ("10", "recepcion-validacion"),
    ("10", "convocatoria-validacion"),
    ("10", "convocatoria-revision"),
    ("12", "embarque-aduana"),
    ("12", "picking-mexico"),
}


def _business_day_pairs(catalog: SLACatalog) -> set:
    return {
        (sop.id, sla_type.id)
        for sop in catalog.sops
        for sla_type in sop.sla_types
        if sla_type.business_days
    }


def test_default_catalog_has_twelve_sops() -> None:
    catalog = SLACatalog()
    assert [sop.id for sop in catalog.sops] == [str(n) for n in range(1, 13)]
    assert _business_day_pairs(catalog) == BUSINESS_DAY_TYPES


def test_catalog_lookups() -> None:
    catalog = SLACatalog()
    assert catalog.get_sop_title("2") == "SOP 2-Requisiciones"
    assert catalog.get_sop_title("99") == "Unknown SOP"
    assert [t.id for t in catalog.get_sla_types_for_sop("4")] == ["aprobacion-estandar", "entrega-recibo"]
    assert catalog.get_sla_types_for_sop("99") == []
    assert catalog.get_sla_type_duration("1", "cotizacion-estandar") == 3 * 86_400_000
    assert catalog.get_sla_type_duration("1", "nope") == 0
    assert catalog.get_sla_type_name("5", "s2") == "S2"
    assert catalog.get_sla_type_name("5", "nope") == "nope"
    assert catalog.is_business_days_type("6", "kickoff") is True
    assert catalog.is_business_days_type("6", "fat-sat") is False
    assert catalog.is_business_days_type("99", "kickoff") is False


def test_require_sla_type_raises_for_unknown_pair() -> None:
    with pytest.raises(UnknownSLATypeException) as exc_info:
        SLACatalog().require_sla_type("2", "kickoff")
    assert exc_info.value.details == {"sop_id": "2", "type_id": "kickoff"}


def test_type_durations_accept_days_or_hours() -> None:
    assert SLATypeDefinition(id="a", name="A", duration_days=2).duration_ms == 2 * 86_400_000
    assert SLATypeDefinition(id="b", name="B", duration_hours=1.5).duration_ms == 5_400_000


@pytest.mark.parametrize(
    "payload",
    [
        {"id": "a", "name": "A", "duration_ms": 0},
        {"id": "a", "name": "A", "duration_hours": -1},
        {"id": "", "name": "A", "duration_ms": 1},
    ],
)
def test_invalid_type_definitions_are_rejected(payload: dict) -> None:
    with pytest.raises(ValidationError):
        SLATypeDefinition(**payload)


def test_duplicate_ids_are_rejected() -> None:
    sla_type = {"id": "a", "name": "A", "duration_ms": 1}
    with pytest.raises(ValidationError):
        SOPDefinition(id="1", title="One", sla_types=[sla_type, sla_type])
    with pytest.raises(ValidationError):
        SLACatalog(sops=[{"id": 1, "title": "One"}, {"id": "1", "title": "Again"}])


def test_shipped_yaml_matches_builtin_catalog() -> None:
    assert load_catalog_file(REPO_ROOT / "sla_catalog.yaml") == SLACatalog()


def test_missing_file_falls_back_to_defaults(tmp_path: Path) -> None:
    assert load_catalog_file(tmp_path / "absent.yaml") == SLACatalog()


def test_invalid_yaml_raises_configuration_error(tmp_path: Path) -> None:
    path = tmp_path / "catalog.yaml"
    path.write_text("sops: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigurationException):
        load_catalog_file(path)


def test_invalid_catalog_content_raises_configuration_error(tmp_path: Path) -> None:
    path = tmp_path / "catalog.yaml"
    path.write_text("sops:\n  - id: '1'\n    title: ''\n", encoding="utf-8")
    with pytest.raises(ConfigurationException):
        load_catalog_file(path)


def _write_single_sop(path: Path, title: str) -> None:
    path.write_text(
        "sops:\n"
        "  - id: '1'\n"
        f"    title: '{title}'\n"
        "    sla_types:\n"
        "      - {id: rapido, name: Rapido, duration_hours: 4}\n",
        encoding="utf-8",
    )


def test_yaml_provider_reload(tmp_path: Path) -> None:
    path = tmp_path / "catalog.yaml"
    _write_single_sop(path, "First")
    provider = YAMLCatalogProvider(path)
    assert provider.get_catalog().get_sop_title("1") == "First"

    _write_single_sop(path, "Second")
    provider.reload()
    assert provider.get_catalog().get_sop_title("1") == "Second"


def test_manager_reload_keeps_last_good_catalog(tmp_path: Path) -> None:
    path = tmp_path / "catalog.yaml"
    _write_single_sop(path, "Good")
    manager = SLACatalogManager()
    manager.load(path)

    path.write_text("sops: [unclosed", encoding="utf-8")
    assert manager.reload() is False
    assert manager.get_catalog().get_sop_title("1") == "Good"

    _write_single_sop(path, "Better")
    assert manager.reload() is True
    assert manager.catalog.get_sop_title("1") == "Better"


def test_manager_requires_load_before_use() -> None:
    manager = SLACatalogManager()
    assert manager.reload() is False
    with pytest.raises(RuntimeError):
        manager.get_catalog()
    with pytest.raises(RuntimeError):
        manager.start_watching()


def test_manager_watching_lifecycle(tmp_path: Path) -> None:
    manager = SLACatalogManager()
    manager.load(tmp_path / "absent.yaml")
    manager.start_watching()
    assert manager.is_watching is False

    path = tmp_path / "catalog.yaml"
    _write_single_sop(path, "Watched")
    manager.load(path)
    manager.start_watching()
    try:
        assert manager.is_watching is True
    finally:
        manager.stop_watching()
    assert manager.is_watching is False
    manager.stop_watching()
