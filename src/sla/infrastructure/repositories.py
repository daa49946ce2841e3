"""
SLA Infrastructure Repositories
=================================

Concrete implementations of repository interfaces.

SLA records live in a plain key-value store as one JSON document under the
``slas`` key. The store itself is an in-process dictionary; nothing is
persisted server-side.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from src.config import LEGACY_SLA_TYPES
from src.core import ConfigurationException, DomainException, RepositoryException
from src.shared.infrastructure.logging import get_logger
from src.sla.application import ICatalogProvider, ISLARepository
from src.sla.domain import SLACatalog, SLARecord
from src.sla.domain.business_time import TimezoneLike
from src.sla.domain.formatting import format_timestamp

logger = get_logger(__name__)

STORAGE_KEY = "slas"


class IKeyValueStore(ABC):
    """Interface for a string key-value store."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Get stored value or None."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove key (no-op when missing)."""


class InMemoryKeyValueStore(IKeyValueStore):
    """Dictionary-backed key-value store scoped to one process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class KeyValueSLARepository(ISLARepository):
    """
    Key-value implementation of SLA repository.

    Every write rewrites the whole ``slas`` document, so each read returns
    fresh record objects.
    """

    def __init__(
        self,
        store: IKeyValueStore,
        catalog_provider: ICatalogProvider,
        tz: Optional[TimezoneLike] = None
    ):
        self._store = store
        self._catalog_provider = catalog_provider
        self._tz = tz

    def save(self, record: SLARecord) -> SLARecord:
        """Upsert by id, recomputing the formatted start and end dates."""
        self._refresh_dates(record)

        records = self.get_all()
        for index, existing in enumerate(records):
            if existing.id == record.id:
                records[index] = record
                break
        else:
            records.append(record)

        self._write(records)
        return record

    def get_all(self) -> List[SLARecord]:
        """
        Every stored record.

        Records missing formatted dates get them filled in, and legacy
        ``A``/``B`` type ids are mapped to the first type of their SOP.
        """
        catalog = self._catalog_provider.get_catalog()
        records = []

        for data in self._read():
            try:
                record = SLARecord.from_dict(data)
            except (KeyError, TypeError, ValueError, DomainException) as e:
                raise RepositoryException(
                    f"Malformed SLA record: {e}",
                    {"record": data.get("id") if isinstance(data, dict) else None}
                ) from e

            if record.type in LEGACY_SLA_TYPES:
                types = catalog.get_sla_types_for_sop(record.sop_id)
                if types:
                    record.type = types[0].id

            if not record.start_date or not record.end_date:
                self._refresh_dates(record)

            records.append(record)

        return records

    def get_by_sop(self, sop_id: str) -> List[SLARecord]:
        return [record for record in self.get_all() if record.sop_id == sop_id]

    def get_by_id(self, sla_id: str) -> Optional[SLARecord]:
        for record in self.get_all():
            if record.id == sla_id:
                return record
        return None

    def delete(self, sla_id: str) -> None:
        records = [record for record in self.get_all() if record.id != sla_id]
        self._write(records)

    def _refresh_dates(self, record: SLARecord) -> None:
        catalog = self._catalog_provider.get_catalog()
        record.start_date = format_timestamp(record.start_time, self._tz)
        record.end_date = format_timestamp(
            record.start_time + record.effective_duration(catalog), self._tz
        )

    def _read(self) -> List[dict]:
        raw = self._store.get_item(STORAGE_KEY)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise RepositoryException(f"Stored SLA data is not valid JSON: {e}") from e
        if not isinstance(data, list):
            raise RepositoryException("Stored SLA data must be a list")
        return data

    def _write(self, records: List[SLARecord]) -> None:
        if not records:
            self._store.remove_item(STORAGE_KEY)
            return
        self._store.set_item(
            STORAGE_KEY,
            json.dumps([record.to_dict() for record in records], ensure_ascii=False)
        )


def load_catalog_file(path: Union[str, Path]) -> SLACatalog:
    """
    Load and validate a catalog YAML file.

    A missing file yields the built-in catalog.

    Raises:
        ConfigurationException: unreadable YAML or invalid catalog content
    """
    path = Path(path)

    if not path.exists():
        logger.warning(f"SLA catalog file not found: {path}, using defaults")
        return SLACatalog()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return SLACatalog(**data)
    except yaml.YAMLError as e:
        raise ConfigurationException(f"Invalid YAML in {path}: {e}") from e
    except (ValidationError, TypeError) as e:
        raise ConfigurationException(f"Invalid SLA catalog in {path}: {e}") from e


class YAMLCatalogProvider(ICatalogProvider):
    """
    Catalog provider that loads once from YAML.

    For hot reload use ``SLACatalogManager``.
    """

    def __init__(self, catalog_path: Union[str, Path]):
        self._catalog_path = catalog_path
        self._catalog: SLACatalog = load_catalog_file(catalog_path)

    def get_catalog(self) -> SLACatalog:
        """Get current catalog."""
        return self._catalog

    def reload(self) -> None:
        """Reload catalog from file."""
        self._catalog = load_catalog_file(self._catalog_path)


class StaticCatalogProvider(ICatalogProvider):
    """Catalog provider around a fixed catalog instance."""

    def __init__(self, catalog: Optional[SLACatalog] = None):
        self._catalog = catalog or SLACatalog()

    def get_catalog(self) -> SLACatalog:
        return self._catalog
