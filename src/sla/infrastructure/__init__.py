"""
SLA Infrastructure Layer
=========================

Infrastructure implementations for SLA tracking:
- Repositories: Key-value record store and catalog providers
- External: Catalog file watcher
"""

from src.sla.infrastructure.repositories import (
    IKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueSLARepository,
    YAMLCatalogProvider,
    StaticCatalogProvider,
    load_catalog_file,
)
from src.sla.infrastructure.external import SLACatalogManager

__all__ = [
    "IKeyValueStore",
    "InMemoryKeyValueStore",
    "KeyValueSLARepository",
    "YAMLCatalogProvider",
    "StaticCatalogProvider",
    "load_catalog_file",
    "SLACatalogManager",
]
