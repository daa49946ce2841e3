"""
SLA External Integrations
==========================

Catalog file watching:
- YAML catalog loading with hot reload through watchdog
"""

import threading
from pathlib import Path
from typing import Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from src.core import ConfigurationException
from src.shared.infrastructure.logging import get_logger
from src.sla.application import ICatalogProvider
from src.sla.domain import SLACatalog
from src.sla.infrastructure.repositories import load_catalog_file

logger = get_logger(__name__)


class CatalogFileHandler(FileSystemEventHandler):
    """Watchdog event handler for SLA catalog file changes."""

    def __init__(self, catalog_manager: "SLACatalogManager", catalog_path: Path):
        self.catalog_manager = catalog_manager
        self.catalog_path = catalog_path
        super().__init__()

    def on_modified(self, event):
        """Handle file modification event."""
        if event.is_directory:
            return
        if Path(event.src_path).resolve() == self.catalog_path.resolve():
            logger.info(f"Catalog file changed: {event.src_path}")
            self.catalog_manager.reload()

    on_created = on_modified


class SLACatalogManager(ICatalogProvider):
    """
    Thread-safe SLA catalog holder with hot-reload support.

    Uses watchdog to monitor file changes and swap in the new catalog
    without restarting the service. A broken edit keeps the last good
    catalog.
    """

    def __init__(self):
        self._catalog: Optional[SLACatalog] = None
        self._lock = threading.Lock()
        self._path: Optional[Path] = None
        self._observer = None

    def load(self, path: Path) -> SLACatalog:
        """Initial catalog load; invalid files raise ConfigurationException."""
        self._path = Path(path)
        catalog = load_catalog_file(self._path)
        with self._lock:
            self._catalog = catalog
        logger.info(
            "SLA catalog loaded",
            extra={"path": str(self._path), "sops": len(catalog.sops)}
        )
        return catalog

    def reload(self) -> bool:
        """Reload catalog from file."""
        if self._path is None:
            return False

        try:
            new_catalog = load_catalog_file(self._path)
        except ConfigurationException as e:
            logger.error(f"Failed to reload SLA catalog: {e}")
            return False

        with self._lock:
            self._catalog = new_catalog
        logger.info("SLA catalog reloaded successfully")
        return True

    def start_watching(self) -> None:
        """
        Start watching the catalog file for changes.

        Skips watching if the file does not exist or the platform cannot
        provide file events.
        """
        if self._path is None:
            raise RuntimeError("Catalog not loaded. Call load() first.")

        if not self._path.exists():
            logger.info(
                f"Catalog file doesn't exist, skipping file watch: {self._path}. "
                "Using built-in SLA catalog."
            )
            return

        try:
            self._observer = Observer()
            handler = CatalogFileHandler(self, self._path)
            self._observer.schedule(
                handler,
                str(self._path.parent.resolve()),
                recursive=False
            )
            self._observer.start()
            logger.info(f"Started watching catalog file: {self._path}")
        except OSError as e:
            logger.warning(
                f"File watching not available, using static catalog: {e}"
            )
            self._observer = None

    def stop_watching(self) -> None:
        """Stop watching catalog file (safe to call even if not watching)."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None

    @property
    def is_watching(self) -> bool:
        return self._observer is not None

    @property
    def catalog(self) -> SLACatalog:
        """Get current catalog."""
        with self._lock:
            if self._catalog is None:
                raise RuntimeError("SLA catalog not loaded")
            return self._catalog

    def get_catalog(self) -> SLACatalog:
        return self.catalog
