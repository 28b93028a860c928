"""
SLA External Service Integrations
==================================

External services for SLA tracking:
- YAML config file watcher (hot reload of the SLA tables)
- APScheduler for the background risk monitor
"""

import threading
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from pydantic import ValidationError
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from buganizer.config import settings
from buganizer.core import ConfigurationException
from buganizer.shared.infrastructure.logging import get_logger
from buganizer.sla.domain import ISLAConfigProvider, SLAConfig

logger = get_logger(__name__)


class ConfigFileHandler(FileSystemEventHandler):
    """Watchdog event handler for SLA config file changes."""

    def __init__(self, config_manager: "SLAConfigManager", config_path: Path):
        self.config_manager = config_manager
        self.config_path = config_path
        super().__init__()

    def on_modified(self, event):
        if event.is_directory:
            return
        if Path(event.src_path).resolve() == self.config_path.resolve():
            logger.info("SLA config file changed", extra={"path": event.src_path})
            self.config_manager.reload()

    on_created = on_modified


class SLAConfigManager(ISLAConfigProvider):
    """
    Thread-safe SLA configuration with hot-reload support.

    Watchdog calls ``reload`` from its own thread; readers always see
    either the old or the new config, never a partial one. A file that
    fails to parse leaves the previous config in place.
    """

    def __init__(self, default_threshold_hours: Optional[int] = None):
        self._config: Optional[SLAConfig] = None
        self._lock = threading.Lock()
        self._path: Optional[Path] = None
        self._observer = None
        if default_threshold_hours is None:
            default_threshold_hours = settings.sla_at_risk_threshold_hours
        self._default_threshold_hours = default_threshold_hours

    def load(self, path: Path) -> SLAConfig:
        """
        Initial configuration load.

        Raises:
            ConfigurationException: If the file exists but is invalid
        """
        self._path = Path(path)
        try:
            config = self._load_from_file(self._path)
        except (yaml.YAMLError, ValidationError, ValueError, OSError) as e:
            raise ConfigurationException(
                f"invalid SLA config: {self._path}",
                {"error": str(e)}
            ) from e

        with self._lock:
            self._config = config
        logger.info(
            "SLA configuration loaded",
            extra={"path": str(self._path), "threshold_hours": config.at_risk_threshold_hours}
        )
        return config

    def _load_from_file(self, path: Path) -> SLAConfig:
        if not path.exists():
            logger.warning("SLA config file not found, using defaults", extra={"path": str(path)})
            return SLAConfig(at_risk_threshold_hours=self._default_threshold_hours)

        with open(path, "r") as f:
            data: Dict[str, Any] = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError("SLA config must be a mapping")

        data.setdefault("at_risk_threshold_hours", self._default_threshold_hours)
        return SLAConfig(**data)

    def reload(self) -> bool:
        """Reload configuration from file; keeps the current one on failure."""
        if self._path is None:
            return False

        try:
            new_config = self._load_from_file(self._path)
        except (yaml.YAMLError, ValidationError, ValueError, OSError) as e:
            logger.error(
                "Failed to reload SLA config, keeping previous",
                extra={"path": str(self._path), "error": str(e)}
            )
            return False

        with self._lock:
            self._config = new_config
        logger.info("SLA configuration reloaded successfully")
        return True

    def start_watching(self) -> None:
        """
        Start watching the configuration file for changes.

        Skipped when the file does not exist or inotify is unavailable
        (some container runtimes).
        """
        if self._path is None:
            raise ConfigurationException("SLA config not loaded, call load() first")

        if not self._path.exists():
            logger.info("SLA config file absent, skipping file watch", extra={"path": str(self._path)})
            return

        try:
            self._observer = Observer()
            handler = ConfigFileHandler(self, self._path)
            self._observer.schedule(handler, str(self._path.resolve().parent), recursive=False)
            self._observer.start()
            logger.info("Started watching SLA config file", extra={"path": str(self._path)})
        except OSError as e:
            logger.warning("File watching not available, using static config", extra={"error": str(e)})
            self._observer = None

    def stop_watching(self) -> None:
        """Stop watching (safe to call even if not watching)."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None

    def get_config(self) -> SLAConfig:
        with self._lock:
            config = self._config
        if config is None:
            raise ConfigurationException("SLA configuration not loaded")
        return config

    @property
    def config(self) -> SLAConfig:
        return self.get_config()


class SLAScheduler:
    """
    Wrapper for APScheduler running the SLA risk monitor.

    Manages the lifecycle of the scheduler and its single job.
    """

    def __init__(self, interval_seconds: int = 300):
        self.interval_seconds = interval_seconds
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._running = False

    async def start(self, job_func) -> None:
        """Start the scheduler with the given coroutine function."""
        if self._running:
            logger.warning("SLA scheduler already running")
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            job_func,
            "interval",
            seconds=self.interval_seconds,
            id="sla_risk_monitor",
            name="SLA Risk Monitor",
            misfire_grace_time=60,
            max_instances=1,
            replace_existing=True
        )
        self._scheduler.start()
        self._running = True

        logger.info("SLA scheduler started", extra={"interval_seconds": self.interval_seconds})

    async def stop(self) -> None:
        """Stop the scheduler gracefully."""
        if not self._running:
            return

        if self._scheduler:
            self._scheduler.shutdown(wait=False)

        self._running = False
        logger.info("SLA scheduler stopped")

    @property
    def is_running(self) -> bool:
        return self._running
