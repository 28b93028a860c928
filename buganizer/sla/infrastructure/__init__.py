"""
SLA Infrastructure Layer
=========================

Infrastructure implementations for SLA tracking:
- External: YAML config watcher and the monitor scheduler
"""

from buganizer.sla.infrastructure.external import (
    ConfigFileHandler,
    SLAConfigManager,
    SLAScheduler,
)

__all__ = [
    "ConfigFileHandler",
    "SLAConfigManager",
    "SLAScheduler",
]
