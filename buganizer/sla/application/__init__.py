"""
SLA Application Layer
======================

Application layer for the SLA module.

Contains:
- Services: SLAService (targets, risk, stats) and SLAMonitor (background notifications)
- DTOs: Data transfer objects for API serialization

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from buganizer.sla.application.dto import (
    SLARiskIssueResponse,
    SLARiskResponse,
    SLAStatsResponse,
    SLATargetRequest,
    SLATargetResponse,
)
from buganizer.sla.application.services import (
    SLAMonitor,
    SLARiskReport,
    SLAService,
    SLAStatsReport,
)

__all__ = [
    # DTOs
    "SLARiskIssueResponse",
    "SLARiskResponse",
    "SLAStatsResponse",
    "SLATargetRequest",
    "SLATargetResponse",
    # Services
    "SLAMonitor",
    "SLARiskReport",
    "SLAService",
    "SLAStatsReport",
]
