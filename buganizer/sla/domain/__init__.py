"""
SLA Domain Layer
================

Domain layer for SLA tracking.

Contains:
- Value Objects: SLAConfig, SLATarget
- Domain Services: SLACalculator (targets), SLAAggregator (risk and compliance)
- Entities: SLARiskIssue, SLAStats

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from buganizer.sla.domain.aggregator import SLAAggregator, hours_until
from buganizer.sla.domain.entities import (
    BucketStats,
    SLARiskIssue,
    SLAStats,
    compliance_percentage,
)
from buganizer.sla.domain.value_objects import (
    DEFAULT_SLA_CONFIG,
    ISLAConfigProvider,
    SLACalculator,
    SLAConfig,
    SLATarget,
    StaticSLAConfigProvider,
)

__all__ = [
    # Entities
    "BucketStats",
    "SLARiskIssue",
    "SLAStats",
    "compliance_percentage",
    # Value Objects & Services
    "DEFAULT_SLA_CONFIG",
    "SLACalculator",
    "SLAConfig",
    "SLATarget",
    "ISLAConfigProvider",
    "StaticSLAConfigProvider",
    "SLAAggregator",
    "hours_until",
]
