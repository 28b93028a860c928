"""
SLA Value Objects
==================

Immutable value objects for the SLA domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional, Union

from pydantic import BaseModel, Field, field_validator

from buganizer.config import Priority, Severity, VALID_PRIORITIES, VALID_SEVERITIES


DEFAULT_BASE_HOURS: Dict[str, int] = {
    "P0": 4,      # Critical
    "P1": 24,     # 1 day
    "P2": 72,     # 3 days
    "P3": 168,    # 1 week
    "P4": 336,    # 2 weeks
}

DEFAULT_SEVERITY_MULTIPLIERS: Dict[str, float] = {
    "S0": 0.5,
    "S1": 0.75,
    "S2": 1.0,
    "S3": 1.5,
}

DESCRIPTION_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class SLAConfig(BaseModel):
    """
    SLA configuration loaded from YAML.

    Target hours = int(base hours for priority × severity multiplier)

    Entries missing from the file fall back to the built-in table.
    """
    base_hours: Dict[str, int] = Field(
        default_factory=lambda: dict(DEFAULT_BASE_HOURS),
        description="Resolution target in hours by priority"
    )
    default_base_hours: int = Field(
        default=72,
        ge=0,
        description="Base hours for priorities missing from base_hours"
    )
    severity_multipliers: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_SEVERITY_MULTIPLIERS),
        description="Multiplier applied to base hours by severity"
    )
    at_risk_threshold_hours: int = Field(
        default=4,
        ge=0,
        description="Open issues due within this window are at risk"
    )
    notify_channel: Optional[str] = Field(
        default=None,
        description="Slack channel for SLA notifications (defaults to the global channel)"
    )

    @field_validator("base_hours")
    @classmethod
    def validate_base_hours(cls, v: Dict[str, int]) -> Dict[str, int]:
        """Fill in priorities the file does not mention."""
        for priority in VALID_PRIORITIES:
            if priority not in v:
                v[priority] = DEFAULT_BASE_HOURS[priority]
        return v

    @field_validator("severity_multipliers")
    @classmethod
    def validate_severity_multipliers(cls, v: Dict[str, float]) -> Dict[str, float]:
        """Fill in severities the file does not mention."""
        for severity in VALID_SEVERITIES:
            if severity not in v:
                v[severity] = DEFAULT_SEVERITY_MULTIPLIERS[severity]
        return v

    def get_base_hours(self, priority: str) -> int:
        return self.base_hours.get(priority, self.default_base_hours)

    def get_multiplier(self, severity: str) -> float:
        return self.severity_multipliers.get(severity, 1.0)


DEFAULT_SLA_CONFIG = SLAConfig()


class ISLAConfigProvider(ABC):
    """Source of the current SLA configuration."""

    @abstractmethod
    def get_config(self) -> SLAConfig:
        """Get current SLA configuration."""


class StaticSLAConfigProvider(ISLAConfigProvider):
    """Serves a fixed configuration (tests, serverless)."""

    def __init__(self, config: Optional[SLAConfig] = None):
        self._config = config or DEFAULT_SLA_CONFIG

    def get_config(self) -> SLAConfig:
        return self._config


@dataclass(frozen=True)
class SLATarget:
    """
    A computed resolution target. Never stored; the issue's due date is.
    """
    priority: str
    severity: str
    target_hours: int
    target_date: datetime
    description: str


def _key(value: Union[Priority, Severity, str]) -> str:
    return value.value if isinstance(value, (Priority, Severity)) else str(value)


class SLACalculator:
    """
    Pure functions for SLA calculations.

    Deterministic and free of I/O: ``now`` and the configuration are
    explicit inputs.
    """

    @staticmethod
    def target_hours(
        priority: Union[Priority, str],
        severity: Union[Severity, str],
        config: Optional[SLAConfig] = None
    ) -> int:
        """
        Resolution target in whole hours.

        Unknown priorities use ``default_base_hours``; unknown severities
        leave the base unchanged. Fractional results truncate.

        Example:
            P1/S3 -> int(24 * 1.5) = 36
        """
        config = config or DEFAULT_SLA_CONFIG
        base = config.get_base_hours(_key(priority))
        return int(base * config.get_multiplier(_key(severity)))

    @staticmethod
    def calculate_target(
        priority: Union[Priority, str],
        severity: Union[Severity, str],
        now: datetime,
        config: Optional[SLAConfig] = None
    ) -> SLATarget:
        """
        Calculate the resolution target for an issue raised at ``now``.

        No business-hours, weekend or holiday adjustment is applied.
        """
        hours = SLACalculator.target_hours(priority, severity, config)
        target_date = now + timedelta(hours=hours)
        return SLATarget(
            priority=_key(priority),
            severity=_key(severity),
            target_hours=hours,
            target_date=target_date,
            description=(
                f"Target resolution time: {hours} hours "
                f"({target_date.strftime(DESCRIPTION_DATE_FORMAT)})"
            ),
        )
