"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="buganizer", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root logging level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)
    base_url: str = Field(
        default="http://localhost:3000",
        description="Public URL used to build issue and file links"
    )

    # ========== Storage ==========
    storage_backend: Literal["postgres", "memory"] = Field(
        default="postgres",
        description="Issue storage backend (memory is for development and tests)"
    )
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/buganizer",
        description="PostgreSQL connection URL (async)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== Listing / Search ==========
    default_page_size: int = Field(default=50, description="Issues per page when unspecified", ge=1)
    max_page_size: int = Field(default=1000, description="Upper bound for requested page size", ge=1)

    # ========== SLA ==========
    sla_config_path: Path = Field(
        default=Path("sla_config.yaml"),
        description="Path to SLA configuration YAML file"
    )
    sla_monitor_interval: int = Field(
        default=300,
        description="Seconds between SLA risk scans (0 disables the monitor)",
        ge=0
    )
    sla_at_risk_threshold_hours: int = Field(
        default=4,
        description="Issues due within this many hours are reported as at risk",
        ge=0
    )
    sla_risk_max_issues: int = Field(default=100, description="Max issues scanned for SLA risk", ge=1)
    sla_stats_max_issues: int = Field(default=1000, description="Max issues aggregated for SLA stats", ge=1)
    sla_stats_default_days: int = Field(
        default=30,
        description="Default look-back window for SLA stats",
        ge=1
    )

    # ========== Slack Integration ==========
    slack_webhook_url: Optional[str] = Field(
        default=None,
        description="Slack webhook URL for notifications"
    )
    slack_channel: str = Field(
        default="#bugs",
        description="Default Slack channel for notifications"
    )
    slack_timeout_seconds: float = Field(
        default=5.0,
        description="Timeout for Slack API calls",
        ge=0.1,
        le=30
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class Priority(str, Enum):
    """Issue priority levels."""
    P0 = "P0"   # Critical - immediate action required
    P1 = "P1"   # High
    P2 = "P2"   # Medium
    P3 = "P3"   # Low
    P4 = "P4"   # Trivial


class Severity(str, Enum):
    """Issue severity levels."""
    S0 = "S0"   # System down
    S1 = "S1"   # Significant impact
    S2 = "S2"   # Partial functionality affected
    S3 = "S3"   # Edge case or cosmetic


class IssueStatus(str, Enum):
    """Issue lifecycle statuses."""
    NEW = "NEW"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    FIXED = "FIXED"
    VERIFIED = "VERIFIED"
    CLOSED = "CLOSED"
    DUPLICATE = "DUPLICATE"
    WONT_FIX = "WONT_FIX"


class NotificationType(str, Enum):
    """Events that produce outbound notifications."""
    ISSUE_CREATED = "issue_created"
    ISSUE_UPDATED = "issue_updated"
    ISSUE_ASSIGNED = "issue_assigned"
    COMMENT_ADDED = "comment_added"
    SLA_AT_RISK = "sla_at_risk"
    SLA_BREACHED = "sla_breached"


# ========== Lists for validation ==========

VALID_PRIORITIES = [p.value for p in Priority]
VALID_SEVERITIES = [s.value for s in Severity]
VALID_STATUSES = [s.value for s in IssueStatus]

# Statuses counted by SLA compliance reporting
RESOLVED_STATUSES = (IssueStatus.CLOSED, IssueStatus.VERIFIED)
