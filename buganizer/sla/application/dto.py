"""
SLA Application DTOs
=====================

Data Transfer Objects for SLA API layer.

These Pydantic models handle serialization/deserialization and validation
for API requests and responses. Following YAGNI - only what's needed.
"""

from datetime import datetime
from typing import Dict, List
from uuid import UUID

from pydantic import BaseModel, Field

from buganizer.sla.domain import SLARiskIssue, SLATarget


# ========== Request DTOs ==========

class SLATargetRequest(BaseModel):
    """
    Request model for computing an SLA target.

    Unknown priorities fall back to 72 base hours; unknown severities
    leave the base unchanged.
    """
    priority: str = Field(default="", description="P0..P4")
    severity: str = Field(default="", description="S0..S3")


# ========== Response DTOs ==========

class SLATargetResponse(BaseModel):
    priority: str
    severity: str
    target_hours: int
    target_date: datetime
    description: str = Field(..., description="Human-readable target, display only")

    @classmethod
    def from_domain(cls, target: SLATarget) -> "SLATargetResponse":
        return cls(
            priority=target.priority,
            severity=target.severity,
            target_hours=target.target_hours,
            target_date=target.target_date,
            description=target.description,
        )


class SLARiskIssueResponse(BaseModel):
    issue_id: UUID
    title: str
    priority: str
    severity: str
    due_date: datetime
    hours_remaining: int = Field(..., description="Negative once the due date has passed")

    @classmethod
    def from_domain(cls, risk: SLARiskIssue) -> "SLARiskIssueResponse":
        return cls(
            issue_id=risk.issue_id,
            title=risk.title,
            priority=risk.priority,
            severity=risk.severity,
            due_date=risk.due_date,
            hours_remaining=risk.hours_remaining,
        )


class SLARiskResponse(BaseModel):
    at_risk_issues: List[SLARiskIssueResponse] = Field(default_factory=list)
    total_at_risk: int
    threshold_hours: int


class SLAStatsResponse(BaseModel):
    """Compliance over resolved issues with a due date."""
    total_issues: int
    met_sla: int
    missed_sla: int
    sla_compliance_percentage: float
    issues_by_priority: Dict[str, int] = Field(default_factory=dict)
    issues_by_severity: Dict[str, int] = Field(default_factory=dict)
    compliance_by_priority: Dict[str, float] = Field(default_factory=dict)
    compliance_by_severity: Dict[str, float] = Field(default_factory=dict)
    start_date: datetime
    end_date: datetime
