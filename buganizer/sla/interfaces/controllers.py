"""
SLA Controllers (API Routes)
=============================

FastAPI routes for SLA targets, risk and compliance.

Controllers are thin - they delegate to application services.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from buganizer.dependencies import get_sla_service
from buganizer.shared.api.dependencies import get_current_user_id
from buganizer.sla.application import (
    SLARiskIssueResponse,
    SLARiskResponse,
    SLAService,
    SLAStatsResponse,
    SLATargetRequest,
    SLATargetResponse,
)

router = APIRouter(prefix="/sla", tags=["SLA"])


# ========== Example payloads for Swagger ==========

SLA_TARGET_RESPONSE_EXAMPLE = {
    "priority": "P1",
    "severity": "S3",
    "target_hours": 36,
    "target_date": "2024-01-16T22:00:00Z",
    "description": "Target resolution time: 36 hours (2024-01-16 22:00:00)"
}

SLA_STATS_RESPONSE_EXAMPLE = {
    "total_issues": 4,
    "met_sla": 3,
    "missed_sla": 1,
    "sla_compliance_percentage": 75.0,
    "issues_by_priority": {"P1": 4},
    "issues_by_severity": {"S2": 4},
    "compliance_by_priority": {"P1": 75.0},
    "compliance_by_severity": {"S2": 75.0},
    "start_date": "2024-01-01T00:00:00Z",
    "end_date": "2024-01-31T00:00:00Z"
}


@router.post(
    "/target",
    response_model=SLATargetResponse,
    summary="Compute an SLA target",
    description="""
    Resolution target for a priority/severity pair raised now.

    | Priority | Base hours |   | Severity | Multiplier |
    |----------|-----------:|---|----------|-----------:|
    | P0       | 4          |   | S0       | 0.5        |
    | P1       | 24         |   | S1       | 0.75       |
    | P2       | 72         |   | S2       | 1.0        |
    | P3       | 168        |   | S3       | 1.5        |
    | P4       | 336        |   |          |            |

    Unknown priorities use 72 hours; unknown severities use 1.0.
    """,
    responses={200: {"content": {"application/json": {"example": SLA_TARGET_RESPONSE_EXAMPLE}}}}
)
async def calculate_sla_target(
    request: SLATargetRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: SLAService = Depends(get_sla_service)
):
    target = service.calculate_sla_target(request.priority, request.severity)
    return SLATargetResponse.from_domain(target)


@router.get(
    "/risk",
    response_model=SLARiskResponse,
    summary="Issues at SLA risk",
    description="Open issues due within the at-risk threshold, including breached ones (negative hours)."
)
async def check_sla_risk(
    team_id: Optional[str] = Query(default=None),
    include_closed: bool = Query(default=False),
    user_id: UUID = Depends(get_current_user_id),
    service: SLAService = Depends(get_sla_service)
):
    report = await service.check_sla_risk(team_id=team_id, include_closed=include_closed)
    return SLARiskResponse(
        at_risk_issues=[SLARiskIssueResponse.from_domain(risk) for risk in report.at_risk_issues],
        total_at_risk=report.total_at_risk,
        threshold_hours=report.threshold_hours,
    )


@router.get(
    "/stats",
    response_model=SLAStatsResponse,
    summary="SLA compliance statistics",
    description="""
    Compliance over resolved (`VERIFIED`/`CLOSED`) issues created in the
    window. Requires `component_id` or `team_id`. Defaults to the last 30 days.
    """,
    responses={200: {"content": {"application/json": {"example": SLA_STATS_RESPONSE_EXAMPLE}}}}
)
async def get_sla_stats(
    component_id: Optional[str] = Query(default=None),
    team_id: Optional[str] = Query(default=None),
    start_date: Optional[datetime] = Query(default=None),
    end_date: Optional[datetime] = Query(default=None),
    user_id: UUID = Depends(get_current_user_id),
    service: SLAService = Depends(get_sla_service)
):
    report = await service.get_sla_stats(
        component_id=component_id,
        team_id=team_id,
        start_date=start_date,
        end_date=end_date,
    )
    stats = report.stats
    return SLAStatsResponse(
        total_issues=stats.total_issues,
        met_sla=stats.met_sla,
        missed_sla=stats.missed_sla,
        sla_compliance_percentage=stats.compliance_percentage,
        issues_by_priority=stats.issues_by_priority,
        issues_by_severity=stats.issues_by_severity,
        compliance_by_priority=stats.compliance_by_priority,
        compliance_by_severity=stats.compliance_by_severity,
        start_date=report.start_date,
        end_date=report.end_date,
    )
