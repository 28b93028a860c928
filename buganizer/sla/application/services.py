"""
SLA Application Services
=========================

Application services orchestrate SLA use cases: they build the issue
filter for a report, run it through the query pipeline and hand the batch
to the aggregator.

Following SOLID principles:
- Single Responsibility: Each service has one clear purpose
- Dependency Inversion: Depend on abstractions (query executor, config
  provider, notifier), not concrete implementations
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from buganizer.config import NotificationType, settings
from buganizer.core import ExternalServiceException, ValidationException
from buganizer.issues.application.services import INotifier
from buganizer.search.application.services import IssueQueryService
from buganizer.search.domain import IssueOrder
from buganizer.shared.infrastructure.logging import get_logger
from buganizer.sla.domain import (
    ISLAConfigProvider,
    SLAAggregator,
    SLACalculator,
    SLARiskIssue,
    SLAStats,
    SLATarget,
    StaticSLAConfigProvider,
)

logger = get_logger(__name__)


def _day(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d")


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are taken to be UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


@dataclass
class SLARiskReport:
    """Issues due within the at-risk window, soonest first."""
    at_risk_issues: List[SLARiskIssue] = field(default_factory=list)
    threshold_hours: int = 0
    checked_at: Optional[datetime] = None

    @property
    def total_at_risk(self) -> int:
        return len(self.at_risk_issues)

    @property
    def breached(self) -> List[SLARiskIssue]:
        return [risk for risk in self.at_risk_issues if risk.is_breached]


@dataclass
class SLAStatsReport:
    stats: SLAStats
    start_date: datetime
    end_date: datetime


class SLAService:
    """
    SLA targets, risk scans and compliance statistics.

    Every method takes ``now`` so one request is evaluated against one
    instant; it defaults to the current UTC time.
    """

    def __init__(
        self,
        query_service: IssueQueryService,
        config_provider: Optional[ISLAConfigProvider] = None
    ):
        self._queries = query_service
        self._config_provider = config_provider or StaticSLAConfigProvider()

    def calculate_sla_target(
        self,
        priority: str,
        severity: str,
        now: Optional[datetime] = None
    ) -> SLATarget:
        """
        Raises:
            ValidationException: If priority or severity is empty
        """
        if not priority:
            raise ValidationException("priority is required")
        if not severity:
            raise ValidationException("severity is required")

        now = now or datetime.now(timezone.utc)
        return SLACalculator.calculate_target(priority, severity, now, self._config_provider.get_config())

    async def check_sla_risk(
        self,
        team_id: Optional[str] = None,
        include_closed: bool = False,
        now: Optional[datetime] = None
    ) -> SLARiskReport:
        """
        Issues whose due date falls before ``now + at_risk_threshold_hours``,
        including ones already past due.
        """
        now = _as_utc(now) or datetime.now(timezone.utc)
        threshold_hours = self._config_provider.get_config().at_risk_threshold_hours
        threshold = now + timedelta(hours=threshold_hours)

        # due_before is day-granular; fetch through the end of the threshold day
        filter_string = f"due_before:{_day(threshold + timedelta(days=1))}"
        if team_id:
            filter_string += f" team:{team_id}"
        if not include_closed:
            filter_string += " is:open"

        # soonest due first, so the limit never pushes out breached issues
        issues, _ = await self._queries.run(
            filter_string,
            settings.sla_risk_max_issues,
            order=IssueOrder.DUE_SOONEST
        )
        candidates = [issue for issue in issues if issue.due_date is not None and issue.due_date <= threshold]

        at_risk = SLAAggregator.check_risk(candidates, now)
        at_risk.sort(key=lambda risk: risk.due_date)

        logger.info(
            "SLA risk check complete",
            extra={
                "at_risk": len(at_risk),
                "breached": sum(1 for risk in at_risk if risk.is_breached),
                "threshold_hours": threshold_hours
            }
        )
        return SLARiskReport(at_risk_issues=at_risk, threshold_hours=threshold_hours, checked_at=now)

    async def get_sla_stats(
        self,
        component_id: Optional[str] = None,
        team_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        now: Optional[datetime] = None
    ) -> SLAStatsReport:
        """
        Compliance for issues created in ``[start_date, end_date]``.
        Bounds without a timezone are read as UTC.

        Raises:
            ValidationException: If neither component nor team is given
        """
        if not component_id and not team_id:
            raise ValidationException("either component_id or team_id is required")

        now = _as_utc(now) or datetime.now(timezone.utc)
        end = _as_utc(end_date) or now
        start = _as_utc(start_date) or (now - timedelta(days=settings.sla_stats_default_days))
        if start > end:
            raise ValidationException("start_date must not be after end_date")

        filter_string = f"created_after:{_day(start)} created_before:{_day(end + timedelta(days=1))}"
        if component_id:
            filter_string += f" component:{component_id}"
        if team_id:
            filter_string += f" team:{team_id}"

        issues, total = await self._queries.run(filter_string, settings.sla_stats_max_issues)
        stats = SLAAggregator.compute_stats(issues)

        logger.info(
            "SLA stats computed",
            extra={
                "matching_issues": total,
                "counted_issues": stats.total_issues,
                "compliance": round(stats.compliance_percentage, 2)
            }
        )
        return SLAStatsReport(stats=stats, start_date=start, end_date=end)


class SLAMonitor:
    """
    Background risk evaluation.

    Remembers each issue's last reported state and notifies only when it
    changes: entering the at-risk window, or passing the due date.
    """

    def __init__(self, notifier: Optional[INotifier] = None):
        self._notifier = notifier
        self._states: Dict[UUID, NotificationType] = {}

    async def evaluate(
        self,
        sla_service: SLAService,
        now: Optional[datetime] = None
    ) -> List[Tuple[SLARiskIssue, NotificationType]]:
        """
        Run one risk scan.

        Returns:
            The state changes that were notified
        """
        report = await sla_service.check_sla_risk(now=now)

        current: Dict[UUID, NotificationType] = {}
        changes: List[Tuple[SLARiskIssue, NotificationType]] = []
        for risk in report.at_risk_issues:
            state = NotificationType.SLA_BREACHED if risk.is_breached else NotificationType.SLA_AT_RISK
            current[risk.issue_id] = state
            if self._states.get(risk.issue_id) != state:
                changes.append((risk, state))
        self._states = current

        for risk, state in changes:
            await self._notify(risk, state)

        logger.info(
            "SLA monitor evaluation complete",
            extra={"tracked": len(current), "notified": len(changes)}
        )
        return changes

    async def _notify(self, risk: SLARiskIssue, state: NotificationType) -> None:
        if self._notifier is None:
            return

        if state == NotificationType.SLA_BREACHED:
            message = f"SLA breached: {risk.title} was due {abs(risk.hours_remaining)} hours ago"
        else:
            message = f"SLA at risk: {risk.title} is due in {risk.hours_remaining} hours"

        try:
            await self._notifier.notify_sla(risk, state, message)
        except ExternalServiceException as e:
            logger.warning(
                "SLA notification failed",
                extra={"issue_id": str(risk.issue_id), "error": e.message}
            )
