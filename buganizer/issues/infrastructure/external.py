"""
Issue External Service Integrations
===================================

Slack implementation of the ``INotifier`` port for issue lifecycle and
SLA events.
"""

from datetime import datetime, timezone
from typing import Optional

from buganizer.config import NotificationType, settings
from buganizer.core import ExternalServiceException
from buganizer.issues.application.services import INotifier
from buganizer.issues.domain import Issue
from buganizer.shared.infrastructure.slack import SlackClient, SlackMessage
from buganizer.sla.domain import ISLAConfigProvider, SLARiskIssue


class SlackNotifier(INotifier):
    """
    Posts issue and SLA events to Slack.

    SLA events go to the SLA config's ``notify_channel`` when one is set.
    An unconfigured webhook skips delivery; a configured webhook that
    fails after retries raises ``ExternalServiceException``.
    """

    def __init__(
        self,
        client: SlackClient,
        base_url: Optional[str] = None,
        config_provider: Optional[ISLAConfigProvider] = None
    ):
        self._client = client
        self._base_url = (base_url or settings.base_url).rstrip("/")
        self._config_provider = config_provider

    def issue_url(self, issue_id) -> str:
        return f"{self._base_url}/issues/{issue_id}"

    async def notify_issue(
        self,
        issue: Issue,
        notification_type: NotificationType,
        message: str
    ) -> bool:
        return await self._deliver(SlackMessage(
            issue_id=str(issue.id),
            title=issue.title,
            description=issue.description,
            priority=issue.priority.value,
            severity=issue.severity.value,
            status=issue.status.value,
            notification_type=notification_type,
            text=message,
            issue_url=self.issue_url(issue.id),
            timestamp=datetime.now(timezone.utc).isoformat(),
        ))

    async def notify_sla(
        self,
        risk: SLARiskIssue,
        notification_type: NotificationType,
        message: str
    ) -> bool:
        channel = None
        if self._config_provider is not None:
            channel = self._config_provider.get_config().notify_channel

        return await self._deliver(SlackMessage(
            issue_id=str(risk.issue_id),
            title=risk.title,
            description=(
                f"Due {risk.due_date.strftime('%Y-%m-%d %H:%M')} UTC, "
                f"{risk.hours_remaining} hours remaining"
            ),
            priority=risk.priority,
            severity=risk.severity,
            status="BREACHED" if risk.is_breached else "AT RISK",
            notification_type=notification_type,
            text=message,
            issue_url=self.issue_url(risk.issue_id),
            timestamp=datetime.now(timezone.utc).isoformat(),
            channel=channel,
        ))

    async def _deliver(self, message: SlackMessage) -> bool:
        if not self._client.is_configured:
            return False
        if not await self._client.send(message):
            raise ExternalServiceException(
                "slack",
                "notification was not delivered",
                {"issue_id": message.issue_id, "notification_type": message.notification_type.value}
            )
        return True
