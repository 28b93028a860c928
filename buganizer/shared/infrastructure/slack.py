"""
Slack Webhook Client
====================

Slack incoming-webhook client with circuit breaker and retry logic,
shared by the issue and SLA modules.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from buganizer.config import NotificationType, settings
from buganizer.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class CircuitState:
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """
    Circuit breaker for preventing cascade failures.

    States:
    - CLOSED: Normal operation, requests pass through
    - OPEN: After N failures, reject all requests for M seconds
    - HALF_OPEN: After timeout, allow one test request
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_time: Optional[float] = None

    @property
    def state(self) -> str:
        """Get current circuit state."""
        if self._state == CircuitState.OPEN and self._last_failure_time:
            elapsed = time.monotonic() - self._last_failure_time
            if elapsed >= self.recovery_timeout:
                self._state = CircuitState.HALF_OPEN
        return self._state

    def allow_request(self) -> bool:
        """Check if request should be allowed."""
        return self.state in (CircuitState.CLOSED, CircuitState.HALF_OPEN)

    def record_success(self) -> None:
        """Record successful request."""
        self._failure_count = 0
        self._state = CircuitState.CLOSED

    def record_failure(self) -> None:
        """Record failed request."""
        self._failure_count += 1
        self._last_failure_time = time.monotonic()

        if self._failure_count >= self.failure_threshold:
            self._state = CircuitState.OPEN
            logger.warning(
                "Circuit breaker opened",
                extra={
                    "failure_count": self._failure_count,
                    "recovery_timeout": self.recovery_timeout
                }
            )


_HEADERS = {
    NotificationType.ISSUE_CREATED: ("🐛", "New Issue"),
    NotificationType.ISSUE_UPDATED: ("🔄", "Issue Updated"),
    NotificationType.ISSUE_ASSIGNED: ("👤", "Issue Assigned"),
    NotificationType.COMMENT_ADDED: ("💬", "New Comment"),
    NotificationType.SLA_AT_RISK: ("⚠️", "SLA At Risk"),
    NotificationType.SLA_BREACHED: ("🚨", "SLA Breached"),
}


@dataclass
class SlackMessage:
    """Slack notification message."""
    issue_id: str
    title: str
    description: str
    priority: str
    severity: str
    status: str
    notification_type: NotificationType
    text: str
    issue_url: str
    timestamp: str
    channel: Optional[str] = None


def _truncate(value: str, limit: int) -> str:
    if len(value) <= limit:
        return value
    return value[:limit - 3] + "..."


class SlackClient:
    """
    Slack webhook client with circuit breaker and retry logic.

    Handles sending structured notifications to Slack with:
    - Circuit breaker to prevent cascade failures
    - Exponential backoff retry
    - Timeout handling
    """

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        default_channel: Optional[str] = None,
        timeout_seconds: Optional[float] = None
    ):
        self._webhook_url = webhook_url if webhook_url is not None else settings.slack_webhook_url
        self._default_channel = default_channel or settings.slack_channel
        self._timeout = timeout_seconds or settings.slack_timeout_seconds
        self._circuit_breaker = CircuitBreaker(
            failure_threshold=5,
            recovery_timeout=60
        )
        self._http_client: Optional[httpx.AsyncClient] = None

    @property
    def is_configured(self) -> bool:
        return bool(self._webhook_url)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    def build_message(self, data: SlackMessage) -> Dict[str, Any]:
        """Build Slack Block Kit message."""
        emoji, action = _HEADERS.get(data.notification_type, ("📌", "Issue Update"))

        blocks = [
            {
                "type": "header",
                "text": {
                    "type": "plain_text",
                    "text": f"{emoji} {action}",
                    "emoji": True
                }
            },
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": f"*<{data.issue_url}|{data.title}>*\n{_truncate(data.description, 100)}"
                }
            },
            {
                "type": "section",
                "fields": [
                    {"type": "mrkdwn", "text": f"*Priority:*\n{data.priority}"},
                    {"type": "mrkdwn", "text": f"*Severity:*\n{data.severity}"},
                    {"type": "mrkdwn", "text": f"*Status:*\n{data.status}"},
                ]
            },
            {
                "type": "context",
                "elements": [
                    {"type": "mrkdwn", "text": f"{data.text} | {data.timestamp}"}
                ]
            }
        ]

        return {
            "channel": data.channel or self._default_channel,
            "text": data.text,
            "blocks": blocks
        }

    async def send(
        self,
        data: SlackMessage,
        max_retries: int = 3
    ) -> bool:
        """
        Send a message to the Slack webhook.

        Returns:
            True if sent successfully, False otherwise
        """
        if not self._webhook_url:
            logger.debug("Slack webhook URL not configured, skipping notification")
            return False

        if not self._circuit_breaker.allow_request():
            logger.warning(
                "Circuit breaker open, skipping Slack notification",
                extra={"issue_id": data.issue_id}
            )
            return False

        message = self.build_message(data)

        for attempt in range(max_retries):
            try:
                client = await self._get_client()
                response = await client.post(self._webhook_url, json=message)

                if response.status_code == 200:
                    self._circuit_breaker.record_success()
                    logger.info(
                        "Slack notification sent",
                        extra={
                            "issue_id": data.issue_id,
                            "notification_type": data.notification_type.value
                        }
                    )
                    return True

                logger.warning(
                    "Slack webhook returned non-200",
                    extra={
                        "status_code": response.status_code,
                        "attempt": attempt + 1
                    }
                )

            except httpx.HTTPError as e:
                logger.error(
                    "Slack notification failed",
                    extra={
                        "error": str(e),
                        "attempt": attempt + 1,
                        "issue_id": data.issue_id
                    }
                )

            if attempt < max_retries - 1:
                await asyncio.sleep(2 ** attempt)

        self._circuit_breaker.record_failure()
        return False

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
