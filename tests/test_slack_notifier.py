import json
from datetime import timedelta

import httpx
import pytest

from buganizer.config import NotificationType
from buganizer.core import ExternalServiceException
from buganizer.issues.infrastructure.external import SlackNotifier
from buganizer.shared.infrastructure.slack import SlackClient
from buganizer.sla.domain import SLAAggregator, SLAConfig, StaticSLAConfigProvider

WEBHOOK_URL = "https://hooks.slack.test/services/T000/B000/XXX"


class SingleAttemptSlackClient(SlackClient):
    """No retries, so failure tests skip the backoff sleeps."""

    async def send(self, data, max_retries=1):
        return await super().send(data, max_retries=max_retries)


def slack_client(status_code=200, client_cls=SlackClient):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(json.loads(request.content))
        return httpx.Response(status_code)

    client = client_cls(webhook_url=WEBHOOK_URL, default_channel="#bugs")
    client._http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return client, requests


async def test_issue_notification_payload(make_issue):
    client, requests = slack_client()
    notifier = SlackNotifier(client, base_url="https://bugs.example.com")
    issue = make_issue(title="Checkout broken")

    delivered = await notifier.notify_issue(issue, NotificationType.ISSUE_CREATED, "New issue created: Checkout broken")

    assert delivered is True
    (payload,) = requests
    assert payload["channel"] == "#bugs"
    assert payload["text"] == "New issue created: Checkout broken"
    assert payload["blocks"][0]["text"]["text"].endswith("New Issue")
    assert f"https://bugs.example.com/issues/{issue.id}" in payload["blocks"][1]["text"]["text"]
    await client.close()


async def test_sla_notification_uses_configured_channel(make_issue, now):
    client, requests = slack_client()
    provider = StaticSLAConfigProvider(SLAConfig(notify_channel="#bugs-sla"))
    notifier = SlackNotifier(client, base_url="https://bugs.example.com", config_provider=provider)
    (risk,) = SLAAggregator.check_risk([make_issue(due_date=now - timedelta(hours=2))], now)

    await notifier.notify_sla(risk, NotificationType.SLA_BREACHED, "SLA breached")

    (payload,) = requests
    assert payload["channel"] == "#bugs-sla"
    assert payload["blocks"][0]["text"]["text"].endswith("SLA Breached")
    assert "*Status:*\nBREACHED" in [field["text"] for field in payload["blocks"][2]["fields"]]
    await client.close()


async def test_unconfigured_webhook_skips_delivery(make_issue):
    notifier = SlackNotifier(SlackClient(webhook_url=""))

    assert await notifier.notify_issue(make_issue(), NotificationType.ISSUE_CREATED, "created") is False


async def test_failed_delivery_raises(make_issue):
    client, requests = slack_client(status_code=500, client_cls=SingleAttemptSlackClient)
    notifier = SlackNotifier(client)

    with pytest.raises(ExternalServiceException):
        await notifier.notify_issue(make_issue(), NotificationType.ISSUE_UPDATED, "updated")
    assert len(requests) == 1
    await client.close()
