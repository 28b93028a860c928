"""
Shared pytest fixtures.

Provides:
    - now: fixed evaluation instant (UTC)
    - make_issue: Issue factory with sensible defaults
    - issue_repository / comment_repository / attachment_repository: in-memory storage
    - view_repository / team_repository: in-memory saved views and teams
    - notifier: recording INotifier
"""

from datetime import datetime, timedelta, timezone
from typing import List, Tuple
from uuid import UUID, uuid4

import pytest

from buganizer.config import IssueStatus, NotificationType, Priority, Severity
from buganizer.issues.application.services import INotifier
from buganizer.issues.domain import Issue
from buganizer.issues.infrastructure.memory import (
    InMemoryAttachmentRepository,
    InMemoryCommentRepository,
    InMemoryIssueRepository,
)
from buganizer.search.infrastructure.memory import (
    InMemoryTeamMembershipRepository,
    InMemoryViewRepository,
)

NOW = datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc)
COMPONENT_ID = UUID("0b8a4a8e-8c7e-4c5c-9a53-0a8a2a9d5b11")
REPORTER_ID = UUID("2c1d8c6e-0f62-4b1e-8d5d-4c2a3b6e7f01")


class RecordingNotifier(INotifier):
    """Keeps every notification instead of sending it."""

    def __init__(self):
        self.issue_events: List[Tuple[Issue, NotificationType, str]] = []
        self.sla_events: List[Tuple[object, NotificationType, str]] = []

    async def notify_issue(self, issue, notification_type, message) -> bool:
        self.issue_events.append((issue, notification_type, message))
        return True

    async def notify_sla(self, risk, notification_type, message) -> bool:
        self.sla_events.append((risk, notification_type, message))
        return True


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def component_id() -> UUID:
    return COMPONENT_ID


@pytest.fixture
def make_issue():
    def _make(**overrides) -> Issue:
        created = overrides.pop("created_at", NOW - timedelta(days=1))
        values = dict(
            id=uuid4(),
            title="Login page crashes",
            description="Submitting the form crashes the page",
            component_id=COMPONENT_ID,
            reporter_id=REPORTER_ID,
            priority=Priority.P2,
            severity=Severity.S2,
            status=IssueStatus.NEW,
            created_at=created,
            updated_at=created,
            due_date=created + timedelta(hours=72),
        )
        values.update(overrides)
        return Issue(**values)
    return _make


@pytest.fixture
def issue_repository() -> InMemoryIssueRepository:
    return InMemoryIssueRepository()


@pytest.fixture
def comment_repository() -> InMemoryCommentRepository:
    return InMemoryCommentRepository()


@pytest.fixture
def attachment_repository() -> InMemoryAttachmentRepository:
    return InMemoryAttachmentRepository()


@pytest.fixture
def view_repository() -> InMemoryViewRepository:
    return InMemoryViewRepository()


@pytest.fixture
def team_repository() -> InMemoryTeamMembershipRepository:
    return InMemoryTeamMembershipRepository()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
