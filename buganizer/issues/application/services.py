"""
Issue Application Services
==========================

Application services orchestrate issue use cases and coordinate between
domain entities, repositories, the SLA calculator and notifications.

Following SOLID principles:
- Single Responsibility: IssueService owns issue lifecycle use cases
- Dependency Inversion: Depend on abstractions (repositories, notifier),
  not concrete implementations
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID, uuid4

from buganizer.config import IssueStatus, NotificationType, settings
from buganizer.core import (
    ExternalServiceException,
    ResourceNotFoundException,
    ValidationException,
)
from buganizer.issues.application.dto import (
    IssueCreateRequest,
    IssueUpdateRequest,
)
from buganizer.issues.domain import Attachment, Comment, Issue
from buganizer.search.application.services import (
    IIssueQueryExecutor,
    IssuePage,
    IssueQueryService,
)
from buganizer.search.domain import parse_uuid
from buganizer.shared.infrastructure.logging import get_logger
from buganizer.sla.domain import (
    ISLAConfigProvider,
    SLACalculator,
    SLARiskIssue,
    StaticSLAConfigProvider,
)

logger = get_logger(__name__)

DEFAULT_LIST_FILTER = "is:open"


# ========== Repository Interfaces (Dependency Inversion) ==========

class IIssueRepository(IIssueQueryExecutor):
    """Interface for issue data access; also the query executor."""

    @abstractmethod
    async def get_by_id(self, issue_id: UUID) -> Optional[Issue]:
        """Get issue by ID."""

    @abstractmethod
    async def create(self, issue: Issue) -> Issue:
        """Persist a new issue."""

    @abstractmethod
    async def update(self, issue: Issue) -> Issue:
        """Persist changes to an existing issue."""


class ICommentRepository(ABC):
    """Interface for comment data access."""

    @abstractmethod
    async def create(self, comment: Comment) -> Comment:
        """Persist a new comment."""

    @abstractmethod
    async def list_by_issue(self, issue_id: UUID) -> List[Comment]:
        """Comments on an issue, oldest first."""


class IAttachmentRepository(ABC):
    """Interface for attachment metadata access."""

    @abstractmethod
    async def create(self, attachment: Attachment) -> Attachment:
        """Persist attachment metadata."""


class INotifier(ABC):
    """Outbound notifications for issue and SLA events."""

    @abstractmethod
    async def notify_issue(
        self,
        issue: Issue,
        notification_type: NotificationType,
        message: str
    ) -> bool:
        """Send an issue event; returns False when it was not delivered."""

    @abstractmethod
    async def notify_sla(
        self,
        risk: SLARiskIssue,
        notification_type: NotificationType,
        message: str
    ) -> bool:
        """Send an SLA risk or breach event."""


# ========== Application Services ==========

class IssueService:
    """
    Issue lifecycle: create, read, update, list, comments, attachments.

    Notifications are best effort; a failed notification never fails the
    operation that triggered it.
    """

    def __init__(
        self,
        issue_repository: IIssueRepository,
        comment_repository: ICommentRepository,
        attachment_repository: IAttachmentRepository,
        notifier: Optional[INotifier] = None,
        config_provider: Optional[ISLAConfigProvider] = None,
        base_url: Optional[str] = None
    ):
        self._issues = issue_repository
        self._comments = comment_repository
        self._attachments = attachment_repository
        self._notifier = notifier
        self._config_provider = config_provider or StaticSLAConfigProvider()
        self._base_url = (base_url or settings.base_url).rstrip("/")
        self._queries = IssueQueryService(issue_repository)

    async def create_issue(
        self,
        request: IssueCreateRequest,
        reporter_id: UUID,
        now: Optional[datetime] = None
    ) -> Issue:
        """
        File a new issue with status NEW and an SLA due date.

        Raises:
            ValidationException: Missing title, missing or malformed component ID
        """
        if not request.title.strip():
            raise ValidationException("title is required")
        if not request.component_id:
            raise ValidationException("component_id is required")
        component_id = parse_uuid(request.component_id)
        if component_id is None:
            raise ValidationException(
                "invalid component ID format",
                {"component_id": request.component_id}
            )

        now = now or datetime.now(timezone.utc)
        target = SLACalculator.calculate_target(
            request.priority,
            request.severity,
            now,
            self._config_provider.get_config()
        )

        issue = Issue(
            id=uuid4(),
            title=request.title,
            description=request.description,
            reproduce_steps=request.reproduce_steps,
            component_id=component_id,
            reporter_id=reporter_id,
            assignee_id=request.assignee_id,
            priority=request.priority,
            severity=request.severity,
            status=IssueStatus.NEW,
            created_at=now,
            updated_at=now,
            due_date=target.target_date,
            labels=list(request.labels),
        )
        issue = await self._issues.create(issue)

        logger.info(
            "Issue created",
            extra={
                "issue_id": str(issue.id),
                "priority": issue.priority.value,
                "severity": issue.severity.value,
                "sla_hours": target.target_hours
            }
        )

        await self._notify(issue, NotificationType.ISSUE_CREATED, f"New issue created: {issue.title}")
        return issue

    async def get_issue(self, issue_id: str) -> Issue:
        """
        Raises:
            ValidationException: Malformed issue ID
            ResourceNotFoundException: No such issue
        """
        issue_uuid = self._parse_issue_id(issue_id)
        issue = await self._issues.get_by_id(issue_uuid)
        if issue is None:
            raise ResourceNotFoundException("Issue", issue_id)
        return issue

    async def update_issue(
        self,
        issue_id: str,
        request: IssueUpdateRequest,
        now: Optional[datetime] = None
    ) -> Issue:
        """
        Apply a partial update.

        Any status may be written; transitions are not validated. The due
        date is left as computed at creation.
        """
        issue = await self.get_issue(issue_id)
        old_status = issue.status

        if request.title:
            issue.title = request.title
        if request.description is not None:
            issue.description = request.description
        if request.reproduce_steps is not None:
            issue.reproduce_steps = request.reproduce_steps
        if request.component_id is not None:
            issue.component_id = request.component_id
        if request.assignee_id is not None:
            issue.assignee_id = request.assignee_id
        if request.priority is not None:
            issue.priority = request.priority
        if request.severity is not None:
            issue.severity = request.severity
        if request.status is not None:
            issue.status = request.status
        if request.labels is not None:
            issue.labels = list(request.labels)

        issue.updated_at = now or datetime.now(timezone.utc)
        issue = await self._issues.update(issue)

        logger.info(
            "Issue updated",
            extra={"issue_id": str(issue.id), "status": issue.status.value}
        )

        if issue.status != old_status:
            await self._notify(
                issue,
                NotificationType.ISSUE_UPDATED,
                f"Issue status changed from {old_status.value} to {issue.status.value}: {issue.title}"
            )
        if request.assignee_id is not None:
            await self._notify(issue, NotificationType.ISSUE_ASSIGNED, f"Issue assigned: {issue.title}")

        return issue

    async def list_issues(
        self,
        filter_string: Optional[str] = None,
        page_size: Optional[int] = None,
        page_token: Optional[str] = None,
        current_user_id: Optional[UUID] = None
    ) -> IssuePage:
        """List issues matching a filter; an empty filter lists open issues."""
        if not filter_string or not filter_string.strip():
            filter_string = DEFAULT_LIST_FILTER
        return await self._queries.page(filter_string, page_size, page_token, current_user_id)

    async def add_comment(
        self,
        issue_id: str,
        author_id: UUID,
        content: str,
        now: Optional[datetime] = None
    ) -> Comment:
        if not content or not content.strip():
            raise ValidationException("comment content is required")

        issue = await self.get_issue(issue_id)
        now = now or datetime.now(timezone.utc)

        comment = await self._comments.create(Comment(
            id=uuid4(),
            issue_id=issue.id,
            author_id=author_id,
            content=content,
            created_at=now,
            updated_at=now,
        ))

        await self._notify(issue, NotificationType.COMMENT_ADDED, "New comment added to issue")
        return comment

    async def list_comments(self, issue_id: str) -> List[Comment]:
        issue = await self.get_issue(issue_id)
        return await self._comments.list_by_issue(issue.id)

    async def add_attachment(
        self,
        issue_id: str,
        uploader_id: UUID,
        filename: str,
        content: bytes,
        now: Optional[datetime] = None
    ) -> Attachment:
        """
        Record attachment metadata. The content is only measured; file
        storage is handled outside the tracker.
        """
        if not filename or not filename.strip():
            raise ValidationException("filename is required")
        if not content:
            raise ValidationException("attachment content is required")

        issue = await self.get_issue(issue_id)
        file_id = uuid4()

        attachment = await self._attachments.create(Attachment(
            id=file_id,
            issue_id=issue.id,
            uploader_id=uploader_id,
            filename=filename,
            file_url=f"{self._base_url}/files/{file_id}",
            file_size=len(content),
            created_at=now or datetime.now(timezone.utc),
        ))

        logger.info(
            "Attachment added",
            extra={"issue_id": str(issue.id), "attachment_id": str(file_id), "file_size": attachment.file_size}
        )
        return attachment

    # ========== Helpers ==========

    @staticmethod
    def _parse_issue_id(issue_id: str) -> UUID:
        if not issue_id:
            raise ValidationException("issue ID is required")
        issue_uuid = parse_uuid(issue_id)
        if issue_uuid is None:
            raise ValidationException("invalid issue ID format", {"issue_id": issue_id})
        return issue_uuid

    async def _notify(self, issue: Issue, notification_type: NotificationType, message: str) -> None:
        if self._notifier is None:
            return
        try:
            delivered = await self._notifier.notify_issue(issue, notification_type, message)
        except ExternalServiceException as e:
            logger.warning(
                "Issue notification failed",
                extra={
                    "issue_id": str(issue.id),
                    "notification_type": notification_type.value,
                    "error": e.message
                }
            )
            return
        if not delivered:
            logger.debug(
                "Issue notification not delivered",
                extra={"issue_id": str(issue.id), "notification_type": notification_type.value}
            )
