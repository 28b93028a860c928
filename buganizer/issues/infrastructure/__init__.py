"""
Issues Infrastructure Layer
===========================

Infrastructure implementations for the issues module:
- Models: SQLAlchemy ORM models
- Repositories: SQLAlchemy data access (also the issue query executor)
- Memory: dict-backed repositories for development and tests
- External: Slack notifier
"""

from buganizer.issues.infrastructure.external import SlackNotifier
from buganizer.issues.infrastructure.memory import (
    InMemoryAttachmentRepository,
    InMemoryCommentRepository,
    InMemoryIssueRepository,
)
from buganizer.issues.infrastructure.models import AttachmentModel, CommentModel, IssueModel
from buganizer.issues.infrastructure.repositories import (
    SQLAlchemyAttachmentRepository,
    SQLAlchemyCommentRepository,
    SQLAlchemyIssueRepository,
    issue_to_domain,
)

__all__ = [
    "SlackNotifier",
    "InMemoryAttachmentRepository",
    "InMemoryCommentRepository",
    "InMemoryIssueRepository",
    "AttachmentModel",
    "CommentModel",
    "IssueModel",
    "SQLAlchemyAttachmentRepository",
    "SQLAlchemyCommentRepository",
    "SQLAlchemyIssueRepository",
    "issue_to_domain",
]
