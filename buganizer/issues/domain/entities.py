"""
Issue Domain Entities
=====================

Pure Python domain entities for issue tracking.

Entities hold no infrastructure concerns; storage adapters convert to and
from them. All timestamps are timezone-aware (UTC).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from buganizer.config import IssueStatus, Priority, RESOLVED_STATUSES, Severity


@dataclass
class Issue:
    """
    A tracked bug.

    Created with status NEW and a due date from the SLA calculator. Status
    may later be set to any value; no transition rules are enforced.
    """

    id: UUID
    title: str
    description: str
    component_id: UUID
    reporter_id: UUID
    priority: Priority
    severity: Severity
    status: IssueStatus
    created_at: datetime
    updated_at: datetime
    reproduce_steps: str = ""
    assignee_id: Optional[UUID] = None
    due_date: Optional[datetime] = None
    labels: List[str] = field(default_factory=list)

    @property
    def is_open(self) -> bool:
        """Matches the ``is:open`` filter: anything but CLOSED."""
        return self.status != IssueStatus.CLOSED

    @property
    def is_resolved(self) -> bool:
        """Resolved issues are the ones SLA compliance counts."""
        return self.status in RESOLVED_STATUSES

    def met_sla(self) -> Optional[bool]:
        """
        Whether the issue was last touched strictly before its due date.

        Returns:
            None when the issue has no due date
        """
        if self.due_date is None:
            return None
        return self.updated_at < self.due_date


@dataclass
class Comment:
    """A comment on an issue."""

    id: UUID
    issue_id: UUID
    author_id: UUID
    content: str
    created_at: datetime
    updated_at: datetime


@dataclass
class Attachment:
    """Attachment metadata; file bytes live outside the tracker."""

    id: UUID
    issue_id: UUID
    uploader_id: UUID
    filename: str
    file_url: str
    file_size: int
    created_at: datetime
