"""
In-Memory Issue Repositories
============================

Dictionary-backed repositories selected by ``storage_backend=memory``.
Compiled filters are evaluated with ``PredicateEvaluator``, which mirrors
the SQL semantics, so the same filter strings behave the same way.
"""

from dataclasses import replace
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from buganizer.core import RepositoryException
from buganizer.issues.application.services import (
    IAttachmentRepository,
    ICommentRepository,
    IIssueRepository,
)
from buganizer.issues.domain import Attachment, Comment, Issue
from buganizer.search.domain import CompiledFilter, IssueOrder, PredicateEvaluator


def _copy(issue: Issue) -> Issue:
    return replace(issue, labels=list(issue.labels))


class InMemoryIssueRepository(IIssueRepository):
    """Issues kept in a dict; returned objects are copies."""

    def __init__(self, issues: Optional[List[Issue]] = None):
        self._issues: Dict[UUID, Issue] = {}
        for issue in issues or []:
            self._issues[issue.id] = _copy(issue)

    async def execute(
        self,
        compiled: CompiledFilter,
        limit: int,
        offset: int = 0,
        order: IssueOrder = IssueOrder.NEWEST_FIRST
    ) -> Tuple[List[Issue], int]:
        matches = PredicateEvaluator(compiled).filter(self._issues.values())
        matches.sort(key=lambda issue: issue.created_at, reverse=True)
        if order == IssueOrder.DUE_SOONEST:
            # stable, so equal due dates keep newest first
            matches.sort(key=lambda issue: (issue.due_date is None, issue.due_date or issue.created_at))
        page = matches[offset:offset + limit]
        return [_copy(issue) for issue in page], len(matches)

    async def get_by_id(self, issue_id: UUID) -> Optional[Issue]:
        issue = self._issues.get(issue_id)
        return _copy(issue) if issue else None

    async def create(self, issue: Issue) -> Issue:
        if issue.id in self._issues:
            raise RepositoryException(f"Issue {issue.id} already exists")
        self._issues[issue.id] = _copy(issue)
        return _copy(issue)

    async def update(self, issue: Issue) -> Issue:
        if issue.id not in self._issues:
            raise RepositoryException(f"Issue {issue.id} not found")
        self._issues[issue.id] = _copy(issue)
        return _copy(issue)


class InMemoryCommentRepository(ICommentRepository):

    def __init__(self):
        self._comments: List[Comment] = []

    async def create(self, comment: Comment) -> Comment:
        self._comments.append(comment)
        return comment

    async def list_by_issue(self, issue_id: UUID) -> List[Comment]:
        comments = [c for c in self._comments if c.issue_id == issue_id]
        return sorted(comments, key=lambda c: c.created_at)


class InMemoryAttachmentRepository(IAttachmentRepository):

    def __init__(self):
        self.attachments: List[Attachment] = []

    async def create(self, attachment: Attachment) -> Attachment:
        self.attachments.append(attachment)
        return attachment
