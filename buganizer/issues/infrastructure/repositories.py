"""
Issue Infrastructure Repositories
=================================

Concrete implementations of repository interfaces using SQLAlchemy.

``SQLAlchemyIssueRepository`` is also the issue query executor: it renders
compiled filters once and applies the same expression to the page query
and the count query.
"""

import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from buganizer.config import IssueStatus, Priority, Severity
from buganizer.core import QueryExecutionException, RepositoryException
from buganizer.issues.application.services import (
    IAttachmentRepository,
    ICommentRepository,
    IIssueRepository,
)
from buganizer.issues.domain import Attachment, Comment, Issue
from buganizer.issues.infrastructure.models import AttachmentModel, CommentModel, IssueModel
from buganizer.search.domain import CompiledFilter, IssueOrder
from buganizer.search.infrastructure.sql import PostgresTextRenderer, SQLAlchemyPredicateRenderer
from buganizer.shared.infrastructure.logging import get_logger, log_latency

logger = get_logger(__name__)

_ORDERING = {
    IssueOrder.NEWEST_FIRST: (IssueModel.created_at.desc(),),
    IssueOrder.DUE_SOONEST: (IssueModel.due_date.asc().nulls_last(), IssueModel.created_at.desc()),
}


def issue_to_domain(model: IssueModel) -> Issue:
    return Issue(
        id=model.id,
        title=model.title,
        description=model.description or "",
        reproduce_steps=model.reproduce_steps or "",
        component_id=model.component_id,
        reporter_id=model.reporter_id,
        assignee_id=model.assignee_id,
        priority=Priority(model.priority),
        severity=Severity(model.severity),
        status=IssueStatus(model.status),
        due_date=model.due_date,
        created_at=model.created_at,
        updated_at=model.updated_at,
        labels=list(model.labels or []),
    )


def _apply(model: IssueModel, issue: Issue) -> IssueModel:
    model.title = issue.title
    model.description = issue.description
    model.reproduce_steps = issue.reproduce_steps
    model.component_id = issue.component_id
    model.reporter_id = issue.reporter_id
    model.assignee_id = issue.assignee_id
    model.priority = issue.priority.value
    model.severity = issue.severity.value
    model.status = issue.status.value
    model.labels = list(issue.labels)
    model.due_date = issue.due_date
    model.created_at = issue.created_at
    model.updated_at = issue.updated_at
    return model


class SQLAlchemyIssueRepository(IIssueRepository):
    """
    SQLAlchemy implementation of the issue repository.

    Handles persistence of Issue entities using async SQLAlchemy.
    """

    def __init__(self, session: AsyncSession):
        self._session = session
        self._renderer = SQLAlchemyPredicateRenderer(IssueModel)

    async def execute(
        self,
        compiled: CompiledFilter,
        limit: int,
        offset: int = 0,
        order: IssueOrder = IssueOrder.NEWEST_FIRST
    ) -> Tuple[List[Issue], int]:
        """
        Run a compiled filter: one page in the requested order, plus the
        total match count. The two statements are not snapshot-consistent.

        Raises:
            QueryExecutionException: On any database error
        """
        condition = self._renderer.render(compiled)

        count_stmt = select(func.count()).select_from(IssueModel)
        page_stmt = (
            select(IssueModel)
            .order_by(*_ORDERING[order])
            .limit(limit)
            .offset(offset)
        )
        if condition is not None:
            count_stmt = count_stmt.where(condition)
            page_stmt = page_stmt.where(condition)

        if logger.isEnabledFor(logging.DEBUG):
            where_sql, args = PostgresTextRenderer().render(compiled)
            logger.debug("Issue query predicate", extra={"where": where_sql, "arg_count": len(args)})

        try:
            with log_latency(logger, "issue_query", limit=limit, offset=offset):
                total = (await self._session.execute(count_stmt)).scalar_one()
                result = await self._session.execute(page_stmt)
                models = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Issue query failed", extra={"error": str(e)})
            raise QueryExecutionException(details={"error": str(e)}) from e

        return [issue_to_domain(model) for model in models], total

    async def get_by_id(self, issue_id: UUID) -> Optional[Issue]:
        model = await self._get_model(issue_id)
        return issue_to_domain(model) if model else None

    async def create(self, issue: Issue) -> Issue:
        model = _apply(IssueModel(id=issue.id), issue)
        try:
            self._session.add(model)
            await self._session.flush()
        except SQLAlchemyError as e:
            raise RepositoryException("failed to create issue", {"error": str(e)}) from e
        return issue_to_domain(model)

    async def update(self, issue: Issue) -> Issue:
        model = await self._get_model(issue.id)
        if model is None:
            raise RepositoryException(f"Issue {issue.id} not found")

        _apply(model, issue)
        try:
            await self._session.flush()
        except SQLAlchemyError as e:
            raise RepositoryException("failed to update issue", {"error": str(e)}) from e
        return issue_to_domain(model)

    async def _get_model(self, issue_id: UUID) -> Optional[IssueModel]:
        stmt = select(IssueModel).where(IssueModel.id == issue_id)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise RepositoryException("failed to get issue", {"error": str(e)}) from e
        return result.scalar_one_or_none()


class SQLAlchemyCommentRepository(ICommentRepository):
    """SQLAlchemy implementation of comment repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, comment: Comment) -> Comment:
        self._session.add(CommentModel(
            id=comment.id,
            issue_id=comment.issue_id,
            author_id=comment.author_id,
            content=comment.content,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        ))
        try:
            await self._session.flush()
        except SQLAlchemyError as e:
            raise RepositoryException("failed to create comment", {"error": str(e)}) from e
        return comment

    async def list_by_issue(self, issue_id: UUID) -> List[Comment]:
        stmt = (
            select(CommentModel)
            .where(CommentModel.issue_id == issue_id)
            .order_by(CommentModel.created_at.asc())
        )
        result = await self._session.execute(stmt)
        return [
            Comment(
                id=model.id,
                issue_id=model.issue_id,
                author_id=model.author_id,
                content=model.content,
                created_at=model.created_at,
                updated_at=model.updated_at,
            )
            for model in result.scalars().all()
        ]


class SQLAlchemyAttachmentRepository(IAttachmentRepository):
    """SQLAlchemy implementation of attachment metadata repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, attachment: Attachment) -> Attachment:
        self._session.add(AttachmentModel(
            id=attachment.id,
            issue_id=attachment.issue_id,
            uploader_id=attachment.uploader_id,
            filename=attachment.filename,
            file_url=attachment.file_url,
            file_size=attachment.file_size,
            created_at=attachment.created_at,
        ))
        try:
            await self._session.flush()
        except SQLAlchemyError as e:
            raise RepositoryException("failed to create attachment", {"error": str(e)}) from e
        return attachment
