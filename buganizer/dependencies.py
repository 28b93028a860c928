"""
Service Dependencies
====================

FastAPI dependency providers that assemble application services for a
request.

``storage_backend=postgres`` gives every request its own session and
SQLAlchemy repositories; ``storage_backend=memory`` shares one process-wide
``MemoryStore``. The SLA config provider and notifier are created in the
application lifespan and read from ``app.state``.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from buganizer.config import settings
from buganizer.infrastructure.database import get_session_context
from buganizer.issues.application.services import (
    IAttachmentRepository,
    ICommentRepository,
    IIssueRepository,
    INotifier,
    IssueService,
)
from buganizer.issues.infrastructure.memory import (
    InMemoryAttachmentRepository,
    InMemoryCommentRepository,
    InMemoryIssueRepository,
)
from buganizer.issues.infrastructure.repositories import (
    SQLAlchemyAttachmentRepository,
    SQLAlchemyCommentRepository,
    SQLAlchemyIssueRepository,
)
from buganizer.search.application.services import (
    ITeamMembershipRepository,
    IViewRepository,
    IssueQueryService,
    SearchService,
)
from buganizer.search.infrastructure.memory import (
    InMemoryTeamMembershipRepository,
    InMemoryViewRepository,
)
from buganizer.search.infrastructure.repositories import (
    SQLAlchemyTeamMembershipRepository,
    SQLAlchemyViewRepository,
)
from buganizer.sla.application.services import SLAService
from buganizer.sla.domain import ISLAConfigProvider, StaticSLAConfigProvider


@dataclass
class MemoryStore:
    """All in-memory repositories of one process."""
    issues: InMemoryIssueRepository = field(default_factory=InMemoryIssueRepository)
    comments: InMemoryCommentRepository = field(default_factory=InMemoryCommentRepository)
    attachments: InMemoryAttachmentRepository = field(default_factory=InMemoryAttachmentRepository)
    views: InMemoryViewRepository = field(default_factory=InMemoryViewRepository)
    teams: InMemoryTeamMembershipRepository = field(default_factory=InMemoryTeamMembershipRepository)


@lru_cache()
def get_memory_store() -> MemoryStore:
    return MemoryStore()


async def get_db_session() -> AsyncGenerator[Optional[AsyncSession], None]:
    """Yields a transactional session, or None for the memory backend."""
    if settings.storage_backend == "memory":
        yield None
        return

    async with get_session_context() as session:
        yield session


# ========== Ports ==========

def get_issue_repository(
    session: Optional[AsyncSession] = Depends(get_db_session),
    store: MemoryStore = Depends(get_memory_store)
) -> IIssueRepository:
    if session is None:
        return store.issues
    return SQLAlchemyIssueRepository(session)


def get_comment_repository(
    session: Optional[AsyncSession] = Depends(get_db_session),
    store: MemoryStore = Depends(get_memory_store)
) -> ICommentRepository:
    if session is None:
        return store.comments
    return SQLAlchemyCommentRepository(session)


def get_attachment_repository(
    session: Optional[AsyncSession] = Depends(get_db_session),
    store: MemoryStore = Depends(get_memory_store)
) -> IAttachmentRepository:
    if session is None:
        return store.attachments
    return SQLAlchemyAttachmentRepository(session)


def get_view_repository(
    session: Optional[AsyncSession] = Depends(get_db_session),
    store: MemoryStore = Depends(get_memory_store)
) -> IViewRepository:
    if session is None:
        return store.views
    return SQLAlchemyViewRepository(session)


def get_team_repository(
    session: Optional[AsyncSession] = Depends(get_db_session),
    store: MemoryStore = Depends(get_memory_store)
) -> ITeamMembershipRepository:
    if session is None:
        return store.teams
    return SQLAlchemyTeamMembershipRepository(session)


def get_config_provider(request: Request) -> ISLAConfigProvider:
    return getattr(request.app.state, "sla_config", None) or StaticSLAConfigProvider()


def get_notifier(request: Request) -> Optional[INotifier]:
    return getattr(request.app.state, "notifier", None)


# ========== Services ==========

def get_query_service(
    issue_repository: IIssueRepository = Depends(get_issue_repository)
) -> IssueQueryService:
    return IssueQueryService(issue_repository)


def get_issue_service(
    issue_repository: IIssueRepository = Depends(get_issue_repository),
    comment_repository: ICommentRepository = Depends(get_comment_repository),
    attachment_repository: IAttachmentRepository = Depends(get_attachment_repository),
    notifier: Optional[INotifier] = Depends(get_notifier),
    config_provider: ISLAConfigProvider = Depends(get_config_provider)
) -> IssueService:
    return IssueService(
        issue_repository,
        comment_repository,
        attachment_repository,
        notifier=notifier,
        config_provider=config_provider,
    )


def get_search_service(
    query_service: IssueQueryService = Depends(get_query_service),
    view_repository: IViewRepository = Depends(get_view_repository),
    team_repository: ITeamMembershipRepository = Depends(get_team_repository)
) -> SearchService:
    return SearchService(query_service, view_repository, team_repository)


def get_sla_service(
    query_service: IssueQueryService = Depends(get_query_service),
    config_provider: ISLAConfigProvider = Depends(get_config_provider)
) -> SLAService:
    return SLAService(query_service, config_provider)
