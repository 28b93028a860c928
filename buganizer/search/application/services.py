"""
Search Application Services
===========================

Application services for filtering issues and managing saved views.

``IssueQueryService`` is the one parse -> compile -> execute pipeline;
issue listing, search and SLA reporting all go through it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple
from uuid import UUID, uuid4

from buganizer.config import settings
from buganizer.core import (
    PermissionDeniedException,
    ResourceNotFoundException,
    ValidationException,
)
from buganizer.issues.domain import Issue
from buganizer.search.domain import (
    CompiledFilter,
    IssueOrder,
    PredicateCompiler,
    QueryParser,
    SavedView,
    parse_uuid,
)
from buganizer.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


# ========== Repository Interfaces (Dependency Inversion) ==========

class IIssueQueryExecutor(ABC):
    """
    Runs a compiled filter against issue storage.

    Implementations apply the same predicate to the page and to the total
    count, and raise ``QueryExecutionException`` on storage failure.
    """

    @abstractmethod
    async def execute(
        self,
        compiled: CompiledFilter,
        limit: int,
        offset: int = 0,
        order: IssueOrder = IssueOrder.NEWEST_FIRST
    ) -> Tuple[List[Issue], int]:
        """Return one page of matching issues and the total match count."""


class IViewRepository(ABC):
    """Interface for saved view data access."""

    @abstractmethod
    async def create(self, view: SavedView) -> SavedView:
        """Persist a new view."""

    @abstractmethod
    async def get_by_id(self, view_id: UUID) -> Optional[SavedView]:
        """Get a view by ID."""

    @abstractmethod
    async def list_for_team(self, team_id: UUID) -> List[SavedView]:
        """All views shared with a team, ordered by name."""

    @abstractmethod
    async def list_for_user(self, user_id: UUID, team_ids: Sequence[UUID]) -> List[SavedView]:
        """Own views plus team views of ``team_ids``, ordered by name."""


class ITeamMembershipRepository(ABC):
    """Interface for team membership lookups."""

    @abstractmethod
    async def list_team_ids(self, user_id: UUID) -> List[UUID]:
        """Teams the user belongs to."""

    @abstractmethod
    async def is_member(self, user_id: UUID, team_id: UUID) -> bool:
        """Whether the user belongs to the team."""


# ========== Pagination ==========

@dataclass
class IssuePage:
    """One page of filtered issues."""
    issues: List[Issue] = field(default_factory=list)
    total_count: int = 0
    next_page_token: str = ""


def parse_page_token(page_token: Optional[str]) -> int:
    """Page tokens are decimal offsets; anything else starts at 0."""
    if not page_token:
        return 0
    try:
        offset = int(page_token.strip())
    except ValueError:
        return 0
    return max(offset, 0)


def resolve_page_size(page_size: Optional[int]) -> int:
    if not page_size or page_size <= 0:
        return settings.default_page_size
    return min(page_size, settings.max_page_size)


def next_page_token(offset: int, returned: int, total: int) -> str:
    """Offset of the next page, or "" when this page reaches ``total``."""
    if offset + returned < total:
        return str(offset + returned)
    return ""


# ========== Application Services ==========

class IssueQueryService:
    """
    Parses, compiles and executes issue filters.

    The caller's identity is passed explicitly and only used to resolve
    ``assignee:me``.
    """

    def __init__(self, executor: IIssueQueryExecutor):
        self._executor = executor

    @staticmethod
    def compile(filter_string: str, current_user_id: Optional[UUID] = None) -> CompiledFilter:
        clauses = QueryParser.parse(filter_string, current_user_id)
        return PredicateCompiler.compile(clauses)

    async def run(
        self,
        filter_string: str,
        limit: int,
        offset: int = 0,
        current_user_id: Optional[UUID] = None,
        order: IssueOrder = IssueOrder.NEWEST_FIRST
    ) -> Tuple[List[Issue], int]:
        """
        Execute a filter string.

        Raises:
            QueryExecutionException: Storage failure, propagated unchanged
        """
        compiled = self.compile(filter_string, current_user_id)
        logger.debug(
            "Executing issue query",
            extra={
                "filter": filter_string,
                "param_count": len(compiled.params),
                "limit": limit,
                "offset": offset,
                "order": order.value
            }
        )
        return await self._executor.execute(compiled, limit, offset, order)

    async def page(
        self,
        filter_string: str,
        page_size: Optional[int] = None,
        page_token: Optional[str] = None,
        current_user_id: Optional[UUID] = None
    ) -> IssuePage:
        """Run a filter with token-based pagination."""
        limit = resolve_page_size(page_size)
        offset = parse_page_token(page_token)

        issues, total = await self.run(filter_string, limit, offset, current_user_id)

        return IssuePage(
            issues=issues,
            total_count=total,
            next_page_token=next_page_token(offset, len(issues), total)
        )


class SearchService:
    """
    Issue search and saved views.

    Coordinates the query pipeline with view and team repositories.
    """

    def __init__(
        self,
        query_service: IssueQueryService,
        view_repository: IViewRepository,
        team_repository: ITeamMembershipRepository
    ):
        self._queries = query_service
        self._views = view_repository
        self._teams = team_repository

    async def search_issues(
        self,
        query: str,
        page_size: Optional[int] = None,
        page_token: Optional[str] = None,
        current_user_id: Optional[UUID] = None
    ) -> IssuePage:
        """
        Search issues with a filter string.

        Raises:
            ValidationException: If the query is empty
        """
        if not query or not query.strip():
            raise ValidationException("query is required")
        return await self._queries.page(query, page_size, page_token, current_user_id)

    async def save_view(
        self,
        owner_id: UUID,
        name: str,
        query_string: str,
        is_team_view: bool = False,
        team_id: Optional[UUID] = None,
        now: Optional[datetime] = None
    ) -> SavedView:
        """
        Save a filter string as a named view.

        The team ID is kept only for team views.
        """
        if not name or not name.strip():
            raise ValidationException("view name is required")
        if not query_string or not query_string.strip():
            raise ValidationException("query string is required")

        now = now or datetime.now(timezone.utc)
        view = SavedView(
            id=uuid4(),
            name=name,
            owner_id=owner_id,
            query_string=query_string,
            created_at=now,
            updated_at=now,
            is_team_view=is_team_view,
            team_id=team_id if is_team_view else None,
        )
        view = await self._views.create(view)

        logger.info(
            "Saved view created",
            extra={"view_id": str(view.id), "owner_id": str(owner_id), "is_team_view": is_team_view}
        )
        return view

    async def get_view(self, view_id: str, user_id: UUID) -> SavedView:
        """
        Get a view the user may see.

        Raises:
            ValidationException: Malformed view ID
            ResourceNotFoundException: No such view
            PermissionDeniedException: Not the owner and not in the view's team
        """
        view_uuid = parse_uuid(view_id) if view_id else None
        if view_uuid is None:
            raise ValidationException("invalid view ID format", {"view_id": view_id})

        view = await self._views.get_by_id(view_uuid)
        if view is None:
            raise ResourceNotFoundException("View", view_id)

        if view.owner_id == user_id:
            return view

        if not view.is_team_view or view.team_id is None:
            raise PermissionDeniedException("not authorized to access this view")

        if not await self._teams.is_member(user_id, view.team_id):
            raise PermissionDeniedException("not authorized to access this view")

        return view

    async def list_views(self, user_id: UUID, team_id: Optional[UUID] = None) -> List[SavedView]:
        """
        With ``team_id``: that team's views. Otherwise the user's own views
        plus the team views of every team the user belongs to.
        """
        if team_id is not None:
            return await self._views.list_for_team(team_id)

        team_ids = await self._teams.list_team_ids(user_id)
        return await self._views.list_for_user(user_id, team_ids)
