"""
Search Infrastructure Repositories
==================================

SQLAlchemy implementations of the saved view and team membership
repositories.
"""

from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from buganizer.core import RepositoryException
from buganizer.search.application.services import ITeamMembershipRepository, IViewRepository
from buganizer.search.domain import SavedView
from buganizer.search.infrastructure.models import SavedViewModel, TeamMemberModel


def view_to_domain(model: SavedViewModel) -> SavedView:
    return SavedView(
        id=model.id,
        name=model.name,
        owner_id=model.owner_id,
        query_string=model.query_string,
        created_at=model.created_at,
        updated_at=model.updated_at,
        is_team_view=model.is_team_view,
        team_id=model.team_id,
    )


class SQLAlchemyViewRepository(IViewRepository):
    """SQLAlchemy implementation of saved view repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, view: SavedView) -> SavedView:
        self._session.add(SavedViewModel(
            id=view.id,
            name=view.name,
            owner_id=view.owner_id,
            is_team_view=view.is_team_view,
            team_id=view.team_id,
            query_string=view.query_string,
            created_at=view.created_at,
            updated_at=view.updated_at,
        ))
        try:
            await self._session.flush()
        except SQLAlchemyError as e:
            raise RepositoryException("failed to create saved view", {"error": str(e)}) from e
        return view

    async def get_by_id(self, view_id: UUID) -> Optional[SavedView]:
        stmt = select(SavedViewModel).where(SavedViewModel.id == view_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return view_to_domain(model) if model else None

    async def list_for_team(self, team_id: UUID) -> List[SavedView]:
        stmt = (
            select(SavedViewModel)
            .where(SavedViewModel.team_id == team_id)
            .order_by(SavedViewModel.name)
        )
        result = await self._session.execute(stmt)
        return [view_to_domain(model) for model in result.scalars().all()]

    async def list_for_user(self, user_id: UUID, team_ids: Sequence[UUID]) -> List[SavedView]:
        condition = SavedViewModel.owner_id == user_id
        if team_ids:
            condition = or_(
                condition,
                and_(SavedViewModel.is_team_view.is_(True), SavedViewModel.team_id.in_(list(team_ids)))
            )
        stmt = select(SavedViewModel).where(condition).order_by(SavedViewModel.name)
        result = await self._session.execute(stmt)
        return [view_to_domain(model) for model in result.scalars().all()]


class SQLAlchemyTeamMembershipRepository(ITeamMembershipRepository):
    """Team membership lookups against 'team_members'."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def list_team_ids(self, user_id: UUID) -> List[UUID]:
        stmt = select(TeamMemberModel.team_id).where(TeamMemberModel.user_id == user_id)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def is_member(self, user_id: UUID, team_id: UUID) -> bool:
        stmt = select(TeamMemberModel.user_id).where(
            TeamMemberModel.team_id == team_id,
            TeamMemberModel.user_id == user_id
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None
