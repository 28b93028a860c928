"""
In-Memory Search Repositories
=============================

Dict-backed saved view and team membership repositories for
``storage_backend=memory``.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Set
from uuid import UUID

from buganizer.search.application.services import ITeamMembershipRepository, IViewRepository
from buganizer.search.domain import SavedView


class InMemoryViewRepository(IViewRepository):

    def __init__(self):
        self._views: Dict[UUID, SavedView] = {}

    async def create(self, view: SavedView) -> SavedView:
        self._views[view.id] = view
        return view

    async def get_by_id(self, view_id: UUID) -> Optional[SavedView]:
        return self._views.get(view_id)

    async def list_for_team(self, team_id: UUID) -> List[SavedView]:
        views = [v for v in self._views.values() if v.team_id == team_id]
        return sorted(views, key=lambda v: v.name)

    async def list_for_user(self, user_id: UUID, team_ids: Sequence[UUID]) -> List[SavedView]:
        teams = set(team_ids)
        views = [v for v in self._views.values() if v.is_visible_to(user_id, teams)]
        return sorted(views, key=lambda v: v.name)


class InMemoryTeamMembershipRepository(ITeamMembershipRepository):

    def __init__(self):
        self._teams: Dict[UUID, Set[UUID]] = defaultdict(set)

    def add_member(self, team_id: UUID, user_id: UUID) -> None:
        self._teams[team_id].add(user_id)

    async def list_team_ids(self, user_id: UUID) -> List[UUID]:
        return [team_id for team_id, members in self._teams.items() if user_id in members]

    async def is_member(self, user_id: UUID, team_id: UUID) -> bool:
        return user_id in self._teams.get(team_id, set())
