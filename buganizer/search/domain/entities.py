"""
Search Domain Entities
======================

Saved views: named filter strings owned by a user and optionally shared
with a team.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID


@dataclass
class SavedView:
    """A named filter string."""

    id: UUID
    name: str
    owner_id: UUID
    query_string: str
    created_at: datetime
    updated_at: datetime
    is_team_view: bool = False
    team_id: Optional[UUID] = None

    def is_visible_to(self, user_id: UUID, team_ids) -> bool:
        """
        Owners always see their views; team views are also visible to
        members of the view's team.
        """
        if self.owner_id == user_id:
            return True
        return self.is_team_view and self.team_id is not None and self.team_id in team_ids
