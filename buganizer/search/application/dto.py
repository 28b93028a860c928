"""
Search Application DTOs
=======================

Pydantic models for the search and saved view endpoints.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from buganizer.issues.application.dto import IssueResponse
from buganizer.search.domain import SavedView


class SearchResponse(BaseModel):
    """One page of search results."""
    issues: List[IssueResponse] = Field(default_factory=list)
    total_results: int = Field(..., description="Issues matching the query across all pages")
    next_page_token: str = Field(default="", description="Empty on the last page")


class SaveViewRequest(BaseModel):
    """Request model for saving a filter as a named view."""
    name: str = Field(default="", description="View name (required)")
    query_string: str = Field(default="", description="Filter string, e.g. 'is:open priority:P1'")
    is_team_view: bool = Field(default=False, description="Share with a team")
    team_id: Optional[UUID] = Field(default=None, description="Team to share with (team views only)")


class SavedViewResponse(BaseModel):
    id: UUID
    name: str
    owner_id: UUID
    is_team_view: bool
    team_id: Optional[UUID] = None
    query_string: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, view: SavedView) -> "SavedViewResponse":
        return cls(
            id=view.id,
            name=view.name,
            owner_id=view.owner_id,
            is_team_view=view.is_team_view,
            team_id=view.team_id,
            query_string=view.query_string,
            created_at=view.created_at,
            updated_at=view.updated_at,
        )


class ListViewsResponse(BaseModel):
    views: List[SavedViewResponse] = Field(default_factory=list)
