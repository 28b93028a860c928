"""
Search Controllers (API Routes)
===============================

FastAPI routes for issue search and saved views.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from buganizer.dependencies import get_search_service
from buganizer.issues.application.dto import IssueResponse
from buganizer.search.application import (
    ListViewsResponse,
    SavedViewResponse,
    SaveViewRequest,
    SearchResponse,
    SearchService,
)
from buganizer.shared.api.dependencies import get_current_user_id

router = APIRouter(tags=["Search"])


@router.get(
    "/search",
    response_model=SearchResponse,
    summary="Search issues",
    description="""
    Search issues with the filter language.

    **Keys:** `is:open`, `is:closed`, `status:`, `priority:`, `severity:`,
    `assignee:` (UUID, `me` or `none`), `reporter:`, `component:`, `team:`,
    `label:`, `created_after:`, `created_before:`, `due_before:`, `due_after:`.
    Dates are `YYYY-MM-DD`. Any token without `:` is free text matched
    against title and description.

    Unknown keys and malformed dates are ignored.
    """
)
async def search_issues(
    query: str = Query(default="", description="Filter string (required)"),
    page_size: Optional[int] = Query(default=None),
    page_token: Optional[str] = Query(default=None),
    user_id: UUID = Depends(get_current_user_id),
    service: SearchService = Depends(get_search_service)
):
    page = await service.search_issues(query, page_size, page_token, user_id)
    return SearchResponse(
        issues=[IssueResponse.from_domain(issue) for issue in page.issues],
        total_results=page.total_count,
        next_page_token=page.next_page_token,
    )


@router.post(
    "/views",
    response_model=SavedViewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save a view"
)
async def save_view(
    request: SaveViewRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: SearchService = Depends(get_search_service)
):
    view = await service.save_view(
        owner_id=user_id,
        name=request.name,
        query_string=request.query_string,
        is_team_view=request.is_team_view,
        team_id=request.team_id,
    )
    return SavedViewResponse.from_domain(view)


@router.get(
    "/views",
    response_model=ListViewsResponse,
    summary="List saved views",
    description="Own views plus team views of the caller's teams, or one team's views with `team_id`."
)
async def list_views(
    team_id: Optional[UUID] = Query(default=None),
    user_id: UUID = Depends(get_current_user_id),
    service: SearchService = Depends(get_search_service)
):
    views = await service.list_views(user_id, team_id)
    return ListViewsResponse(views=[SavedViewResponse.from_domain(view) for view in views])


@router.get("/views/{view_id}", response_model=SavedViewResponse, summary="Get a saved view")
async def get_view(
    view_id: str,
    user_id: UUID = Depends(get_current_user_id),
    service: SearchService = Depends(get_search_service)
):
    view = await service.get_view(view_id, user_id)
    return SavedViewResponse.from_domain(view)
