"""
Search Application Layer
========================

Contains:
- IssueQueryService: the parse -> compile -> execute pipeline
- SearchService: issue search and saved views
- Repository interfaces for the query executor, views and team membership
- DTOs for the search API
"""

from buganizer.search.application.dto import (
    ListViewsResponse,
    SavedViewResponse,
    SaveViewRequest,
    SearchResponse,
)
from buganizer.search.application.services import (
    IIssueQueryExecutor,
    ITeamMembershipRepository,
    IViewRepository,
    IssuePage,
    IssueQueryService,
    SearchService,
    next_page_token,
    parse_page_token,
    resolve_page_size,
)

__all__ = [
    # DTOs
    "ListViewsResponse",
    "SavedViewResponse",
    "SaveViewRequest",
    "SearchResponse",
    # Services
    "IssuePage",
    "IssueQueryService",
    "SearchService",
    "next_page_token",
    "parse_page_token",
    "resolve_page_size",
    # Interfaces
    "IIssueQueryExecutor",
    "ITeamMembershipRepository",
    "IViewRepository",
]
