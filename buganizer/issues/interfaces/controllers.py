"""
Issue Controllers (API Routes)
==============================

FastAPI routes for filing, reading and updating issues.

Controllers are thin - they delegate to application services.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from buganizer.dependencies import get_issue_service
from buganizer.issues.application import (
    AttachmentCreateRequest,
    AttachmentResponse,
    CommentCreateRequest,
    CommentResponse,
    IssueCreateRequest,
    IssueListResponse,
    IssueResponse,
    IssueService,
    IssueUpdateRequest,
)
from buganizer.shared.api.dependencies import get_current_user_id

router = APIRouter(prefix="/issues", tags=["Issues"])


ISSUE_RESPONSE_EXAMPLE = {
    "id": "5f0c6c55-1f7b-4c43-9d0a-3f6f1b1e2a10",
    "title": "Login page crashes on submit",
    "description": "Submitting the form with an empty password crashes the page.",
    "reproduce_steps": "1. Open /login\n2. Leave password empty\n3. Submit",
    "component_id": "0b8a4a8e-8c7e-4c5c-9a53-0a8a2a9d5b11",
    "reporter_id": "2c1d8c6e-0f62-4b1e-8d5d-4c2a3b6e7f01",
    "assignee_id": None,
    "priority": "P1",
    "severity": "S1",
    "status": "NEW",
    "due_date": "2024-01-16T04:00:00Z",
    "created_at": "2024-01-15T10:00:00Z",
    "updated_at": "2024-01-15T10:00:00Z",
    "labels": ["regression"]
}


@router.post(
    "",
    response_model=IssueResponse,
    status_code=status.HTTP_201_CREATED,
    summary="File an issue",
    description="""
    Create an issue with status `NEW`.

    The due date is set from the SLA table: base hours for the priority
    times the severity multiplier (P1/S1 = 24 × 0.75 = 18 hours).
    """,
    responses={201: {"content": {"application/json": {"example": ISSUE_RESPONSE_EXAMPLE}}}}
)
async def create_issue(
    request: IssueCreateRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: IssueService = Depends(get_issue_service)
):
    issue = await service.create_issue(request, user_id)
    return IssueResponse.from_domain(issue)


@router.get(
    "",
    response_model=IssueListResponse,
    summary="List issues",
    description="""
    List issues matching a filter string. An empty filter lists open issues.

    **Filter examples:**
    - `is:open priority:P0`
    - `assignee:me label:regression`
    - `created_after:2024-01-01 crash`

    Pass `next_page_token` back as `page_token` for the next page.
    """
)
async def list_issues(
    filter: Optional[str] = Query(default=None, description="Filter string"),
    page_size: Optional[int] = Query(default=None, description="Defaults to 50, capped at 1000"),
    page_token: Optional[str] = Query(default=None),
    user_id: UUID = Depends(get_current_user_id),
    service: IssueService = Depends(get_issue_service)
):
    page = await service.list_issues(filter, page_size, page_token, user_id)
    return IssueListResponse(
        issues=[IssueResponse.from_domain(issue) for issue in page.issues],
        total_count=page.total_count,
        next_page_token=page.next_page_token,
    )


@router.get("/{issue_id}", response_model=IssueResponse, summary="Get an issue")
async def get_issue(
    issue_id: str,
    user_id: UUID = Depends(get_current_user_id),
    service: IssueService = Depends(get_issue_service)
):
    issue = await service.get_issue(issue_id)
    return IssueResponse.from_domain(issue)


@router.patch(
    "/{issue_id}",
    response_model=IssueResponse,
    summary="Update an issue",
    description="Partial update; omitted fields are left unchanged. The due date is not recomputed."
)
async def update_issue(
    issue_id: str,
    request: IssueUpdateRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: IssueService = Depends(get_issue_service)
):
    issue = await service.update_issue(issue_id, request)
    return IssueResponse.from_domain(issue)


@router.post(
    "/{issue_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on an issue"
)
async def add_comment(
    issue_id: str,
    request: CommentCreateRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: IssueService = Depends(get_issue_service)
):
    comment = await service.add_comment(issue_id, user_id, request.content)
    return CommentResponse.from_domain(comment)


@router.get("/{issue_id}/comments", response_model=List[CommentResponse], summary="List comments")
async def list_comments(
    issue_id: str,
    user_id: UUID = Depends(get_current_user_id),
    service: IssueService = Depends(get_issue_service)
):
    comments = await service.list_comments(issue_id)
    return [CommentResponse.from_domain(comment) for comment in comments]


@router.post(
    "/{issue_id}/attachments",
    response_model=AttachmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Attach a file",
    description="Records attachment metadata; the content is measured, not stored."
)
async def add_attachment(
    issue_id: str,
    request: AttachmentCreateRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: IssueService = Depends(get_issue_service)
):
    attachment = await service.add_attachment(
        issue_id,
        user_id,
        request.filename,
        request.content.encode("utf-8")
    )
    return AttachmentResponse.from_domain(attachment)
