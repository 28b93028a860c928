"""
Issue Application DTOs
======================

Pydantic models for the issues API layer.

Requests are deliberately lenient about required text fields so the
service, not the schema, reports missing titles or component IDs.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from buganizer.config import IssueStatus, Priority, Severity
from buganizer.issues.domain import Attachment, Comment, Issue


# ========== Request DTOs ==========

class IssueCreateRequest(BaseModel):
    """Request model for filing an issue."""
    title: str = Field(default="", description="Issue title (required)")
    description: str = Field(default="", description="Markdown description")
    reproduce_steps: str = Field(default="", description="Steps to reproduce")
    component_id: str = Field(default="", description="Component UUID (required)")
    priority: Priority = Field(default=Priority.P2, description="P0 (critical) to P4 (trivial)")
    severity: Severity = Field(default=Severity.S2, description="S0 (system down) to S3 (cosmetic)")
    assignee_id: Optional[UUID] = Field(default=None, description="Initial assignee")
    labels: List[str] = Field(default_factory=list, description="Free-form labels")


class IssueUpdateRequest(BaseModel):
    """
    Partial update. Omitted (null) fields are left unchanged.

    Changing priority or severity does not move the due date.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    reproduce_steps: Optional[str] = None
    component_id: Optional[UUID] = None
    assignee_id: Optional[UUID] = None
    priority: Optional[Priority] = None
    severity: Optional[Severity] = None
    status: Optional[IssueStatus] = None
    labels: Optional[List[str]] = None


class CommentCreateRequest(BaseModel):
    content: str = Field(default="", description="Comment body (required)")


class AttachmentCreateRequest(BaseModel):
    """Attachment upload; only metadata is kept."""
    filename: str = Field(default="", description="Original file name (required)")
    content: str = Field(default="", description="File content (required)")


# ========== Response DTOs ==========

class IssueResponse(BaseModel):
    """Response model for a single issue."""
    id: UUID
    title: str
    description: str
    reproduce_steps: str
    component_id: UUID
    reporter_id: UUID
    assignee_id: Optional[UUID] = None
    priority: str
    severity: str
    status: str
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    labels: List[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, issue: Issue) -> "IssueResponse":
        return cls(
            id=issue.id,
            title=issue.title,
            description=issue.description,
            reproduce_steps=issue.reproduce_steps,
            component_id=issue.component_id,
            reporter_id=issue.reporter_id,
            assignee_id=issue.assignee_id,
            priority=issue.priority.value,
            severity=issue.severity.value,
            status=issue.status.value,
            due_date=issue.due_date,
            created_at=issue.created_at,
            updated_at=issue.updated_at,
            labels=list(issue.labels),
        )


class IssueListResponse(BaseModel):
    """One page of issues."""
    issues: List[IssueResponse] = Field(default_factory=list)
    total_count: int = Field(..., description="Issues matching the filter across all pages")
    next_page_token: str = Field(default="", description="Empty on the last page")


class CommentResponse(BaseModel):
    id: UUID
    issue_id: UUID
    author_id: UUID
    content: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            issue_id=comment.issue_id,
            author_id=comment.author_id,
            content=comment.content,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )


class AttachmentResponse(BaseModel):
    id: UUID
    issue_id: UUID
    uploader_id: UUID
    filename: str
    file_url: str
    file_size: int
    created_at: datetime

    @classmethod
    def from_domain(cls, attachment: Attachment) -> "AttachmentResponse":
        return cls(
            id=attachment.id,
            issue_id=attachment.issue_id,
            uploader_id=attachment.uploader_id,
            filename=attachment.filename,
            file_url=attachment.file_url,
            file_size=attachment.file_size,
            created_at=attachment.created_at,
        )
