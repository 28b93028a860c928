"""
Issues Application Layer
========================

Contains:
- DTOs: request/response models for the issues API
- Services: IssueService and the repository and notifier interfaces it depends on

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from buganizer.issues.application.dto import (
    AttachmentCreateRequest,
    AttachmentResponse,
    CommentCreateRequest,
    CommentResponse,
    IssueCreateRequest,
    IssueListResponse,
    IssueResponse,
    IssueUpdateRequest,
)
from buganizer.issues.application.services import (
    DEFAULT_LIST_FILTER,
    IAttachmentRepository,
    ICommentRepository,
    IIssueRepository,
    INotifier,
    IssueService,
)

__all__ = [
    # DTOs
    "AttachmentCreateRequest",
    "AttachmentResponse",
    "CommentCreateRequest",
    "CommentResponse",
    "IssueCreateRequest",
    "IssueListResponse",
    "IssueResponse",
    "IssueUpdateRequest",
    # Services
    "DEFAULT_LIST_FILTER",
    "IssueService",
    # Interfaces
    "IAttachmentRepository",
    "ICommentRepository",
    "IIssueRepository",
    "INotifier",
]
