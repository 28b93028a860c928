"""
Issue Infrastructure Models
===========================

SQLAlchemy ORM models for the issues module.

These are the database representations of our domain entities.
They belong in the infrastructure layer, not the domain layer.
"""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from buganizer.config import IssueStatus, Priority, Severity
from buganizer.infrastructure.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IssueModel(Base):
    """
    Database model for Issue entity.

    Maps to the 'issues' table. Column names match the filter language's
    predicate columns.
    """
    __tablename__ = "issues"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    reproduce_steps: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Ownership
    component_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    reporter_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    assignee_id: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True, index=True)

    # Triage
    priority: Mapped[str] = mapped_column(String(10), nullable=False, default=Priority.P2.value)
    severity: Mapped[str] = mapped_column(String(10), nullable=False, default=Severity.S2.value)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=IssueStatus.NEW.value, index=True)
    labels: Mapped[List[str]] = mapped_column(ARRAY(String), nullable=False, default=list)

    # SLA
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class CommentModel(Base):
    """Maps to the 'comments' table."""
    __tablename__ = "comments"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    issue_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("issues.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class AttachmentModel(Base):
    """Maps to the 'attachments' table (metadata only)."""
    __tablename__ = "attachments"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    issue_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("issues.id", ondelete="CASCADE"), nullable=False, index=True)
    uploader_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    file_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
