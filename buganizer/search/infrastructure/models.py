"""
Search Infrastructure Models
============================

SQLAlchemy ORM models for saved views and the team membership table they
are shared through.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from buganizer.infrastructure.database import Base


class SavedViewModel(Base):
    """Maps to the 'saved_views' table."""
    __tablename__ = "saved_views"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    is_team_view: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    team_id: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True, index=True)
    query_string: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))


class TeamMemberModel(Base):
    """Maps to the 'team_members' table."""
    __tablename__ = "team_members"

    team_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    user_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, index=True)
    role: Mapped[str] = mapped_column(String(50), nullable=False, default="member")
