"""
Search Infrastructure Layer
===========================

- SQL: predicate renderers for SQLAlchemy and raw PostgreSQL
- Models: saved view and team membership tables
- Repositories: SQLAlchemy data access
- Memory: dict-backed repositories for development and tests
"""

from buganizer.search.infrastructure.memory import (
    InMemoryTeamMembershipRepository,
    InMemoryViewRepository,
)
from buganizer.search.infrastructure.models import SavedViewModel, TeamMemberModel
from buganizer.search.infrastructure.repositories import (
    SQLAlchemyTeamMembershipRepository,
    SQLAlchemyViewRepository,
)
from buganizer.search.infrastructure.sql import (
    PostgresTextRenderer,
    SQLAlchemyPredicateRenderer,
)

__all__ = [
    "InMemoryTeamMembershipRepository",
    "InMemoryViewRepository",
    "SavedViewModel",
    "TeamMemberModel",
    "SQLAlchemyTeamMembershipRepository",
    "SQLAlchemyViewRepository",
    "PostgresTextRenderer",
    "SQLAlchemyPredicateRenderer",
]
