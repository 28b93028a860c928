"""
Filter Query Parser
===================

Tokenizes a filter string into ``FilterClause`` objects.

The language is deliberately permissive: parsing never fails. Unknown keys
and malformed dates are dropped, and identifiers that cannot be resolved
(non-UUID component, assignee or reporter, any team) produce a clause that
never matches. Dropped tokens are logged at DEBUG.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional, Type
from uuid import UUID

from buganizer.config import IssueStatus, Priority, Severity
from buganizer.search.domain.clauses import (
    ClauseOperator,
    FieldClause,
    FilterClause,
    FilterField,
    FreeTextClause,
    UnrecognizedValue,
)
from buganizer.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

_DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


def parse_date(value: str) -> Optional[datetime]:
    """Parse ``YYYY-MM-DD`` as midnight UTC, or return None."""
    if not _DATE_PATTERN.match(value):
        return None
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return None
    return parsed.replace(tzinfo=timezone.utc)


def parse_uuid(value: str) -> Optional[UUID]:
    try:
        return UUID(value)
    except ValueError:
        return None


def _parse_enum(enum_cls: Type[Enum], value: str):
    try:
        return enum_cls(value)
    except ValueError:
        return UnrecognizedValue(value)


class QueryParser:
    """
    Parser for the issue filter language.

    Whitespace separates tokens. A token containing ``:`` is split on the
    first ``:`` into key and value; any other token is free text. Clause
    order follows token order.

    The caller's identity is an explicit argument: ``assignee:me`` resolves
    to equality on ``current_user_id`` when one is given, and to "has any
    assignee" otherwise.
    """

    def __init__(self, current_user_id: Optional[UUID] = None):
        self.current_user_id = current_user_id
        self._handlers: Dict[str, Callable[[str, str], Optional[FieldClause]]] = {
            "is": self._parse_is,
            "status": self._parse_status,
            "priority": self._parse_priority,
            "severity": self._parse_severity,
            "component": self._parse_component,
            "assignee": self._parse_assignee,
            "reporter": self._parse_reporter,
            "team": self._parse_team,
            "label": self._parse_label,
            "after": self._date_parser(FilterField.CREATED_AFTER, ClauseOperator.AT_LEAST),
            "created_after": self._date_parser(FilterField.CREATED_AFTER, ClauseOperator.AT_LEAST),
            "before": self._date_parser(FilterField.CREATED_BEFORE, ClauseOperator.AT_MOST),
            "created_before": self._date_parser(FilterField.CREATED_BEFORE, ClauseOperator.AT_MOST),
            "due_before": self._date_parser(FilterField.DUE_BEFORE, ClauseOperator.AT_MOST),
            "due_after": self._date_parser(FilterField.DUE_AFTER, ClauseOperator.AT_LEAST),
        }

    @classmethod
    def parse(
        cls,
        filter_string: str,
        current_user_id: Optional[UUID] = None
    ) -> List[FilterClause]:
        """
        Parse a filter string into clauses.

        Args:
            filter_string: Raw filter, e.g. ``"is:open assignee:me crash"``
            current_user_id: Identity used for ``assignee:me``

        Returns:
            Clauses in token order (dropped tokens omitted)
        """
        return cls(current_user_id).parse_tokens(filter_string.split())

    def parse_tokens(self, tokens: List[str]) -> List[FilterClause]:
        clauses: List[FilterClause] = []
        for token in tokens:
            if ":" not in token:
                clauses.append(FreeTextClause(token))
                continue

            key, value = token.split(":", 1)
            handler = self._handlers.get(key)
            if handler is None:
                logger.debug("Ignoring unknown filter key", extra={"token": token})
                continue

            clause = handler(value, token)
            if clause is None:
                logger.debug("Ignoring malformed filter clause", extra={"token": token})
                continue
            clauses.append(clause)

        return clauses

    # ========== Key handlers ==========

    def _parse_is(self, value: str, token: str) -> Optional[FieldClause]:
        if value == "open":
            return FieldClause(FilterField.IS, ClauseOperator.NOT_EQUALS, IssueStatus.CLOSED, token)
        if value == "closed":
            return FieldClause(FilterField.IS, ClauseOperator.EQUALS, IssueStatus.CLOSED, token)
        return None

    def _parse_status(self, value: str, token: str) -> FieldClause:
        return FieldClause(FilterField.STATUS, ClauseOperator.EQUALS, _parse_enum(IssueStatus, value), token)

    def _parse_priority(self, value: str, token: str) -> FieldClause:
        return FieldClause(FilterField.PRIORITY, ClauseOperator.EQUALS, _parse_enum(Priority, value), token)

    def _parse_severity(self, value: str, token: str) -> FieldClause:
        return FieldClause(FilterField.SEVERITY, ClauseOperator.EQUALS, _parse_enum(Severity, value), token)

    def _parse_component(self, value: str, token: str) -> FieldClause:
        # Component lookup by name is not supported.
        return self._identity_clause(FilterField.COMPONENT, value, token)

    def _parse_assignee(self, value: str, token: str) -> FieldClause:
        if value == "me":
            if self.current_user_id is not None:
                return FieldClause(FilterField.ASSIGNEE, ClauseOperator.EQUALS, self.current_user_id, token)
            return FieldClause(FilterField.ASSIGNEE, ClauseOperator.IS_SET, None, token)
        if value in ("none", "unassigned"):
            return FieldClause(FilterField.ASSIGNEE, ClauseOperator.IS_UNSET, None, token)
        return self._identity_clause(FilterField.ASSIGNEE, value, token)

    def _parse_reporter(self, value: str, token: str) -> FieldClause:
        return self._identity_clause(FilterField.REPORTER, value, token)

    def _parse_team(self, value: str, token: str) -> FieldClause:
        # TODO: resolve teams through component ownership once components carry team ids in storage
        return FieldClause(FilterField.TEAM, ClauseOperator.NEVER, value, token)

    def _parse_label(self, value: str, token: str) -> FieldClause:
        return FieldClause(FilterField.LABEL, ClauseOperator.CONTAINS, value, token)

    def _date_parser(
        self,
        field: FilterField,
        operator: ClauseOperator
    ) -> Callable[[str, str], Optional[FieldClause]]:
        def handler(value: str, token: str) -> Optional[FieldClause]:
            parsed = parse_date(value)
            if parsed is None:
                return None
            return FieldClause(field, operator, parsed, token)
        return handler

    @staticmethod
    def _identity_clause(field: FilterField, value: str, token: str) -> FieldClause:
        identifier = parse_uuid(value)
        if identifier is None:
            return FieldClause(field, ClauseOperator.NEVER, value, token)
        return FieldClause(field, ClauseOperator.EQUALS, identifier, token)
