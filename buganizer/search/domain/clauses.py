"""
Filter Clauses
==============

Typed units produced by parsing a filter string such as
``is:open priority:P1 label:regression crash``.

A clause is either structured (``FieldClause``: field, operator, value) or
unstructured (``FreeTextClause``). Enumerated values (status, priority,
severity) are parsed into their closed enums; anything else becomes an
``UnrecognizedValue`` which is forwarded verbatim and matches nothing.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class FilterField(str, Enum):
    """Structured filter keys after alias resolution."""
    IS = "is"
    STATUS = "status"
    PRIORITY = "priority"
    SEVERITY = "severity"
    COMPONENT = "component"
    ASSIGNEE = "assignee"
    REPORTER = "reporter"
    TEAM = "team"
    LABEL = "label"
    CREATED_AFTER = "created_after"
    CREATED_BEFORE = "created_before"
    DUE_BEFORE = "due_before"
    DUE_AFTER = "due_after"


class ClauseOperator(str, Enum):
    """How a clause's value is compared against the issue."""
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"          # value is an element of a set-valued field
    AT_LEAST = "at_least"
    AT_MOST = "at_most"
    IS_SET = "is_set"
    IS_UNSET = "is_unset"
    NEVER = "never"                # recognised key whose value cannot match


@dataclass(frozen=True)
class UnrecognizedValue:
    """An enumerated-field value outside the known variants."""
    raw: str

    def __str__(self) -> str:
        return self.raw


@dataclass(frozen=True)
class FieldClause:
    """A ``key:value`` clause."""
    field: FilterField
    operator: ClauseOperator
    value: Any = None
    token: str = ""


@dataclass(frozen=True)
class FreeTextClause:
    """A token without ``:``, matched against title or description."""
    text: str


FilterClause = Union[FieldClause, FreeTextClause]
