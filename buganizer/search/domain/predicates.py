"""
Predicate Tree
==============

Backend-neutral boolean expressions over issue columns.

Values never appear in the tree itself: leaves reference indexed parameter
slots (``Param``) into the ordered parameter tuple of a ``CompiledFilter``.
Each storage backend renders the tree into its own placeholder syntax.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, List, Optional, Tuple, Union

from buganizer.core import CompilerInvariantError


class Column(str, Enum):
    """Filterable issue columns."""
    STATUS = "status"
    PRIORITY = "priority"
    SEVERITY = "severity"
    COMPONENT_ID = "component_id"
    ASSIGNEE_ID = "assignee_id"
    REPORTER_ID = "reporter_id"
    LABELS = "labels"
    CREATED_AT = "created_at"
    DUE_DATE = "due_date"
    TITLE = "title"
    DESCRIPTION = "description"


class CompareOp(str, Enum):
    EQ = "="
    NE = "!="
    GTE = ">="
    LTE = "<="
    HAS_ELEMENT = "any"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"


# Operators that take no parameter
NULLARY_OPS = (CompareOp.IS_NULL, CompareOp.IS_NOT_NULL)


@dataclass(frozen=True)
class Param:
    """Reference to ``CompiledFilter.params[index]``."""
    index: int


@dataclass(frozen=True)
class Comparison:
    column: Column
    op: CompareOp
    param: Optional[Param] = None


@dataclass(frozen=True)
class TextSearch:
    """Case-insensitive pattern match of one parameter against any of ``columns``."""
    columns: Tuple[Column, ...]
    param: Param


@dataclass(frozen=True)
class And:
    children: Tuple["PredicateNode", ...]


@dataclass(frozen=True)
class AlwaysTrue:
    pass


@dataclass(frozen=True)
class AlwaysFalse:
    pass


PredicateNode = Union[Comparison, TextSearch, And, AlwaysTrue, AlwaysFalse]


def iter_params(node: PredicateNode) -> Iterator[Param]:
    """Yield parameter slots in placeholder (left-to-right) order."""
    if isinstance(node, And):
        for child in node.children:
            yield from iter_params(child)
    elif isinstance(node, (Comparison, TextSearch)) and node.param is not None:
        yield node.param


class IssueOrder(str, Enum):
    """Row order of an executed filter."""
    NEWEST_FIRST = "newest_first"   # created_at DESC
    DUE_SOONEST = "due_soonest"     # due_date ASC, issues without a due date last


@dataclass(frozen=True)
class CompiledFilter:
    """
    A predicate tree with its ordered parameter values.

    The same instance is used for the paginated query and the count query.
    """
    predicate: PredicateNode
    params: Tuple[Any, ...] = ()

    @property
    def matches_all(self) -> bool:
        return isinstance(self.predicate, AlwaysTrue)

    def value(self, param: Param) -> Any:
        return self.params[param.index]

    def check_invariants(self) -> None:
        """
        Verify every slot is bound exactly once, in order.

        Raises:
            CompilerInvariantError: If slots and parameters disagree
        """
        seen: List[int] = []
        for param in iter_params(self.predicate):
            if param.index not in seen:
                seen.append(param.index)
        expected = list(range(len(self.params)))
        if seen != expected:
            raise CompilerInvariantError(
                "Parameter slots do not match parameter list",
                {"slots": seen, "param_count": len(self.params)}
            )
