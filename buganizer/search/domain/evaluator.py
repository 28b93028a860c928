"""
Predicate Evaluator
===================

Evaluates a compiled filter against in-memory issue objects with the same
semantics the SQL backends give it (NULL never compares true, ILIKE
patterns honour ``%`` and ``_``).
"""

import re
from enum import Enum
from functools import lru_cache
from typing import Any, Iterable, List, Pattern, TypeVar

from buganizer.core import CompilerInvariantError
from buganizer.search.domain.predicates import (
    AlwaysFalse,
    AlwaysTrue,
    And,
    CompareOp,
    Comparison,
    CompiledFilter,
    PredicateNode,
    TextSearch,
)

T = TypeVar("T")


@lru_cache(maxsize=256)
def like_to_regex(pattern: str) -> Pattern[str]:
    """
    Translate an ILIKE pattern into an anchored case-insensitive regex.

    Backslash escapes the next character as in PostgreSQL (``\\%`` is a
    literal percent sign). A trailing lone backslash matches itself.
    """
    parts = []
    chars = iter(pattern)
    for char in chars:
        if char == "\\":
            parts.append(re.escape(next(chars, "\\")))
        elif char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class PredicateEvaluator:
    """Matches objects exposing issue columns as attributes."""

    def __init__(self, compiled: CompiledFilter):
        self._compiled = compiled

    def matches(self, issue: Any) -> bool:
        return self._eval(self._compiled.predicate, issue)

    def filter(self, issues: Iterable[T]) -> List[T]:
        return [issue for issue in issues if self.matches(issue)]

    def _eval(self, node: PredicateNode, issue: Any) -> bool:
        if isinstance(node, AlwaysTrue):
            return True
        if isinstance(node, AlwaysFalse):
            return False
        if isinstance(node, And):
            return all(self._eval(child, issue) for child in node.children)
        if isinstance(node, TextSearch):
            regex = like_to_regex(self._compiled.value(node.param))
            return any(
                (text := getattr(issue, column.value, None)) is not None and regex.fullmatch(text) is not None
                for column in node.columns
            )
        if isinstance(node, Comparison):
            return self._compare(node, issue)
        raise CompilerInvariantError(f"Unknown predicate node: {type(node).__name__}")

    def _compare(self, node: Comparison, issue: Any) -> bool:
        actual = _plain(getattr(issue, node.column.value, None))

        if node.op == CompareOp.IS_NULL:
            return actual is None
        if node.op == CompareOp.IS_NOT_NULL:
            return actual is not None

        expected = self._compiled.value(node.param)
        if actual is None:
            return False

        if node.op == CompareOp.EQ:
            return actual == expected
        if node.op == CompareOp.NE:
            return actual != expected
        if node.op == CompareOp.GTE:
            return actual >= expected
        if node.op == CompareOp.LTE:
            return actual <= expected
        if node.op == CompareOp.HAS_ELEMENT:
            return expected in actual
        raise CompilerInvariantError(f"Unknown comparison operator: {node.op}")
