"""
Predicate Compiler
==================

Turns parsed filter clauses into a ``CompiledFilter``: a conjunctive
predicate tree plus the ordered parameter values its slots refer to.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Sequence, Tuple
from uuid import UUID

from buganizer.core import CompilerInvariantError
from buganizer.search.domain.clauses import (
    ClauseOperator,
    FieldClause,
    FilterClause,
    FilterField,
    FreeTextClause,
    UnrecognizedValue,
)
from buganizer.search.domain.predicates import (
    AlwaysFalse,
    AlwaysTrue,
    And,
    Column,
    CompareOp,
    Comparison,
    CompiledFilter,
    NULLARY_OPS,
    Param,
    PredicateNode,
    TextSearch,
)


FIELD_COLUMNS: Dict[FilterField, Column] = {
    FilterField.IS: Column.STATUS,
    FilterField.STATUS: Column.STATUS,
    FilterField.PRIORITY: Column.PRIORITY,
    FilterField.SEVERITY: Column.SEVERITY,
    FilterField.COMPONENT: Column.COMPONENT_ID,
    FilterField.ASSIGNEE: Column.ASSIGNEE_ID,
    FilterField.REPORTER: Column.REPORTER_ID,
    FilterField.LABEL: Column.LABELS,
    FilterField.CREATED_AFTER: Column.CREATED_AT,
    FilterField.CREATED_BEFORE: Column.CREATED_AT,
    FilterField.DUE_BEFORE: Column.DUE_DATE,
    FilterField.DUE_AFTER: Column.DUE_DATE,
}

OPERATORS: Dict[ClauseOperator, CompareOp] = {
    ClauseOperator.EQUALS: CompareOp.EQ,
    ClauseOperator.NOT_EQUALS: CompareOp.NE,
    ClauseOperator.CONTAINS: CompareOp.HAS_ELEMENT,
    ClauseOperator.AT_LEAST: CompareOp.GTE,
    ClauseOperator.AT_MOST: CompareOp.LTE,
    ClauseOperator.IS_SET: CompareOp.IS_NOT_NULL,
    ClauseOperator.IS_UNSET: CompareOp.IS_NULL,
}

TEXT_SEARCH_COLUMNS: Tuple[Column, ...] = (Column.TITLE, Column.DESCRIPTION)


def _bind_value(value: Any) -> Any:
    """Convert a clause value into the plain value handed to backends."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, UnrecognizedValue):
        return value.raw
    if isinstance(value, (UUID, datetime, str)):
        return value
    raise CompilerInvariantError(f"Unsupported clause value type: {type(value).__name__}")


class PredicateCompiler:
    """
    Stateless compiler from clauses to a predicate tree.

    Rules:
    - Each structured clause becomes exactly one leaf: a ``Comparison``,
      or ``AlwaysFalse`` for clauses that can never match.
    - Each free-text clause becomes one ``TextSearch`` leaf over title and
      description with a single ``%text%`` parameter.
    - Leaves are ANDed in clause order; parameters are numbered in the
      same order, so placeholder order equals parameter order.
    - No clauses compiles to ``AlwaysTrue`` (no predicate).
    """

    @staticmethod
    def compile(clauses: Sequence[FilterClause]) -> CompiledFilter:
        if not clauses:
            return CompiledFilter(AlwaysTrue(), ())

        params: List[Any] = []
        children: List[PredicateNode] = []

        def bind(value: Any) -> Param:
            params.append(value)
            return Param(len(params) - 1)

        for clause in clauses:
            if isinstance(clause, FreeTextClause):
                children.append(TextSearch(TEXT_SEARCH_COLUMNS, bind(f"%{clause.text}%")))
                continue
            children.append(PredicateCompiler._compile_field(clause, bind))

        compiled = CompiledFilter(And(tuple(children)), tuple(params))
        compiled.check_invariants()
        return compiled

    @staticmethod
    def _compile_field(clause: FieldClause, bind) -> PredicateNode:
        if clause.operator == ClauseOperator.NEVER:
            return AlwaysFalse()

        column = FIELD_COLUMNS.get(clause.field)
        op = OPERATORS.get(clause.operator)
        if column is None or op is None:
            raise CompilerInvariantError(
                "Clause has no predicate mapping",
                {"field": clause.field.value, "operator": clause.operator.value}
            )

        if op in NULLARY_OPS:
            return Comparison(column, op)
        return Comparison(column, op, bind(_bind_value(clause.value)))

