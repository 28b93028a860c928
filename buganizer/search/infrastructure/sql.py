"""
SQL Predicate Renderers
=======================

Backend adapters that turn a ``CompiledFilter`` into SQL.

- ``SQLAlchemyPredicateRenderer`` builds a SQLAlchemy boolean expression
  bound to an ORM model, reused for both the page and the count query.
- ``PostgresTextRenderer`` builds a ``WHERE`` fragment with ``$n``
  positional placeholders and the matching argument list, for raw asyncpg
  queries and for query logging.
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import and_, any_, false, literal, or_, true
from sqlalchemy.sql.elements import ColumnElement

from buganizer.core import CompilerInvariantError
from buganizer.search.domain.predicates import (
    AlwaysFalse,
    AlwaysTrue,
    And,
    CompareOp,
    Comparison,
    CompiledFilter,
    Param,
    PredicateNode,
    TextSearch,
)


class SQLAlchemyPredicateRenderer:
    """
    Renders predicate trees against the columns of a mapped model.

    Column names in the tree are looked up as attributes on ``model``.
    """

    def __init__(self, model: Any):
        self._model = model

    def render(self, compiled: CompiledFilter) -> Optional[ColumnElement[bool]]:
        """
        Render a compiled filter.

        Returns:
            Boolean expression, or None when the filter matches everything
        """
        if compiled.matches_all:
            return None
        return self._render(compiled.predicate, compiled)

    def _render(self, node: PredicateNode, compiled: CompiledFilter) -> ColumnElement[bool]:
        if isinstance(node, AlwaysTrue):
            return true()
        if isinstance(node, AlwaysFalse):
            return false()
        if isinstance(node, And):
            return and_(*(self._render(child, compiled) for child in node.children))
        if isinstance(node, TextSearch):
            pattern = compiled.value(node.param)
            return or_(*(self._column(column.value).ilike(pattern) for column in node.columns))
        if isinstance(node, Comparison):
            return self._comparison(node, compiled)
        raise CompilerInvariantError(f"Unknown predicate node: {type(node).__name__}")

    def _comparison(self, node: Comparison, compiled: CompiledFilter) -> ColumnElement[bool]:
        column = self._column(node.column.value)

        if node.op == CompareOp.IS_NULL:
            return column.is_(None)
        if node.op == CompareOp.IS_NOT_NULL:
            return column.is_not(None)

        value = compiled.value(node.param)
        if node.op == CompareOp.EQ:
            return column == value
        if node.op == CompareOp.NE:
            return column != value
        if node.op == CompareOp.GTE:
            return column >= value
        if node.op == CompareOp.LTE:
            return column <= value
        if node.op == CompareOp.HAS_ELEMENT:
            return literal(value) == any_(column)
        raise CompilerInvariantError(f"Unknown comparison operator: {node.op}")

    def _column(self, name: str):
        column = getattr(self._model, name, None)
        if column is None:
            raise CompilerInvariantError(
                "Predicate references an unmapped column",
                {"column": name, "model": getattr(self._model, "__name__", str(self._model))}
            )
        return column


class PostgresTextRenderer:
    """
    Renders predicate trees as PostgreSQL text with ``$n`` placeholders.

    Placeholders are numbered from ``start_index`` in order of first
    appearance, so ``args`` can be passed positionally and further
    placeholders (LIMIT/OFFSET) can follow at ``start_index + len(args)``.
    A free-text slot is referenced once per searched column but bound once.

    Example:
        >>> sql, args = PostgresTextRenderer().render(compiled)
        >>> sql
        'WHERE (title ILIKE $1 OR description ILIKE $1) AND status = $2'
    """

    NEVER = "1 = 0"
    ALWAYS = "1 = 1"

    def __init__(self, start_index: int = 1):
        self.start_index = start_index

    def render(self, compiled: CompiledFilter) -> Tuple[str, List[Any]]:
        """
        Returns:
            ``(where_clause, args)``; ``("", [])`` when the filter matches everything

        Raises:
            CompilerInvariantError: If placeholders and arguments disagree
        """
        if compiled.matches_all:
            return "", []

        placeholders: Dict[int, int] = {}
        args: List[Any] = []

        def placeholder(param: Param) -> str:
            if param.index not in placeholders:
                placeholders[param.index] = self.start_index + len(args)
                args.append(compiled.value(param))
            return f"${placeholders[param.index]}"

        sql = self._render(compiled.predicate, placeholder)

        if len(args) != len(compiled.params):
            raise CompilerInvariantError(
                "Placeholder count does not match parameter count",
                {"placeholders": len(args), "params": len(compiled.params)}
            )

        return f"WHERE {sql}", args

    def _render(self, node: PredicateNode, placeholder) -> str:
        if isinstance(node, AlwaysTrue):
            return self.ALWAYS
        if isinstance(node, AlwaysFalse):
            return self.NEVER
        if isinstance(node, And):
            if not node.children:
                return self.ALWAYS
            return " AND ".join(self._render(child, placeholder) for child in node.children)
        if isinstance(node, TextSearch):
            ref = placeholder(node.param)
            return "(" + " OR ".join(f"{column.value} ILIKE {ref}" for column in node.columns) + ")"
        if isinstance(node, Comparison):
            column = node.column.value
            if node.op == CompareOp.IS_NULL:
                return f"{column} IS NULL"
            if node.op == CompareOp.IS_NOT_NULL:
                return f"{column} IS NOT NULL"
            if node.op == CompareOp.HAS_ELEMENT:
                return f"{placeholder(node.param)} = ANY({column})"
            return f"{column} {node.op.value} {placeholder(node.param)}"
        raise CompilerInvariantError(f"Unknown predicate node: {type(node).__name__}")
