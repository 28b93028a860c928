"""
Search Domain Layer
===================

The issue filter language and everything needed to evaluate it without
touching storage.

Contains:
- Clauses: typed units produced by the parser
- Parser: filter string -> clauses
- Predicates: backend-neutral predicate tree with indexed parameter slots
- Compiler: clauses -> compiled filter
- Evaluator: compiled filter applied to in-memory issues
- Entities: saved views
"""

from buganizer.search.domain.clauses import (
    ClauseOperator,
    FieldClause,
    FilterClause,
    FilterField,
    FreeTextClause,
    UnrecognizedValue,
)
from buganizer.search.domain.compiler import PredicateCompiler
from buganizer.search.domain.entities import SavedView
from buganizer.search.domain.evaluator import PredicateEvaluator, like_to_regex
from buganizer.search.domain.parser import QueryParser, parse_date, parse_uuid
from buganizer.search.domain.predicates import (
    AlwaysFalse,
    AlwaysTrue,
    And,
    Column,
    CompareOp,
    Comparison,
    CompiledFilter,
    IssueOrder,
    Param,
    PredicateNode,
    TextSearch,
    iter_params,
)

__all__ = [
    # Clauses
    "ClauseOperator",
    "FieldClause",
    "FilterClause",
    "FilterField",
    "FreeTextClause",
    "UnrecognizedValue",
    # Parsing and compilation
    "QueryParser",
    "PredicateCompiler",
    "PredicateEvaluator",
    "parse_date",
    "parse_uuid",
    "like_to_regex",
    # Predicate tree
    "AlwaysFalse",
    "AlwaysTrue",
    "And",
    "Column",
    "CompareOp",
    "Comparison",
    "CompiledFilter",
    "IssueOrder",
    "Param",
    "PredicateNode",
    "TextSearch",
    "iter_params",
    # Entities
    "SavedView",
]
