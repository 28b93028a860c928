from uuid import uuid4

import pytest

from buganizer.core import CompilerInvariantError
from buganizer.search.application import IssueQueryService
from buganizer.search.domain import (
    AlwaysFalse,
    AlwaysTrue,
    And,
    Column,
    CompareOp,
    Comparison,
    CompiledFilter,
    Param,
    PredicateCompiler,
    QueryParser,
    TextSearch,
)


def compile_filter(filter_string, current_user_id=None):
    return PredicateCompiler.compile(QueryParser.parse(filter_string, current_user_id))


def test_no_clauses_matches_everything():
    compiled = compile_filter("")
    assert compiled.predicate == AlwaysTrue()
    assert compiled.params == ()
    assert compiled.matches_all


def test_leaves_and_params_follow_clause_order():
    compiled = compile_filter("status:FIXED priority:P1")

    assert compiled.predicate == And((
        Comparison(Column.STATUS, CompareOp.EQ, Param(0)),
        Comparison(Column.PRIORITY, CompareOp.EQ, Param(1)),
    ))
    assert compiled.params == ("FIXED", "P1")


def test_free_text_binds_one_pattern():
    compiled = compile_filter("crash")

    assert compiled.predicate == And((TextSearch((Column.TITLE, Column.DESCRIPTION), Param(0)),))
    assert compiled.params == ("%crash%",)


def test_free_text_wildcards_are_not_escaped():
    assert compile_filter("100%_done").params == ("%100%_done%",)


def test_is_open_excludes_closed():
    compiled = compile_filter("is:open")
    assert compiled.predicate.children == (Comparison(Column.STATUS, CompareOp.NE, Param(0)),)
    assert compiled.params == ("CLOSED",)


def test_never_matching_clauses_bind_nothing():
    compiled = compile_filter(f"team:{uuid4()} component:frontend priority:P0")

    assert compiled.predicate.children == (
        AlwaysFalse(),
        AlwaysFalse(),
        Comparison(Column.PRIORITY, CompareOp.EQ, Param(0)),
    )
    assert compiled.params == ("P0",)


def test_nullary_comparisons_bind_nothing():
    compiled = compile_filter("assignee:me assignee:none")

    assert compiled.predicate.children == (
        Comparison(Column.ASSIGNEE_ID, CompareOp.IS_NOT_NULL),
        Comparison(Column.ASSIGNEE_ID, CompareOp.IS_NULL),
    )
    assert compiled.params == ()


def test_assignee_me_binds_current_user():
    user_id = uuid4()
    compiled = compile_filter("assignee:me", current_user_id=user_id)
    assert compiled.params == (user_id,)


def test_unrecognized_enum_value_is_forwarded():
    assert compile_filter("severity:S9").params == ("S9",)


def test_label_and_dates():
    compiled = compile_filter("label:ui due_before:2024-03-01 created_after:2024-01-01")

    assert [leaf.op for leaf in compiled.predicate.children] == [
        CompareOp.HAS_ELEMENT,
        CompareOp.LTE,
        CompareOp.GTE,
    ]
    assert [leaf.column for leaf in compiled.predicate.children] == [
        Column.LABELS,
        Column.DUE_DATE,
        Column.CREATED_AT,
    ]


def test_compilation_is_deterministic():
    filter_string = "is:open priority:P1 label:ui crash login"
    assert compile_filter(filter_string) == compile_filter(filter_string)


def test_query_service_compile_matches_compiler():
    assert IssueQueryService.compile("priority:P1") == compile_filter("priority:P1")


def test_invariant_check_rejects_unbound_slot():
    compiled = CompiledFilter(And((Comparison(Column.STATUS, CompareOp.EQ, Param(1)),)), ("FIXED",))

    with pytest.raises(CompilerInvariantError):
        compiled.check_invariants()


def test_invariant_check_rejects_extra_params():
    compiled = CompiledFilter(And((Comparison(Column.STATUS, CompareOp.IS_NULL),)), ("FIXED",))

    with pytest.raises(CompilerInvariantError):
        compiled.check_invariants()
