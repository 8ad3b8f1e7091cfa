"""Tests for relations CQL cannot express and the error hierarchy."""

from __future__ import annotations

import pytest

from brickcql.compile.builder import StatementBuilder
from brickcql.errors import (
    BadIdentifierError,
    BrickCQLError,
    CompilationError,
    UnsupportedExpressionError,
    UnsupportedLockingError,
    UnsupportedRelationError,
)
from brickcql.schema.query_plan import CqlQuery, Source
from tests.fixtures import load_plan

USERS = Source(table="users")


def _build(where=None, select=None):
    query = CqlQuery(FROM=USERS, SELECT=select or [{"col": "id"}], WHERE=where)
    return StatementBuilder().build(query)


def test_or_rejected():
    with pytest.raises(UnsupportedRelationError, match="OR relation") as exc_info:
        StatementBuilder().build(load_plan("name_or_age"))
    assert exc_info.value.relation == "OR"


def test_not_rejected():
    with pytest.raises(UnsupportedRelationError, match="NOT relation"):
        _build({"NOT": {"EQ": [{"col": "id"}, {"value": 1}]}})


def test_not_inside_and_rejected():
    where = {
        "AND": [
            {"EQ": [{"col": "name"}, {"value": "John"}]},
            {"NOT": {"EQ": [{"col": "id"}, {"value": 1}]}},
        ]
    }
    with pytest.raises(UnsupportedRelationError, match="NOT relation"):
        _build(where)


def test_is_null_rejected():
    with pytest.raises(UnsupportedRelationError, match="IS NULL relation"):
        _build({"IS_NULL": {"col": "name"}})


def test_is_not_null_rejected():
    with pytest.raises(UnsupportedRelationError, match="IS NOT NULL relation"):
        _build({"IS_NOT_NULL": {"col": "name"}})


def test_in_with_empty_pinned_list_rejected():
    with pytest.raises(UnsupportedRelationError, match="NOT IN relation"):
        _build({"IN": [{"col": "age"}, {"param": []}]})


def test_in_without_values_rejected():
    with pytest.raises(UnsupportedRelationError, match="NOT IN relation"):
        _build({"IN": [{"col": "age"}]})


def test_projected_or_rejected():
    select = [{"OR": [{"value": True}, {"value": False}]}]
    with pytest.raises(UnsupportedRelationError, match="OR relation"):
        _build(select=select)


def test_null_literal_rejected():
    with pytest.raises(UnsupportedExpressionError):
        _build({"EQ": [{"col": "name"}, {"value": None}]})


def test_no_partial_output_after_failure():
    builder = StatementBuilder()
    with pytest.raises(UnsupportedRelationError):
        builder.build(load_plan("name_or_age"))
    r = builder.build(load_plan("users_by_name"))
    assert r.cql == "SELECT id FROM users WHERE name = ?"
    assert r.params == ("John",)


# ---------------------------------------------------------------------------
# Hierarchy and error responses
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "error",
    [
        UnsupportedRelationError("OR"),
        UnsupportedLockingError("FOR UPDATE"),
        UnsupportedExpressionError("bad", expression=object()),
        BadIdentifierError("bad name"),
    ],
)
def test_all_errors_are_compilation_errors(error):
    assert isinstance(error, CompilationError)
    assert isinstance(error, BrickCQLError)


def test_bad_identifier_is_value_error():
    assert isinstance(BadIdentifierError("x y"), ValueError)


def test_relation_error_response():
    response = UnsupportedRelationError("NOT IN", clause="WHERE").to_error_response()
    assert response == {
        "error": "UNSUPPORTED_RELATION",
        "message": "CQL does not support NOT IN relation.",
        "clause": "WHERE",
        "details": {"relation": "NOT IN"},
    }


def test_locking_error_response():
    response = UnsupportedLockingError("FOR UPDATE").to_error_response()
    assert response["error"] == "UNSUPPORTED_LOCKING"
    assert response["clause"] == "LOCK"
    assert response["details"] == {"hint": "FOR UPDATE"}


def test_bad_identifier_details():
    err = BadIdentifierError("bad table", kind="table name")
    assert str(err) == "bad table name: 'bad table'"
    assert err.to_error_response()["details"] == {"name": "bad table", "kind": "table name"}


def test_compilation_error_defaults():
    err = CompilationError("boom")
    assert err.code == "COMPILATION_ERROR"
    assert err.clause is None
    assert err.details == {}


def test_in_with_empty_literal_list_rejected():
    with pytest.raises(UnsupportedRelationError, match="NOT IN relation"):
        _build({"IN": [{"col": "age"}, {"value": []}]})
