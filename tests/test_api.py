"""Tests for the top-level brickcql API."""

from __future__ import annotations

import json
import logging

import pytest

import brickcql
from brickcql import (
    NOW,
    CompilationError,
    CompiledCQL,
    CqlQuery,
    ParseError,
    UnsupportedRelationError,
)
from tests.fixtures import load_plan, load_plan_json


def test_compile_plan():
    r = brickcql.compile_plan(load_plan_json("users_by_name"))
    assert isinstance(r, CompiledCQL)
    assert r.cql == "SELECT id FROM users WHERE name = ?"
    assert r.params == ("John",)
    assert r.options == {}


def test_compile_plan_update_all():
    r = brickcql.compile_plan(load_plan_json("rename_user"), "update_all", {"if": "exists"})
    assert r.cql == "UPDATE users SET name = ?, age = age + 1 WHERE id = ? IF EXISTS"
    assert r.options == {"if": "exists"}


def test_compile_plan_invalid_json():
    with pytest.raises(ParseError, match="Invalid JSON") as exc_info:
        brickcql.compile_plan("{not json")
    assert exc_info.value.raw == "{not json"


def test_compile_plan_invalid_structure():
    with pytest.raises(ParseError, match="CqlQuery structure is invalid"):
        brickcql.compile_plan(json.dumps({"SELECT": [{"col": "id"}]}))


def test_compile_plan_unknown_function():
    plan = {"FROM": {"table": "users"}, "SELECT": [{"func": "sum", "args": [{"col": "a"}]}]}
    with pytest.raises(ParseError):
        brickcql.compile_plan(json.dumps(plan))


def test_compile_plan_relation_error_propagates():
    with pytest.raises(UnsupportedRelationError):
        brickcql.compile_plan(load_plan_json("name_or_age"))


def test_to_cql():
    r = brickcql.to_cql(load_plan("adults_filtering"), "select")
    assert r.cql == "SELECT id, name FROM users WHERE age >= 18 LIMIT 10 ALLOW FILTERING"


def test_to_cql_delete_all():
    assert brickcql.to_cql(CqlQuery(FROM={"table": "users"}), "delete_all").cql == "TRUNCATE users"


def test_to_cql_unknown_operation():
    with pytest.raises(CompilationError):
        brickcql.to_cql(load_plan("users_by_name"), "merge")


def test_row_statements():
    assert brickcql.insert(None, "users", {"id": NOW, "name": "Jack"}).cql == (
        "INSERT INTO users (id, name) VALUES (now(), ?)"
    )
    assert brickcql.update(None, "users", {"name": "Jack"}, {"id": 1}).cql == (
        "UPDATE users SET name = ? WHERE id = ?"
    )
    assert brickcql.delete(None, "users", {"id": 1}).cql == "DELETE FROM users WHERE id = ?"


def test_compiled_cql_is_immutable():
    r = brickcql.delete(None, "users", {"id": 1})
    with pytest.raises(AttributeError):
        r.cql = "TRUNCATE users"


def test_compilation_is_logged(caplog):
    with caplog.at_level(logging.DEBUG, logger="brickcql.compile.builder"):
        brickcql.compile_plan(load_plan_json("users_by_name"))
    assert "Compiled all statement with 1 parameter(s)" in caplog.text
