"""Tests for Operand union parsing and the CqlQuery models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from brickcql.schema.expressions import ComparisonOp, CqlFunction, Operation
from brickcql.schema.operands import (
    AndPredicate,
    BlobOperand,
    CastOperand,
    ColumnOperand,
    ComparisonPredicate,
    FragmentOperand,
    FuncOperand,
    InPredicate,
    NotPredicate,
    NullCheckPredicate,
    OrPredicate,
    ParamOperand,
    ValueOperand,
    to_operand,
)
from brickcql.schema.query_plan import CompileOptions, CqlQuery, IncAssignment, SetAssignment


@pytest.mark.parametrize(
    "raw, model",
    [
        ({"col": "u.name"}, ColumnOperand),
        ({"value": 1}, ValueOperand),
        ({"param": [1, 2]}, ParamOperand),
        ({"func": "now"}, FuncOperand),
        ({"cast": {"value": "x"}, "type": "timeuuid"}, CastOperand),
        ({"as_blob": {"col": "data"}, "type": "text"}, BlobOperand),
        ({"fragment": "now()"}, FragmentOperand),
        ({"EQ": [{"col": "a"}, {"value": 1}]}, ComparisonPredicate),
        ({"AND": [{"value": True}]}, AndPredicate),
        ({"OR": [{"value": True}]}, OrPredicate),
        ({"NOT": {"value": True}}, NotPredicate),
        ({"IN": [{"col": "a"}, {"value": 1}]}, InPredicate),
        ({"IS_NULL": {"col": "a"}}, NullCheckPredicate),
    ],
)
def test_union_dispatch(raw, model):
    assert isinstance(to_operand(raw), model)


def test_typed_operand_passes_through():
    node = ColumnOperand(col="age")
    assert to_operand(node) is node


def test_symbolic_comparison_normalised():
    node = to_operand({"==": [{"col": "a"}, {"value": 1}]})
    assert node.op is ComparisonOp.EQ
    assert isinstance(node.left, ColumnOperand)
    assert node.right == ValueOperand(value=1)


def test_comparison_needs_two_operands():
    with pytest.raises(ValidationError):
        to_operand({"GT": [{"col": "a"}]})


def test_is_not_null_sets_negated():
    node = to_operand({"IS_NOT_NULL": {"col": "a"}})
    assert node.negated is True


def test_in_properties():
    node = to_operand({"IN": [{"col": "a"}, {"value": 1}, {"value": 2}]})
    assert node.operand == ColumnOperand(col="a")
    assert node.values == [ValueOperand(value=1), ValueOperand(value=2)]


def test_func_name_parsed():
    node = to_operand({"func": "min_timeuuid", "args": [{"value": "2013-01-01"}]})
    assert node.func is CqlFunction.MIN_TIMEUUID


def test_unknown_function_rejected():
    with pytest.raises(ValidationError):
        to_operand({"func": "sum", "args": [{"col": "a"}]})


@pytest.mark.parametrize("raw", [{"column": "a"}, {}, 5, "age"])
def test_unknown_shape_rejected(raw):
    with pytest.raises(ValidationError):
        to_operand(raw)


def test_extra_keys_rejected():
    with pytest.raises(ValidationError):
        to_operand({"col": "a", "alias": "b"})


def test_nodes_are_frozen():
    node = ColumnOperand(col="a")
    with pytest.raises(ValidationError):
        node.col = "b"


# ---------------------------------------------------------------------------
# CqlQuery
# ---------------------------------------------------------------------------


def test_query_requires_from():
    with pytest.raises(ValidationError):
        CqlQuery.model_validate({"SELECT": [{"col": "id"}]})


def test_query_defaults():
    query = CqlQuery.model_validate({"FROM": {"table": "users"}})
    assert query.SELECT == []
    assert query.WHERE is None
    assert query.GROUP_BY == []
    assert query.ORDER_BY == []
    assert query.LIMIT is None
    assert query.LOCK is None
    assert query.UPDATE == []


def test_positional_group_by():
    query = CqlQuery.model_validate({"FROM": {"table": "users"}, "GROUP_BY": [2, {"col": "a"}]})
    assert query.GROUP_BY == [ValueOperand(value=2), ColumnOperand(col="a")]


def test_negative_limit_rejected():
    with pytest.raises(ValidationError):
        CqlQuery.model_validate({"FROM": {"table": "users"}, "LIMIT": {"value": -1}})


def test_assignment_union():
    query = CqlQuery.model_validate(
        {
            "FROM": {"table": "users"},
            "UPDATE": [
                {"set": "name", "to": {"value": "x"}},
                {"inc": "age", "by": {"param": 1}},
            ],
        }
    )
    assert isinstance(query.UPDATE[0], SetAssignment)
    assert isinstance(query.UPDATE[1], IncAssignment)


def test_unknown_assignment_rejected():
    with pytest.raises(ValidationError):
        CqlQuery.model_validate(
            {"FROM": {"table": "users"}, "UPDATE": [{"append": "tags", "to": {"value": "x"}}]}
        )


# ---------------------------------------------------------------------------
# Options and operations
# ---------------------------------------------------------------------------


def test_options_if_alias():
    assert CompileOptions.model_validate({"if": "exists"}).condition == "exists"
    assert CompileOptions.model_validate({}).condition is None


def test_options_allow_unknown_keys():
    opts = CompileOptions.model_validate({"consistency": "ONE"})
    assert opts.condition is None


def test_options_reject_unknown_guard():
    with pytest.raises(ValidationError):
        CompileOptions.model_validate({"if": "maybe"})


def test_select_operation_alias():
    assert Operation("select") is Operation.ALL
    assert Operation("delete_all") is Operation.DELETE_ALL
