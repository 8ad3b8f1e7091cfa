"""Unit tests for literal rendering and ParamBinder."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

import pytest

from brickcql.compile.binder import ParamBinder, render_literal
from brickcql.errors import UnsupportedExpressionError


@pytest.mark.parametrize(
    "value, expected",
    [
        (True, "TRUE"),
        (False, "FALSE"),
        (0, "0"),
        (-3, "-3"),
        (98.2, "98.2"),
        (Decimal("1.50"), "1.50"),
        (float("nan"), "NaN"),
        (float("inf"), "Infinity"),
        (float("-inf"), "-Infinity"),
        ("John", "'John'"),
        ("", "''"),
        ("it's", "'it''s'"),
        ("a''b", "'a''''b'"),
    ],
)
def test_render_literal(value, expected):
    assert render_literal(value) == expected


def test_render_uuid_unquoted():
    value = UUID("12345678-1234-5678-1234-567812345678")
    assert render_literal(value) == "12345678-1234-5678-1234-567812345678"


def test_render_bytes_as_blob_constant():
    assert render_literal(b"\x00\xff") == "0x00ff"


def test_render_temporal_values_quoted():
    assert render_literal(date(2013, 1, 1)) == "'2013-01-01'"
    assert render_literal(datetime(2013, 1, 1, 0, 5)) == "'2013-01-01T00:05:00.000'"


def test_render_none_rejected():
    with pytest.raises(UnsupportedExpressionError, match="None"):
        render_literal(None)


def test_render_unknown_type_rejected():
    with pytest.raises(UnsupportedExpressionError) as exc_info:
        render_literal({"a": 1})
    assert exc_info.value.code == "UNSUPPORTED_EXPRESSION"


def test_bind_appends_in_order():
    binder = ParamBinder()
    assert binder.bind("John") == "?"
    assert binder.bind(27) == "?"
    assert binder.params == ["John", 27]


def test_bind_accepts_any_value():
    binder = ParamBinder()
    binder.bind(None)
    binder.bind([1, 2])
    assert binder.params == [None, [1, 2]]


def test_literal_binds_nothing():
    binder = ParamBinder()
    assert binder.literal("x") == "'x'"
    assert binder.params == []


def test_custom_placeholder():
    assert ParamBinder(placeholder="%s").bind(1) == "%s"


def test_render_datetime_truncated_to_milliseconds():
    value = datetime(2020, 1, 1, 0, 0, 0, 123456)
    assert render_literal(value) == "'2020-01-01T00:00:00.123'"
