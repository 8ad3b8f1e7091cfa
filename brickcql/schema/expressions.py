"""Closed enumerations for CqlQuery expression nodes and statements.

The function-name table, comparison symbols, key kinds and operation
selector are fixed at import time; every compilation reads them but none
mutates them.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping

# ---------------------------------------------------------------------------
# Operand kind enum
# ---------------------------------------------------------------------------


class OperandKind(str, Enum):
    """The discriminator tag for each expression node type."""

    COL = "col"
    VALUE = "value"
    PARAM = "param"
    FUNC = "func"
    CAST = "cast"
    BLOB = "as_blob"
    FRAGMENT = "fragment"
    CMP = "cmp"
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    IN = "IN"
    NULL = "null"


# ---------------------------------------------------------------------------
# Predicate operator enums
# ---------------------------------------------------------------------------


class ComparisonOp(str, Enum):
    """Binary comparison operators (2 operands)."""

    EQ = "EQ"
    NE = "NE"
    GT = "GT"
    GTE = "GTE"
    LT = "LT"
    LTE = "LTE"


#: CQL symbol for each comparison operator.
COMPARISON_SYMBOLS: Mapping[ComparisonOp, str] = MappingProxyType(
    {
        ComparisonOp.EQ: "=",
        ComparisonOp.NE: "!=",
        ComparisonOp.GT: ">",
        ComparisonOp.GTE: ">=",
        ComparisonOp.LT: "<",
        ComparisonOp.LTE: "<=",
    }
)

#: Symbolic spellings accepted as plan keys, normalised to the enum.
COMPARISON_ALIASES: Mapping[str, ComparisonOp] = MappingProxyType(
    {
        "==": ComparisonOp.EQ,
        "=": ComparisonOp.EQ,
        "!=": ComparisonOp.NE,
        ">": ComparisonOp.GT,
        ">=": ComparisonOp.GTE,
        "<": ComparisonOp.LT,
        "<=": ComparisonOp.LTE,
        **{op.value: op for op in ComparisonOp},
    }
)

#: Every key that marks a dict as a comparison node.
COMPARISON_KEYS: frozenset[str] = frozenset(COMPARISON_ALIASES)


class NullOp(str, Enum):
    """Null-check operators (1 operand).  Parsed, then rejected by the compiler."""

    IS_NULL = "IS_NULL"
    IS_NOT_NULL = "IS_NOT_NULL"


NULL_KEYS: frozenset[str] = frozenset(op.value for op in NullOp)


# ---------------------------------------------------------------------------
# Functions
# ---------------------------------------------------------------------------


class CqlFunction(str, Enum):
    """Functions a query may call.  Unknown names fail model validation."""

    COUNT = "count"
    TOKEN = "token"
    UUID = "uuid"
    NOW = "now"
    MIN_TIMEUUID = "min_timeuuid"
    MAX_TIMEUUID = "max_timeuuid"
    TO_DATE = "to_date"
    TO_TIMESTAMP = "to_timestamp"
    TO_UNIX_TIMESTAMP = "to_unix_timestamp"


#: Rendered CQL name for each function.
FUNCTION_NAMES: Mapping[CqlFunction, str] = MappingProxyType(
    {
        CqlFunction.COUNT: "count",
        CqlFunction.TOKEN: "token",
        CqlFunction.UUID: "uuid",
        CqlFunction.NOW: "now",
        CqlFunction.MIN_TIMEUUID: "minTimeuuid",
        CqlFunction.MAX_TIMEUUID: "maxTimeuuid",
        CqlFunction.TO_DATE: "toDate",
        CqlFunction.TO_TIMESTAMP: "toTimestamp",
        CqlFunction.TO_UNIX_TIMESTAMP: "toUnixTimestamp",
    }
)

# ---------------------------------------------------------------------------
# Row-level statements
# ---------------------------------------------------------------------------


class KeyKind(str, Enum):
    """Declared autogeneration policy of a key column on INSERT.

    ``BINARY_ID`` keys are time-based UUIDs generated with ``now()``;
    ``ID`` keys are random UUIDs generated with ``uuid()``.
    """

    BINARY_ID = "binary_id"
    ID = "id"


#: Generator call rendered for each key kind.
KEY_GENERATORS: Mapping[KeyKind, CqlFunction] = MappingProxyType(
    {
        KeyKind.BINARY_ID: CqlFunction.NOW,
        KeyKind.ID: CqlFunction.UUID,
    }
)


class Autogenerate(Enum):
    """Sentinel marking an INSERT value the cluster must generate."""

    NOW = "now"

    def __repr__(self) -> str:
        return "NOW"


#: Pass as a field value to have the cluster generate it (``now()``).
NOW = Autogenerate.NOW


class Operation(str, Enum):
    """Statement kind selected by the caller."""

    ALL = "all"
    UPDATE_ALL = "update_all"
    DELETE_ALL = "delete_all"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"

    @classmethod
    def _missing_(cls, value: object) -> "Operation | None":
        if value == "select":
            return cls.ALL
        return None


#: Operations compiled from a :class:`~brickcql.schema.query_plan.CqlQuery`.
QUERY_OPERATIONS: frozenset[Operation] = frozenset(
    {Operation.ALL, Operation.UPDATE_ALL, Operation.DELETE_ALL}
)
