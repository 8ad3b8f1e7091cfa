"""brickCQL – compile normalized queries to Cassandra CQL.

Build Queries. Don't Concatenate Them.

Public API
----------
``compile_plan``
    Parse a CqlQuery JSON string and compile it to parameterized CQL.

``to_cql``
    Compile an already-built :class:`CqlQuery` for ``all`` (SELECT),
    ``update_all`` or ``delete_all``.

``insert`` / ``update`` / ``delete``
    Compile single-row statements from column values.

Every function returns a :class:`CompiledCQL`; hand ``cql`` and ``params``
to the driver::

    compiled = brickcql.to_cql(query)
    session.execute(compiled.cql, compiled.params)

Re-exported types
-----------------
``CqlQuery``, the operand node types, ``CompiledCQL``, ``StatementBuilder``,
``CassandraCompiler``, and all error classes.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from brickcql.compile.base import CompiledCQL
from brickcql.compile.builder import Row, StatementBuilder
from brickcql.compile.cassandra import CassandraCompiler
from brickcql.errors import (
    BadIdentifierError,
    BrickCQLError,
    CompilationError,
    ParseError,
    UnsupportedExpressionError,
    UnsupportedLockingError,
    UnsupportedRelationError,
)
from brickcql.schema.expressions import NOW, CqlFunction, KeyKind, Operation
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
    Operand,
    OrPredicate,
    ParamOperand,
    ValueOperand,
)
from brickcql.schema.query_plan import CompileOptions, CqlQuery, LimitClause, OrderByItem, Source

__all__ = [
    # Core pipeline
    "compile_plan",
    "to_cql",
    "insert",
    "update",
    "delete",
    # Query types
    "CqlQuery",
    "Source",
    "OrderByItem",
    "LimitClause",
    "CompileOptions",
    "Operation",
    "KeyKind",
    "CqlFunction",
    "NOW",
    # Typed operands
    "Operand",
    "ColumnOperand",
    "ValueOperand",
    "ParamOperand",
    "FuncOperand",
    "CastOperand",
    "BlobOperand",
    "FragmentOperand",
    "ComparisonPredicate",
    "AndPredicate",
    "OrPredicate",
    "NotPredicate",
    "InPredicate",
    "NullCheckPredicate",
    # Compilation
    "CompiledCQL",
    "CassandraCompiler",
    "StatementBuilder",
    # Errors
    "BrickCQLError",
    "ParseError",
    "CompilationError",
    "UnsupportedRelationError",
    "UnsupportedLockingError",
    "UnsupportedExpressionError",
    "BadIdentifierError",
]

_builder = StatementBuilder()


def compile_plan(
    plan_json: str,
    operation: Operation | str = Operation.ALL,
    options: Mapping[str, Any] | None = None,
) -> CompiledCQL:
    """Parse and compile a CqlQuery JSON string.

    This is the main entry point for plans produced outside Python::

        compiled = brickcql.compile_plan(
            '{"FROM": {"table": "users"}, "SELECT": [{"col": "id"}],'
            ' "WHERE": {"EQ": [{"col": "name"}, {"param": "John"}]}}'
        )
        # compiled.cql == "SELECT id FROM users WHERE name = ?"
        # compiled.params == ("John",)

    Args:
        plan_json: Raw JSON text of one CqlQuery.
        operation: ``all`` (or ``select``), ``update_all`` or ``delete_all``.
        options: Compilation options, echoed back on the result.

    Returns:
        ``CompiledCQL`` with ``cql`` text, positional ``params`` and ``options``.

    Raises:
        ParseError: If ``plan_json`` is not valid JSON or not a valid CqlQuery.
        CompilationError: (or subclass) if the query cannot be expressed in CQL.
    """
    # 1. Parse
    try:
        raw = json.loads(plan_json)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON: {exc}", raw=plan_json) from exc

    try:
        query = CqlQuery.model_validate(raw)
    except ValidationError as exc:
        raise ParseError(f"CqlQuery structure is invalid: {exc}", raw=plan_json) from exc

    # 2. Compile
    return _builder.build(query, operation, options)


def to_cql(
    query: CqlQuery,
    operation: Operation | str = Operation.ALL,
    options: Mapping[str, Any] | None = None,
) -> CompiledCQL:
    """Compile ``query`` for ``operation``; see :meth:`StatementBuilder.build`."""
    return _builder.build(query, operation, options)


def insert(
    prefix: str | None,
    table: str,
    fields: Row,
    autogenerate: Mapping[str, KeyKind | str] | Iterable[tuple[str, KeyKind | str]] | None = None,
    options: Mapping[str, Any] | None = None,
) -> CompiledCQL:
    """Compile a single-row INSERT; see :meth:`StatementBuilder.insert`."""
    return _builder.insert(prefix, table, fields, autogenerate, options)


def update(
    prefix: str | None,
    table: str,
    fields: Row,
    filters: Row,
    options: Mapping[str, Any] | None = None,
) -> CompiledCQL:
    """Compile a single-row UPDATE; see :meth:`StatementBuilder.update`."""
    return _builder.update(prefix, table, fields, filters, options)


def delete(
    prefix: str | None,
    table: str,
    filters: Row,
    options: Mapping[str, Any] | None = None,
) -> CompiledCQL:
    """Compile a single-row DELETE; see :meth:`StatementBuilder.delete`."""
    return _builder.delete(prefix, table, filters, options)
