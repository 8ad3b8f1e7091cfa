"""Core CqlQuery → CQL statement assembly.

``StatementBuilder`` is the top-level orchestrator.  It wires together
focused clause-level and expression-level sub-builders, then assembles one
statement per call.  Dialect rules live on the injected
``CassandraCompiler``; clause rendering is delegated to the sub-builder
hierarchy.

Sub-builder hierarchy
---------------------
StatementBuilder
  ├── OperandBuilder          (expression_builder.py)
  ├── PredicateBuilder        (expression_builder.py)
  ├── SelectClauseBuilder     (clause_builders.py)
  ├── SourceBuilder           (clause_builders.py)
  ├── GroupByBuilder          (clause_builders.py)
  ├── OrderByBuilder          (clause_builders.py)
  ├── LockClauseBuilder       (clause_builders.py)
  ├── AssignmentBuilder       (clause_builders.py)
  └── ExistenceGuardBuilder   (clause_builders.py)

Parameter binding
-----------------
A single :class:`~brickcql.compile.binder.ParamBinder` is created per
statement and threaded through every sub-builder.  Clauses are rendered in
the order they appear in the statement text, so the parameter list lines up
with the ``?`` markers left to right.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from brickcql.compile.base import CompiledCQL
from brickcql.compile.binder import ParamBinder
from brickcql.compile.cassandra import CassandraCompiler
from brickcql.compile.clause_builders import (
    AssignmentBuilder,
    ExistenceGuardBuilder,
    GroupByBuilder,
    LockClauseBuilder,
    OrderByBuilder,
    SelectClauseBuilder,
    SourceBuilder,
)
from brickcql.compile.context import CompilationContext
from brickcql.compile.expression_builder import OperandBuilder, PredicateBuilder
from brickcql.errors import CompilationError
from brickcql.schema.expressions import (
    KEY_GENERATORS,
    NOW,
    QUERY_OPERATIONS,
    ComparisonOp,
    KeyKind,
    Operation,
)
from brickcql.schema.operands import (
    AndPredicate,
    ColumnOperand,
    ComparisonPredicate,
    FuncOperand,
    ParamOperand,
)
from brickcql.schema.query_plan import CompileOptions, CqlQuery, SetAssignment, Source

logger = logging.getLogger(__name__)

#: Row values: a mapping or an ordered sequence of ``(column, value)`` pairs.
Row = Mapping[str, Any] | Iterable[tuple[str, Any]]


class StatementBuilder:
    """Compiles queries and row operations to parameterized CQL.

    The builder holds only read-only dialect configuration, so one instance
    may be shared between threads; all per-statement state lives in the
    binder created by each call.

    Args:
        compiler: Dialect rules.  Defaults to :class:`CassandraCompiler`.
    """

    def __init__(self, compiler: CassandraCompiler | None = None) -> None:
        self._ctx = CompilationContext(compiler=compiler or CassandraCompiler())

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(
        self,
        query: CqlQuery,
        operation: Operation | str = Operation.ALL,
        options: Mapping[str, Any] | None = None,
    ) -> CompiledCQL:
        """Compile ``query`` as a SELECT, bulk UPDATE or bulk DELETE.

        Args:
            query: The normalized query AST.
            operation: ``all`` (or ``select``), ``update_all`` or ``delete_all``.
            options: Compilation options; ``{"if": "exists"}`` adds an
                existence guard.  Other keys are ignored and echoed back.

        Returns:
            :class:`~brickcql.compile.base.CompiledCQL` with ``cql`` text,
            positional ``params`` and the echoed ``options``.

        Raises:
            CompilationError: (or subclass) if the query cannot be expressed
                in CQL.
        """
        operation = _operation(operation)
        opts = _options(options)
        if operation not in QUERY_OPERATIONS:
            raise CompilationError(
                f"Operation '{operation.value}' compiles from row values; "
                f"call StatementBuilder.{operation.value}() instead."
            )
        binder = self._new_binder()
        sub_builders = self._make_sub_builders(binder)

        if operation is Operation.ALL:
            cql = self._build_select(query, sub_builders)
        elif operation is Operation.UPDATE_ALL:
            cql = self._build_update_all(query, opts, sub_builders)
        else:
            cql = self._build_delete_all(query, opts, sub_builders)
        return self._finish(operation, cql, binder, options)

    def insert(
        self,
        prefix: str | None,
        table: str,
        fields: Row,
        autogenerate: Mapping[str, KeyKind | str] | Iterable[tuple[str, KeyKind | str]] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> CompiledCQL:
        """Compile ``INSERT INTO … (…) VALUES (…)`` for one row.

        Autogenerated key columns missing from ``fields`` come first, in
        declared order, followed by ``fields`` in the order supplied.  A
        value of :data:`~brickcql.schema.expressions.NOW`, or a missing
        autogenerated key, is generated by the cluster: ``now()`` for
        ``KeyKind.BINARY_ID`` (the default), ``uuid()`` for ``KeyKind.ID``.
        Every other value is bound.

        Args:
            prefix: Optional keyspace.
            table: Table name.
            fields: Column values.
            autogenerate: Key columns and their :class:`KeyKind`.
            options: ``{"if": "not_exists"}`` adds ``IF NOT EXISTS``.
        """
        opts = _options(options)
        binder = self._new_binder()
        sb = self._make_sub_builders(binder)

        row = _pairs(fields)
        kinds = {col: _key_kind(kind) for col, kind in _pairs(autogenerate or {})}
        supplied = {col for col, _ in row}
        columns = [(col, NOW) for col in kinds if col not in supplied] + row
        if not columns:
            raise CompilationError("INSERT requires at least one column.", clause="INSERT")

        source = sb["source"].build(Source(table=table, prefix=prefix))
        names = ", ".join(sb["op"].build_column(col) for col, _ in columns)
        values = ", ".join(
            self._build_insert_value(sb["op"], value, kinds.get(col)) for col, value in columns
        )
        cql = _with_guard(
            f"INSERT INTO {source} ({names}) VALUES ({values})",
            sb["guard"].build(opts, Operation.INSERT),
        )
        return self._finish(Operation.INSERT, cql, binder, options)

    def update(
        self,
        prefix: str | None,
        table: str,
        fields: Row,
        filters: Row,
        options: Mapping[str, Any] | None = None,
    ) -> CompiledCQL:
        """Compile ``UPDATE … SET c = ? … WHERE k = ? AND …`` for one row.

        All field and filter values are bound.
        """
        opts = _options(options)
        binder = self._new_binder()
        sb = self._make_sub_builders(binder)

        row = _pairs(fields)
        if not row:
            raise CompilationError("UPDATE requires at least one field.", clause="UPDATE")
        where = _equality_filter(filters)
        if where is None:
            raise CompilationError(
                "CQL does not support UPDATE without a WHERE clause.", clause="WHERE"
            )

        source = sb["source"].build(Source(table=table, prefix=prefix))
        assignments = [SetAssignment(set=col, to=ParamOperand(param=value)) for col, value in row]
        sets = sb["assign"].build(assignments)
        cql = _with_guard(
            f"UPDATE {source} SET {sets} WHERE {sb['pred'].build(where)}",
            sb["guard"].build(opts, Operation.UPDATE),
        )
        return self._finish(Operation.UPDATE, cql, binder, options)

    def delete(
        self,
        prefix: str | None,
        table: str,
        filters: Row,
        options: Mapping[str, Any] | None = None,
    ) -> CompiledCQL:
        """Compile ``DELETE FROM … WHERE k = ? AND …`` for one row."""
        opts = _options(options)
        binder = self._new_binder()
        sb = self._make_sub_builders(binder)

        where = _equality_filter(filters)
        if where is None:
            raise CompilationError(
                "DELETE requires at least one filter; use delete_all to truncate a table.",
                clause="WHERE",
            )

        source = sb["source"].build(Source(table=table, prefix=prefix))
        cql = _with_guard(
            f"DELETE FROM {source} WHERE {sb['pred'].build(where)}",
            sb["guard"].build(opts, Operation.DELETE),
        )
        return self._finish(Operation.DELETE, cql, binder, options)

    # ------------------------------------------------------------------
    # Query statements
    # ------------------------------------------------------------------

    def _build_select(self, query: CqlQuery, sb: dict) -> str:
        parts: list[str] = [sb["select"].build(query.SELECT)]

        parts.append(f"FROM {sb['source'].build(query.FROM)}")

        if query.WHERE is not None:
            parts.append(f"WHERE {sb['pred'].build(query.WHERE)}")

        if query.GROUP_BY:
            parts.append(sb["group_by"].build(query.GROUP_BY))

        if query.ORDER_BY:
            parts.append(sb["order_by"].build(query.ORDER_BY))

        if query.LIMIT is not None:
            parts.append(f"LIMIT {query.LIMIT.value}")

        if query.LOCK:
            parts.append(sb["lock"].build(query.LOCK))

        return " ".join(parts)

    def _build_update_all(self, query: CqlQuery, opts: CompileOptions, sb: dict) -> str:
        _check_mutation_clauses(query, Operation.UPDATE_ALL, sb)
        if not query.UPDATE:
            raise CompilationError("UPDATE requires at least one assignment.", clause="UPDATE")
        if query.WHERE is None:
            raise CompilationError(
                "CQL does not support UPDATE without a WHERE clause.", clause="WHERE"
            )

        source = sb["source"].build(query.FROM)
        sets = sb["assign"].build(query.UPDATE)
        where = sb["pred"].build(query.WHERE)
        return _with_guard(
            f"UPDATE {source} SET {sets} WHERE {where}",
            sb["guard"].build(opts, Operation.UPDATE_ALL),
        )

    def _build_delete_all(self, query: CqlQuery, opts: CompileOptions, sb: dict) -> str:
        _check_mutation_clauses(query, Operation.DELETE_ALL, sb)
        source = sb["source"].build(query.FROM)
        guard = sb["guard"].build(opts, Operation.DELETE_ALL)

        if query.WHERE is None:
            if guard:
                raise CompilationError(
                    f"{guard} requires a WHERE clause; TRUNCATE takes no condition.",
                    clause="WHERE",
                )
            return f"TRUNCATE {source}"

        return _with_guard(f"DELETE FROM {source} WHERE {sb['pred'].build(query.WHERE)}", guard)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _build_insert_value(op: OperandBuilder, value: Any, kind: KeyKind | None) -> str:
        if value is NOW:
            func = KEY_GENERATORS[kind or KeyKind.BINARY_ID]
            return op.build(FuncOperand(func=func))
        return op.build(ParamOperand(param=value))

    def _new_binder(self) -> ParamBinder:
        return ParamBinder(placeholder=self._ctx.compiler.param_placeholder())

    def _finish(
        self,
        operation: Operation,
        cql: str,
        binder: ParamBinder,
        options: Mapping[str, Any] | None,
    ) -> CompiledCQL:
        compiled = CompiledCQL(
            cql=cql,
            params=tuple(binder.params),
            options=MappingProxyType(dict(options or {})),
        )
        logger.debug(
            "Compiled %s statement with %d parameter(s): %s",
            operation.value,
            len(compiled.params),
            cql,
        )
        return compiled

    # ------------------------------------------------------------------
    # Sub-builder wiring
    # ------------------------------------------------------------------

    def _make_sub_builders(self, binder: ParamBinder) -> dict:
        """Construct and wire the sub-builder graph for one statement.

        Every builder shares ``binder`` so parameters are collected in
        statement order.
        """
        # Build the operand/predicate pair (mutually dependent).
        pred_builder = PredicateBuilder.__new__(PredicateBuilder)
        op_builder = OperandBuilder(self._ctx, binder, pred_builder)
        pred_builder.__init__(self._ctx, binder, op_builder)  # type: ignore[misc]

        return {
            "op": op_builder,
            "pred": pred_builder,
            "select": SelectClauseBuilder(op_builder),
            "source": SourceBuilder(self._ctx),
            "group_by": GroupByBuilder(op_builder),
            "order_by": OrderByBuilder(op_builder),
            "lock": LockClauseBuilder(self._ctx),
            "assign": AssignmentBuilder(op_builder),
            "guard": ExistenceGuardBuilder(),
        }


# ---------------------------------------------------------------------------
# Module helpers
# ---------------------------------------------------------------------------


def _operation(value: Operation | str) -> Operation:
    try:
        return Operation(value)
    except ValueError as exc:
        valid = sorted(op.value for op in Operation)
        raise CompilationError(
            f"Unknown operation {value!r}. Expected one of {valid}."
        ) from exc


def _options(options: Mapping[str, Any] | None) -> CompileOptions:
    try:
        return CompileOptions.model_validate({"if": options.get("if")} if options else {})
    except ValidationError as exc:
        raise CompilationError(f"Invalid options: {exc}", clause="OPTIONS") from exc


def _key_kind(kind: KeyKind | str) -> KeyKind:
    try:
        return KeyKind(kind)
    except ValueError as exc:
        valid = sorted(k.value for k in KeyKind)
        raise CompilationError(
            f"Unknown key kind {kind!r}. Expected one of {valid}.", clause="INSERT"
        ) from exc


def _pairs(row: Row) -> list[tuple[str, Any]]:
    if isinstance(row, Mapping):
        return list(row.items())
    return [(col, value) for col, value in row]


def _equality_filter(filters: Row) -> AndPredicate | None:
    """``{"id": 1, "ts": 2}`` → ``id = ? AND ts = ?`` with both values bound."""
    comparisons = [
        ComparisonPredicate(op=ComparisonOp.EQ, left=ColumnOperand(col=col), right=ParamOperand(param=value))
        for col, value in _pairs(filters)
    ]
    if not comparisons:
        return None
    return AndPredicate(AND=comparisons)


def _with_guard(cql: str, guard: str) -> str:
    return f"{cql} {guard}" if guard else cql


#: Query clauses that only a SELECT renders.
_SELECT_ONLY_CLAUSES: tuple[str, ...] = ("SELECT", "GROUP_BY", "ORDER_BY", "LIMIT", "LOCK")


def _check_mutation_clauses(query: CqlQuery, operation: Operation, sb: dict) -> None:
    """Reject clauses a bulk UPDATE or DELETE cannot carry.

    A locking hint is checked first so that it fails as a locking request.
    """
    if query.LOCK:
        sb["lock"].build(query.LOCK)
    clauses = _SELECT_ONLY_CLAUSES
    if operation is Operation.DELETE_ALL:
        clauses += ("UPDATE",)
    for clause in clauses:
        if getattr(query, clause):
            raise CompilationError(
                f"{clause} does not apply to {operation.value}.", clause=clause
            )
