"""Clause-level CQL builders.

Each class handles exactly one clause.  Expression rendering is delegated
to the shared :class:`~brickcql.compile.expression_builder.OperandBuilder`,
so every clause of one statement binds into the same parameter list.

Classes
-------
SelectClauseBuilder     — ``SELECT <items>``
SourceBuilder           — ``[prefix.]table``
GroupByBuilder          — ``GROUP BY …``
OrderByBuilder          — ``ORDER BY … [DESC]``
LockClauseBuilder       — trailing ``ALLOW FILTERING`` hint
AssignmentBuilder       — ``SET`` list of ``UPDATE``
ExistenceGuardBuilder   — ``IF EXISTS`` / ``IF NOT EXISTS``
"""
from __future__ import annotations

from typing import Sequence

from brickcql.compile.context import CompilationContext
from brickcql.compile.expression_builder import OperandBuilder
from brickcql.errors import CompilationError, UnsupportedLockingError
from brickcql.schema.expressions import Operation
from brickcql.schema.operands import Operand
from brickcql.schema.query_plan import (
    Assignment,
    CompileOptions,
    IncAssignment,
    OrderByItem,
    SetAssignment,
    Source,
)


class SelectClauseBuilder:
    """Builds the ``SELECT …`` clause."""

    def __init__(self, operand_builder: OperandBuilder) -> None:
        self._op = operand_builder

    def build(self, items: Sequence[Operand]) -> str:
        if not items:
            return "SELECT *"
        return f"SELECT {', '.join(self._op.build(item) for item in items)}"


class SourceBuilder:
    """Builds the ``[prefix.]table`` source identifier."""

    def __init__(self, ctx: CompilationContext) -> None:
        self._ctx = ctx

    def build(self, source: Source) -> str:
        return self._ctx.compiler.table_name(source.table, source.prefix)


class GroupByBuilder:
    """Builds ``GROUP BY …``; callers skip it for an empty list."""

    def __init__(self, operand_builder: OperandBuilder) -> None:
        self._op = operand_builder

    def build(self, items: Sequence[Operand]) -> str:
        return f"GROUP BY {', '.join(self._op.build(item) for item in items)}"


class OrderByBuilder:
    """Builds ``ORDER BY …``; ascending is the default and is not printed."""

    def __init__(self, operand_builder: OperandBuilder) -> None:
        self._op = operand_builder

    def build(self, items: Sequence[OrderByItem]) -> str:
        order_parts = []
        for item in items:
            expr_sql = self._op.build(item.expr)
            order_parts.append(f"{expr_sql} DESC" if item.direction == "DESC" else expr_sql)
        return f"ORDER BY {', '.join(order_parts)}"


class LockClauseBuilder:
    """Validates the trailing query hint.

    CQL has no row locks; the only hint a SELECT may carry is
    ``ALLOW FILTERING``, which is appended exactly as written.
    """

    def __init__(self, ctx: CompilationContext) -> None:
        self._ctx = ctx

    def build(self, hint: str) -> str:
        if not self._ctx.compiler.is_filtering_hint(hint):
            raise UnsupportedLockingError(hint)
        return hint


class AssignmentBuilder:
    """Builds the comma-joined assignment list of an ``UPDATE``."""

    def __init__(self, operand_builder: OperandBuilder) -> None:
        self._op = operand_builder

    def build(self, assignments: Sequence[Assignment]) -> str:
        parts: list[str] = []
        for assignment in assignments:
            if isinstance(assignment, SetAssignment):
                column = self._op.build_column(assignment.set)
                parts.append(f"{column} = {self._op.build(assignment.to)}")
            elif isinstance(assignment, IncAssignment):
                column = self._op.build_column(assignment.inc)
                parts.append(f"{column} = {column} + {self._op.build(assignment.by)}")
            else:
                raise CompilationError(
                    f"Unknown assignment type: {type(assignment).__name__}", clause="UPDATE"
                )
        return ", ".join(parts)


class ExistenceGuardBuilder:
    """Builds the ``IF EXISTS`` / ``IF NOT EXISTS`` suffix from options."""

    _GUARDS: dict[str, str] = {
        "exists": "IF EXISTS",
        "not_exists": "IF NOT EXISTS",
    }

    _APPLIES_TO: dict[Operation, frozenset[str]] = {
        Operation.UPDATE_ALL: frozenset({"exists"}),
        Operation.DELETE_ALL: frozenset({"exists"}),
        Operation.UPDATE: frozenset({"exists"}),
        Operation.DELETE: frozenset({"exists"}),
        Operation.INSERT: frozenset({"not_exists"}),
    }

    def build(self, options: CompileOptions, operation: Operation) -> str:
        """Return the guard text, or ``""`` when none was requested.

        SELECT ignores the option.

        Raises:
            CompilationError: If the guard does not apply to ``operation``.
        """
        condition = options.condition
        if condition is None or operation is Operation.ALL:
            return ""
        if condition not in self._APPLIES_TO.get(operation, frozenset()):
            raise CompilationError(
                f"Option if: {condition!r} does not apply to {operation.value}.",
                clause="OPTIONS",
            )
        return self._GUARDS[condition]
