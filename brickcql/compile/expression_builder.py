"""Operand and predicate CQL compilers.

``OperandBuilder`` and ``PredicateBuilder`` are tightly coupled: a
relation may be projected (``SELECT age > 0 FROM users``) and relations
contain operands, so they share a module.

Both classes receive a :class:`~brickcql.compile.context.CompilationContext`
(static dialect rules) and a :class:`~brickcql.compile.binder.ParamBinder`
(per-query parameter state).  Every leaf value goes through the binder.
"""
from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from brickcql.compile.binder import ParamBinder
from brickcql.compile.context import CompilationContext
from brickcql.errors import UnsupportedExpressionError, UnsupportedRelationError
from brickcql.schema.expressions import COMPARISON_SYMBOLS
from brickcql.schema.operands import (
    PREDICATE_TYPES,
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
    to_operand,
)

#: Argument slot inside a fragment; ``\?`` writes a literal ``?``.
FRAGMENT_SLOT = "?"
FRAGMENT_ESCAPE = "\\"


# ---------------------------------------------------------------------------
# Operand builder
# ---------------------------------------------------------------------------


class OperandBuilder:
    """Compiles typed :class:`~brickcql.schema.operands.Operand` nodes to CQL.

    Relation nodes are handed to the predicate builder, so any operand
    position may hold a relation.

    Args:
        ctx: Static compilation context.
        binder: Parameter accumulator for this query.
        predicate_builder: PredicateBuilder for relation nodes.
    """

    def __init__(
        self,
        ctx: CompilationContext,
        binder: ParamBinder,
        predicate_builder: "PredicateBuilder",
    ) -> None:
        self._ctx = ctx
        self._binder = binder
        self._pred = predicate_builder

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(self, operand: Operand) -> str:
        """Compile a typed operand to a CQL fragment."""
        if isinstance(operand, PREDICATE_TYPES):
            return self._pred.build(operand)
        if isinstance(operand, ColumnOperand):
            return self.build_column(operand.col)
        if isinstance(operand, ValueOperand):
            return self._binder.literal(operand.value)
        if isinstance(operand, ParamOperand):
            return self._binder.bind(operand.param)
        if isinstance(operand, FuncOperand):
            return self._build_func(operand)
        if isinstance(operand, CastOperand):
            value_sql = self.build(operand.cast)
            return f"cast({value_sql} as {self._ctx.compiler.identifier(operand.type)})"
        if isinstance(operand, BlobOperand):
            func_name = self._ctx.compiler.blob_function_name(operand.type)
            return f"{func_name}({self.build(operand.as_blob)})"
        if isinstance(operand, FragmentOperand):
            return self._build_fragment(operand)
        raise UnsupportedExpressionError(
            f"Unknown operand type: {type(operand).__name__}", expression=operand
        )

    def build_column(self, col: str) -> str:
        """Render a column reference, dropping any binding qualifier.

        ``"u.name"`` and ``"name"`` both render as ``name``; CQL statements
        address a single table.
        """
        identifier = self._ctx.compiler.identifier
        if "." in col:
            binding, column = col.split(".", 1)
            identifier(binding)
            return identifier(column)
        return identifier(col)

    # ------------------------------------------------------------------
    # Operand sub-compilers
    # ------------------------------------------------------------------

    def _build_func(self, expr: FuncOperand) -> str:
        name = self._ctx.compiler.function_name(expr.func)
        args_sql = ", ".join(self.build(a) for a in expr.args)
        return f"{name}({args_sql})"

    def _build_fragment(self, expr: FragmentOperand) -> str:
        """Splice fragment arguments into their ``?`` slots.

        A backslash directly before ``?`` is consumed and the ``?`` is kept
        as text.  Any other backslash, including a trailing one, is copied
        through unchanged.
        """
        text = expr.fragment
        if not isinstance(text, str):
            raise UnsupportedExpressionError(
                f"Keyword fragment {text!r} has no CQL rendering; use a text fragment.",
                expression=text,
            )

        parts: list[str] = []
        used = 0
        i = 0
        while i < len(text):
            ch = text[i]
            if ch == FRAGMENT_ESCAPE and text[i + 1 : i + 2] == FRAGMENT_SLOT:
                parts.append(FRAGMENT_SLOT)
                i += 2
                continue
            if ch == FRAGMENT_SLOT:
                if used >= len(expr.args):
                    raise UnsupportedExpressionError(
                        f"Fragment {text!r} has more ? slots than its "
                        f"{len(expr.args)} argument(s).",
                        expression=text,
                    )
                parts.append(self._build_fragment_arg(expr.args[used]))
                used += 1
            else:
                parts.append(ch)
            i += 1

        if used != len(expr.args):
            raise UnsupportedExpressionError(
                f"Fragment {text!r} has {used} ? slot(s) but {len(expr.args)} argument(s).",
                expression=text,
            )
        return "".join(parts)

    def _build_fragment_arg(self, arg: Any) -> str:
        try:
            operand = to_operand(arg)
        except ValidationError as exc:
            raise UnsupportedExpressionError(
                f"Unsupported expression in fragment: {arg!r}", expression=arg
            ) from exc
        return self.build(operand)


# ---------------------------------------------------------------------------
# Predicate builder
# ---------------------------------------------------------------------------


class PredicateBuilder:
    """Compiles relation nodes (WHERE filters, projected conditions) to CQL.

    CQL relations are a flat conjunction of comparisons and ``IN`` lists.
    OR, NOT, IS NULL and an ``IN`` whose list cannot be expanded are
    rejected with :class:`~brickcql.errors.UnsupportedRelationError`.

    Args:
        ctx: Static compilation context.
        binder: Parameter accumulator for this query.
        operand_builder: OperandBuilder for relation arguments.
    """

    def __init__(
        self,
        ctx: CompilationContext,
        binder: ParamBinder,
        operand_builder: OperandBuilder,
    ) -> None:
        self._ctx = ctx
        self._binder = binder
        self._op = operand_builder

    def build(self, pred: Operand) -> str:
        """Compile a relation node to a CQL fragment."""
        if isinstance(pred, ComparisonPredicate):
            left = self._op.build(pred.left)
            right = self._op.build(pred.right)
            return f"{left} {COMPARISON_SYMBOLS[pred.op]} {right}"

        if isinstance(pred, AndPredicate):
            return " AND ".join(self._op.build(p) for p in pred.AND)

        if isinstance(pred, InPredicate):
            return self._build_in(pred)

        if isinstance(pred, OrPredicate):
            raise UnsupportedRelationError("OR")

        if isinstance(pred, NotPredicate):
            raise UnsupportedRelationError("NOT")

        if isinstance(pred, NullCheckPredicate):
            raise UnsupportedRelationError("IS NOT NULL" if pred.negated else "IS NULL")

        return self._op.build(pred)

    def _build_in(self, pred: InPredicate) -> str:
        values = pred.values
        pinned = _single_list(values, ParamOperand, "param")
        inline = _single_list(values, ValueOperand, "value")
        if not values or pinned == [] or inline == []:
            raise UnsupportedRelationError("NOT IN")

        left = self._op.build(pred.operand)
        if pinned is not None:
            items = [self._binder.bind(v) for v in pinned]
        elif inline is not None:
            items = [self._binder.literal(v) for v in inline]
        else:
            items = [self._op.build(v) for v in values]
        return f"{left} IN ({','.join(items)})"


def _single_list(values: list[Operand], node: type, attr: str) -> list | None:
    """Return the list held by a lone ``node`` value of an IN, else ``None``."""
    if len(values) == 1 and isinstance(values[0], node):
        held = getattr(values[0], attr)
        if isinstance(held, (list, tuple)):
            return list(held)
    return None
