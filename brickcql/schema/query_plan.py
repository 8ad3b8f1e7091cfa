"""Pydantic models for the brickCQL query AST.

The query builder produces a single ``CqlQuery`` (or the equivalent JSON
object).  All clause keys except ``FROM`` are optional.  Expression
operands are typed via the ``Operand`` union; see
:mod:`brickcql.schema.operands`.
"""
from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator

from brickcql.schema.operands import Operand

_FROZEN = ConfigDict(extra="forbid", frozen=True)


class Source(BaseModel):
    """The table a statement reads from or writes to.

    Attributes:
        table: Table name.
        prefix: Optional keyspace; renders as ``prefix.table``.
    """

    model_config = _FROZEN

    table: str
    prefix: str | None = None


class OrderByItem(BaseModel):
    """A single ORDER BY expression.

    Attributes:
        expr: Typed operand to order by.
        direction: Sort direction; ``ASC`` is never printed.
    """

    model_config = _FROZEN

    expr: Operand
    direction: Literal["ASC", "DESC"] = "ASC"


class LimitClause(BaseModel):
    """LIMIT clause.

    Attributes:
        value: Maximum number of rows; must be a non-negative integer.
    """

    model_config = _FROZEN

    value: int = Field(ge=0)


# ---------------------------------------------------------------------------
# UPDATE assignments
# ---------------------------------------------------------------------------


class SetAssignment(BaseModel):
    """``{"set": "name", "to": operand}`` renders ``name = <operand>``."""

    model_config = _FROZEN

    set: str
    to: Operand


class IncAssignment(BaseModel):
    """``{"inc": "age", "by": operand}`` renders ``age = age + <operand>``."""

    model_config = _FROZEN

    inc: str
    by: Operand


def _assignment_discriminator(v: Any) -> str | None:
    if isinstance(v, dict):
        for key in ("set", "inc"):
            if key in v:
                return key
        return None
    if isinstance(v, SetAssignment):
        return "set"
    if isinstance(v, IncAssignment):
        return "inc"
    return None


Assignment = Annotated[
    Annotated[SetAssignment, Tag("set")] | Annotated[IncAssignment, Tag("inc")],
    Discriminator(_assignment_discriminator),
]


# ---------------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------------


class CqlQuery(BaseModel):
    """A normalized query, ready for compilation.

    Attributes:
        FROM: Source table (and optional keyspace).
        SELECT: Projection items; empty selects ``*``.
        WHERE: Conjunction of comparisons, or ``None``.
        GROUP_BY: Grouping expressions; bare integers are positional.
        ORDER_BY: Ordering items.
        LIMIT: Optional row limit.
        LOCK: Optional query hint; only ``ALLOW FILTERING`` compiles.
        UPDATE: Assignments for ``update_all``.
    """

    model_config = _FROZEN

    FROM: Source
    SELECT: list[Operand] = Field(default_factory=list)
    WHERE: Operand | None = None
    GROUP_BY: list[Operand] = Field(default_factory=list)
    ORDER_BY: list[OrderByItem] = Field(default_factory=list)
    LIMIT: LimitClause | None = None
    LOCK: str | None = None
    UPDATE: list[Assignment] = Field(default_factory=list)

    @field_validator("GROUP_BY", mode="before")
    @classmethod
    def _positional_group_by(cls, v: Any) -> Any:
        """Accept ``GROUP BY 2`` written as a bare integer."""
        if isinstance(v, list):
            return [
                {"value": item} if isinstance(item, int) and not isinstance(item, bool) else item
                for item in v
            ]
        return v


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


class CompileOptions(BaseModel):
    """Recognised compilation options.

    Only the ``"if"`` entry of the caller's mapping is validated; every
    other key is ignored, and the whole mapping is echoed back on
    :class:`~brickcql.compile.base.CompiledCQL`.

    Attributes:
        condition: Existence guard, given as ``{"if": "exists"}`` for
            updates and deletes or ``{"if": "not_exists"}`` for inserts.
    """

    model_config = ConfigDict(frozen=True)

    # "if" is a Python keyword; stored as ``condition``, alias ``"if"``.
    condition: Literal["exists", "not_exists"] | None = Field(None, alias="if")
