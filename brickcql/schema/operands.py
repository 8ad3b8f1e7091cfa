"""Typed expression nodes for CqlQuery clauses.

Every projection, filter, grouping and ordering expression is one member
of the closed ``Operand`` union.  Pydantic v2 discriminated-union parsing
coerces the plan JSON (e.g. ``{"col": "u.name"}``) into the matching node,
so an unknown node shape or an unknown function name is rejected when the
query is built, never while it is rendered.

Whether a leaf value is written into the statement or bound as a parameter
is decided by its node type, not guessed by the compiler::

    {"value": "John"}   # inline literal  -> name = 'John'
    {"param": "John"}   # bound parameter -> name = ?

Usage::

    from brickcql.schema.operands import ColumnOperand, OPERAND_ADAPTER

    node = OPERAND_ADAPTER.validate_python({"EQ": [{"col": "age"}, {"value": 27}]})
    assert isinstance(node.left, ColumnOperand)
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter, model_validator

from brickcql.schema.expressions import (
    COMPARISON_ALIASES,
    COMPARISON_KEYS,
    NULL_KEYS,
    ComparisonOp,
    CqlFunction,
    NullOp,
    OperandKind,
)

_FROZEN = ConfigDict(extra="forbid", frozen=True)


# ---------------------------------------------------------------------------
# Value-producing nodes
# ---------------------------------------------------------------------------


class ColumnOperand(BaseModel):
    """A column reference: ``{"col": "name"}`` or ``{"col": "u.name"}``."""

    model_config = _FROZEN

    col: str


class ValueOperand(BaseModel):
    """A literal written into the statement text: ``{"value": 42}``."""

    model_config = _FROZEN

    value: Any


class ParamOperand(BaseModel):
    """A value bound to a ``?`` placeholder: ``{"param": 42}``.

    A list value inside an ``IN`` relation is expanded into one placeholder
    per element.
    """

    model_config = _FROZEN

    param: Any


class FuncOperand(BaseModel):
    """A function call: ``{"func": "token", "args": [...]}``."""

    model_config = _FROZEN

    func: CqlFunction
    args: list[Operand] = Field(default_factory=list)


class CastOperand(BaseModel):
    """A type cast: ``{"cast": {"value": "x"}, "type": "timeuuid"}``."""

    model_config = _FROZEN

    cast: Operand
    type: str


class BlobOperand(BaseModel):
    """A blob conversion: ``{"as_blob": {"col": "data"}, "type": "text"}``.

    Renders as ``textAsBlob(data)``; the function is named after ``type``.
    """

    model_config = _FROZEN

    as_blob: Operand
    type: str


class FragmentOperand(BaseModel):
    """Raw CQL text with ``?`` argument slots.

    ``args`` are kept unparsed so the compiler can report an argument that
    is not a renderable expression.  A keyword-style fragment
    (``{"fragment": {"age": 20}}``) parses but cannot be rendered.
    """

    model_config = _FROZEN

    fragment: str | dict[str, Any]
    args: list[Any] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Relation nodes
# ---------------------------------------------------------------------------


class ComparisonPredicate(BaseModel):
    """A binary comparison: ``{"EQ": [left, right]}`` or ``{"==": [left, right]}``."""

    model_config = _FROZEN

    op: ComparisonOp
    left: Operand
    right: Operand

    @model_validator(mode="before")
    @classmethod
    def _from_operator_key(cls, data: Any) -> Any:
        """Accept the single-key plan form and normalise symbolic operators."""
        if isinstance(data, dict) and len(data) == 1:
            key = next(iter(data))
            if key in COMPARISON_KEYS:
                args = data[key]
                if not isinstance(args, (list, tuple)) or len(args) != 2:
                    raise ValueError(f"Comparison '{key}' takes exactly two operands.")
                return {"op": COMPARISON_ALIASES[key], "left": args[0], "right": args[1]}
        return data


class AndPredicate(BaseModel):
    """Conjunction: ``{"AND": [pred, pred, ...]}``."""

    model_config = _FROZEN

    AND: list[Operand] = Field(min_length=1)


class OrPredicate(BaseModel):
    """Disjunction: ``{"OR": [...]}``.  CQL has no OR; compiling it fails."""

    model_config = _FROZEN

    OR: list[Operand] = Field(min_length=1)


class NotPredicate(BaseModel):
    """Negation: ``{"NOT": pred}``.  CQL has no NOT; compiling it fails."""

    model_config = _FROZEN

    NOT: Operand


class InPredicate(BaseModel):
    """Membership: ``{"IN": [operand, v1, v2, ...]}``.

    An empty value list parses, so that the compiler can reject it with a
    relation error rather than a shape error.
    """

    model_config = _FROZEN

    IN: list[Operand] = Field(min_length=1)

    @property
    def operand(self) -> Operand:
        return self.IN[0]

    @property
    def values(self) -> list[Operand]:
        return self.IN[1:]


class NullCheckPredicate(BaseModel):
    """``{"IS_NULL": operand}`` / ``{"IS_NOT_NULL": operand}``.

    CQL has no IS NULL relation; compiling it fails.
    """

    model_config = _FROZEN

    operand: Operand
    negated: bool = False

    @model_validator(mode="before")
    @classmethod
    def _from_operator_key(cls, data: Any) -> Any:
        if isinstance(data, dict) and len(data) == 1:
            key = next(iter(data))
            if key in NULL_KEYS:
                return {"operand": data[key], "negated": key == NullOp.IS_NOT_NULL.value}
        return data


# ---------------------------------------------------------------------------
# Discriminated union
# ---------------------------------------------------------------------------

_KEY_TAGS: tuple[tuple[str, OperandKind], ...] = (
    ("col", OperandKind.COL),
    ("value", OperandKind.VALUE),
    ("param", OperandKind.PARAM),
    ("func", OperandKind.FUNC),
    ("cast", OperandKind.CAST),
    ("as_blob", OperandKind.BLOB),
    ("fragment", OperandKind.FRAGMENT),
    ("AND", OperandKind.AND),
    ("OR", OperandKind.OR),
    ("NOT", OperandKind.NOT),
    ("IN", OperandKind.IN),
    ("operand", OperandKind.NULL),
    ("op", OperandKind.CMP),
)

_MODEL_TAGS: tuple[tuple[type[BaseModel], OperandKind], ...] = (
    (ColumnOperand, OperandKind.COL),
    (ValueOperand, OperandKind.VALUE),
    (ParamOperand, OperandKind.PARAM),
    (FuncOperand, OperandKind.FUNC),
    (CastOperand, OperandKind.CAST),
    (BlobOperand, OperandKind.BLOB),
    (FragmentOperand, OperandKind.FRAGMENT),
    (ComparisonPredicate, OperandKind.CMP),
    (AndPredicate, OperandKind.AND),
    (OrPredicate, OperandKind.OR),
    (NotPredicate, OperandKind.NOT),
    (InPredicate, OperandKind.IN),
    (NullCheckPredicate, OperandKind.NULL),
)


def _operand_discriminator(v: Any) -> str | None:
    """Return the tag for the Pydantic discriminated union."""
    if isinstance(v, dict):
        for key, kind in _KEY_TAGS:
            if key in v:
                return kind.value
        if NULL_KEYS & v.keys():
            return OperandKind.NULL.value
        if COMPARISON_KEYS & v.keys():
            return OperandKind.CMP.value
        return None
    for model, kind in _MODEL_TAGS:
        if isinstance(v, model):
            return kind.value
    return None


Operand = Annotated[
    Annotated[ColumnOperand, Tag(OperandKind.COL.value)]
    | Annotated[ValueOperand, Tag(OperandKind.VALUE.value)]
    | Annotated[ParamOperand, Tag(OperandKind.PARAM.value)]
    | Annotated[FuncOperand, Tag(OperandKind.FUNC.value)]
    | Annotated[CastOperand, Tag(OperandKind.CAST.value)]
    | Annotated[BlobOperand, Tag(OperandKind.BLOB.value)]
    | Annotated[FragmentOperand, Tag(OperandKind.FRAGMENT.value)]
    | Annotated[ComparisonPredicate, Tag(OperandKind.CMP.value)]
    | Annotated[AndPredicate, Tag(OperandKind.AND.value)]
    | Annotated[OrPredicate, Tag(OperandKind.OR.value)]
    | Annotated[NotPredicate, Tag(OperandKind.NOT.value)]
    | Annotated[InPredicate, Tag(OperandKind.IN.value)]
    | Annotated[NullCheckPredicate, Tag(OperandKind.NULL.value)],
    Discriminator(_operand_discriminator),
]

#: Every concrete node class, for ``isinstance`` checks.
OPERAND_TYPES: tuple[type[BaseModel], ...] = tuple(model for model, _ in _MODEL_TAGS)

#: Relation nodes, rendered by the predicate builder.
PREDICATE_TYPES: tuple[type[BaseModel], ...] = (
    ComparisonPredicate,
    AndPredicate,
    OrPredicate,
    NotPredicate,
    InPredicate,
    NullCheckPredicate,
)

# Resolve forward references in recursive types.
FuncOperand.model_rebuild()
CastOperand.model_rebuild()
BlobOperand.model_rebuild()
ComparisonPredicate.model_rebuild()
AndPredicate.model_rebuild()
OrPredicate.model_rebuild()
NotPredicate.model_rebuild()
InPredicate.model_rebuild()
NullCheckPredicate.model_rebuild()

# ---------------------------------------------------------------------------
# TypeAdapter for parsing raw values (fragment arguments, row filters)
# ---------------------------------------------------------------------------

#: Parse a raw dict into a typed Operand at any call site.
OPERAND_ADAPTER: TypeAdapter[Operand] = TypeAdapter(Operand)


def to_operand(v: dict | Operand) -> Operand:
    """Convert a raw operand dict to a typed ``Operand``, or return as-is.

    Args:
        v: A raw ``{"col": ...}`` / ``{"value": ...}`` dict, or an already-
           typed ``Operand`` instance.

    Returns:
        A typed ``Operand`` instance.

    Raises:
        pydantic.ValidationError: If ``v`` is not a recognised node shape.
    """
    if isinstance(v, OPERAND_TYPES):
        return v
    return OPERAND_ADAPTER.validate_python(v)
