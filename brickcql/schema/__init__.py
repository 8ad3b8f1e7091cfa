"""brickCQL schema models: CqlQuery, expression nodes, options."""
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
from brickcql.schema.query_plan import (
    CompileOptions,
    CqlQuery,
    IncAssignment,
    LimitClause,
    OrderByItem,
    SetAssignment,
    Source,
)

__all__ = [
    "NOW",
    "CqlFunction",
    "KeyKind",
    "Operation",
    "AndPredicate",
    "BlobOperand",
    "CastOperand",
    "ColumnOperand",
    "ComparisonPredicate",
    "FragmentOperand",
    "FuncOperand",
    "InPredicate",
    "NotPredicate",
    "NullCheckPredicate",
    "Operand",
    "OrPredicate",
    "ParamOperand",
    "ValueOperand",
    "CompileOptions",
    "CqlQuery",
    "IncAssignment",
    "LimitClause",
    "OrderByItem",
    "SetAssignment",
    "Source",
]
