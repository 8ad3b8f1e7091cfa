"""brickCQL compilation layer: CqlQuery → parameterized CQL."""
from brickcql.compile.base import CompiledCQL
from brickcql.compile.binder import ParamBinder, render_literal
from brickcql.compile.builder import StatementBuilder
from brickcql.compile.cassandra import CassandraCompiler

__all__ = [
    "CompiledCQL",
    "ParamBinder",
    "render_literal",
    "StatementBuilder",
    "CassandraCompiler",
]
