"""Compilation context value object.

Packages the dialect configuration shared by ``StatementBuilder`` and all
clause- and expression-level sub-builders into a single object.
"""
from __future__ import annotations

from dataclasses import dataclass

from brickcql.compile.cassandra import CassandraCompiler


@dataclass(frozen=True)
class CompilationContext:
    """Immutable context for a single compilation run.

    Attributes:
        compiler: Dialect rules (placeholder, identifiers, function names).
    """

    compiler: CassandraCompiler
