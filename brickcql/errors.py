"""Custom exception hierarchy for brickCQL.

All public errors inherit from BrickCQLError so callers can catch the base
class for any brickCQL-specific failure.  Every compilation failure aborts
the whole statement; no partial CQL is ever returned.
"""
from __future__ import annotations

from typing import Any


class BrickCQLError(Exception):
    """Base exception for all brickCQL errors."""


class ParseError(BrickCQLError):
    """Raised when input cannot be parsed as valid CqlQuery JSON.

    Args:
        message: Human-readable description.
        raw: The raw string that failed to parse.
    """

    def __init__(self, message: str, raw: str | None = None) -> None:
        super().__init__(message)
        self.raw = raw


class CompilationError(BrickCQLError):
    """Raised when a query cannot be compiled to CQL.

    Args:
        message: Human-readable description.
        clause: The query clause being compiled when the error occurred.
        code: Machine-readable error code.
        details: Extra context for the caller's error report.
    """

    def __init__(
        self,
        message: str,
        clause: str | None = None,
        code: str = "COMPILATION_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.clause = clause
        self.code = code
        self.details: dict[str, Any] = details or {}

    def to_error_response(self) -> dict[str, Any]:
        """Returns a structured error response for the query-builder layer."""
        return {
            "error": self.code,
            "message": str(self),
            "clause": self.clause,
            "details": self.details,
        }


class UnsupportedRelationError(CompilationError):
    """Raised for relations CQL cannot express: OR, NOT, IS NULL, NOT IN."""

    def __init__(self, relation: str, clause: str | None = None) -> None:
        super().__init__(
            f"CQL does not support {relation} relation.",
            clause=clause,
            code="UNSUPPORTED_RELATION",
            details={"relation": relation},
        )
        self.relation = relation


class UnsupportedLockingError(CompilationError):
    """Raised when a row-locking hint such as ``FOR UPDATE`` is requested."""

    def __init__(self, hint: str) -> None:
        super().__init__(
            f"CQL does not support locking: {hint!r}. "
            "Only the ALLOW FILTERING hint may be appended to a SELECT.",
            clause="LOCK",
            code="UNSUPPORTED_LOCKING",
            details={"hint": hint},
        )
        self.hint = hint


class UnsupportedExpressionError(CompilationError):
    """Raised when a value or fragment argument has no CQL rendering.

    Args:
        message: Human-readable description.
        expression: The offending value or node.
    """

    def __init__(self, message: str, expression: Any = None) -> None:
        super().__init__(
            message,
            code="UNSUPPORTED_EXPRESSION",
            details={"expression": repr(expression)},
        )
        self.expression = expression


class BadIdentifierError(CompilationError, ValueError):
    """Raised when a column, table, keyspace or type name is malformed.

    Args:
        name: The rejected identifier.
        kind: ``"identifier"`` for columns and types, ``"table name"`` for
            table and keyspace names.
    """

    def __init__(self, name: str, kind: str = "identifier") -> None:
        super().__init__(
            f"bad {kind}: {name!r}",
            code="BAD_IDENTIFIER",
            details={"name": name, "kind": kind},
        )
        self.name = name
        self.kind = kind
