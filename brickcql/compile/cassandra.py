"""Cassandra (CQL) dialect rules.

``CassandraCompiler`` owns everything that is specific to the target
language rather than to a clause: the placeholder character, the
identifier rule, the function-name table, blob-conversion naming, and the
only query hint a SELECT may carry.
"""

from __future__ import annotations

import re

from brickcql.errors import BadIdentifierError
from brickcql.schema.expressions import FUNCTION_NAMES, CqlFunction

#: Unquoted CQL identifier: a letter or underscore, then letters, digits, underscores.
IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

#: The query hint accepted after a SELECT.  Anything else is a locking request.
FILTERING_HINT = "ALLOW FILTERING"


class CassandraCompiler:
    """Dialect object consulted by every builder.

    Parameter style: ``?`` – positional, compatible with the DataStax
    driver's prepared statements.  Identifiers are never quoted; names that
    would need quoting are rejected instead.
    """

    @property
    def dialect_name(self) -> str:
        return "cassandra"

    def param_placeholder(self) -> str:
        return "?"

    def identifier(self, name: str) -> str:
        """Return ``name`` unchanged if it is a valid column or type name.

        Raises:
            BadIdentifierError: If ``name`` does not match the identifier rule.
        """
        if not isinstance(name, str) or not IDENTIFIER_PATTERN.match(name):
            raise BadIdentifierError(str(name))
        return name

    def table_name(self, table: str, prefix: str | None = None) -> str:
        """Return ``table`` or ``prefix.table``, validating both parts.

        Raises:
            BadIdentifierError: With kind ``"table name"``.
        """
        parts = [prefix, table] if prefix else [table]
        for part in parts:
            if not isinstance(part, str) or not IDENTIFIER_PATTERN.match(part):
                raise BadIdentifierError(str(part), kind="table name")
        return ".".join(parts)

    def function_name(self, func: CqlFunction) -> str:
        return FUNCTION_NAMES[func]

    def blob_function_name(self, type_name: str) -> str:
        """``bigint`` -> ``bigintAsBlob``."""
        return f"{self.identifier(type_name)}AsBlob"

    def is_filtering_hint(self, hint: str) -> bool:
        return " ".join(hint.split()).upper() == FILTERING_HINT
