"""The compiled-statement value object returned by every compilation."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class CompiledCQL:
    """The output of a successful compilation.

    Attributes:
        cql: The compiled statement with positional ``?`` placeholders.
        params: Values for the placeholders, in left-to-right order.
            Literals written inline with ``{"value": ...}`` are not included.
        options: Read-only copy of the caller's options.
    """

    cql: str
    params: tuple[Any, ...] = ()
    options: Mapping[str, Any] = field(default_factory=dict)
