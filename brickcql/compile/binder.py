"""Literal rendering and positional parameter binding.

Every leaf value reaches the statement through :class:`ParamBinder`:
``{"value": ...}`` nodes are written inline by :func:`render_literal`,
``{"param": ...}`` nodes become a ``?`` marker and are appended to the
parameter list.  Placeholders are positional, so values are appended in the
order the builders emit text, left to right.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any
from uuid import UUID

from brickcql.errors import UnsupportedExpressionError


def render_literal(value: Any) -> str:
    """Render ``value`` as a CQL constant.

    Args:
        value: An already-cast Python value.

    Returns:
        The literal text, e.g. ``'it''s'``, ``TRUE``, ``98.2``.

    Raises:
        UnsupportedExpressionError: For ``None`` (CQL has no NULL literal in
            relations) and for types with no CQL constant form.
    """
    if value is None:
        raise UnsupportedExpressionError(
            "None cannot be written as a CQL literal; bind it with {\"param\": null} instead.",
            expression=value,
        )
    # bool before int: True is an int.
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return str(value)
    if isinstance(value, (int, Decimal)):
        return str(value)
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return f"0x{bytes(value).hex()}"
    # CQL timestamps stop at milliseconds.
    if isinstance(value, datetime):
        return _quote(value.isoformat(timespec="milliseconds"))
    if isinstance(value, (date, time)):
        return _quote(value.isoformat())
    raise UnsupportedExpressionError(
        f"No CQL literal form for {type(value).__name__} value {value!r}.",
        expression=value,
    )


def _quote(text: str) -> str:
    escaped = text.replace("'", "''")
    return f"'{escaped}'"


@dataclass
class ParamBinder:
    """Accumulates positional parameters during a single compilation run.

    A single instance is threaded through every sub-builder of one
    ``build()`` call and discarded afterwards.

    Attributes:
        placeholder: The dialect's positional marker.
        params: Bound values, in placeholder order.
    """

    placeholder: str = "?"
    params: list[Any] = field(default_factory=list)

    def bind(self, value: Any) -> str:
        """Store ``value`` and return the placeholder marker."""
        self.params.append(value)
        return self.placeholder

    def literal(self, value: Any) -> str:
        """Render ``value`` inline; nothing is bound."""
        return render_literal(value)
