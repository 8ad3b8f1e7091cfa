"""Shared pytest fixtures for brickCQL unit tests."""
from __future__ import annotations

import pytest

from brickcql.compile.builder import StatementBuilder


@pytest.fixture(scope="session")
def builder() -> StatementBuilder:
    """One builder for the whole session; it holds no per-statement state."""
    return StatementBuilder()
