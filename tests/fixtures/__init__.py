"""Test fixtures: sample CqlQuery plans as JSON."""

from __future__ import annotations

import json
from pathlib import Path

from brickcql.schema.query_plan import CqlQuery

_FIXTURES_DIR = Path(__file__).parent


def _plans() -> dict:
    return json.loads((_FIXTURES_DIR / "plans.json").read_text())


def load_plan_json(name: str) -> str:
    """Return the raw JSON text of one named plan from plans.json."""
    return json.dumps(_plans()[name])


def load_plan(name: str) -> CqlQuery:
    """Load one named plan from plans.json as a validated CqlQuery."""
    return CqlQuery.model_validate(_plans()[name])
