from __future__ import annotations

from copy import deepcopy
from pathlib import Path

import pytest

import caseflow.runtime_logging as runtime_logging
from caseflow.defaults import COST_SAVINGS_DEFAULTS, DEFAULTS, MARKET_DEFAULTS


@pytest.fixture(autouse=True)
def isolated_runtime_log(tmp_path, monkeypatch):
    monkeypatch.setattr(runtime_logging, "LOG_DIR", Path(tmp_path))
    monkeypatch.setattr(runtime_logging, "RUNTIME_EVENTS_LOG_FILE", Path(tmp_path) / "runtime_events.jsonl")


@pytest.fixture
def business_data() -> dict:
    return deepcopy(DEFAULTS)


@pytest.fixture
def cost_savings_data() -> dict:
    return deepcopy(COST_SAVINGS_DEFAULTS)


@pytest.fixture
def market_data() -> dict:
    return deepcopy(MARKET_DEFAULTS)


def _make_business(volume: dict, **overrides) -> dict:
    data = {
        "meta": {"title": "Test case", "business_model": "recurring", "currency": "EUR", "periods": 12},
        "assumptions": {
            "pricing": {"avg_unit_price": {"value": 100.0, "unit": "EUR", "rationale": ""}},
            "customers": {"churn_pct": 0.0, "segments": [{"id": "s1", "label": "S1", "volume": volume}]},
            "unit_economics": {"cogs_pct": 0.0, "cac": 0.0},
            "opex": [],
        },
    }
    for path, value in overrides.items():
        node = data
        parts = path.split("__")
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value
    return data


@pytest.fixture
def make_business():
    """Factory for a minimal one-segment recurring case built around a volume config.

    Keyword overrides address nested keys with double underscores, e.g.
    ``meta__periods=24``.
    """
    return _make_business
