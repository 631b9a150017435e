from __future__ import annotations

import json

import pytest

from pte_core.timing import DEFAULT_TIMING, TimingConfig, merge_timing, parse_overrides


def build_timing(overrides: dict | None = None) -> TimingConfig:
    """Merge an override dict over the defaults the same way env JSON is applied."""

    if overrides is None:
        return DEFAULT_TIMING
    return merge_timing(DEFAULT_TIMING, parse_overrides(json.dumps(overrides)))


@pytest.fixture
def default_timing() -> TimingConfig:
    return DEFAULT_TIMING


@pytest.fixture
def api_client():
    from fastapi.testclient import TestClient

    from api.app import app

    return TestClient(app)
