"""Shared fixtures for the stage planning engine tests."""

from datetime import date

import pytest

from core.stageplan import (
    ProjectPlanRequest,
    StageDefinition,
    StagePlanConfig,
    build_catalog,
)


@pytest.fixture
def config():
    """Default configuration (Asia/Taipei, canonical weights)."""
    return StagePlanConfig()


@pytest.fixture
def catalog(config):
    """The default 8-stage catalog."""
    return build_catalog(config=config)


@pytest.fixture
def make_catalog():
    """Factory: catalog with stages 1..n and the given weights."""
    def _make(weights):
        return tuple(
            StageDefinition(number=i, name=f"Stage {i}", weight=w)
            for i, w in enumerate(weights, start=1)
        )
    return _make


@pytest.fixture
def plan_request():
    return ProjectPlanRequest(
        project_id="20250001",
        start_date="2025-01-01",
        total_days=100,
        overall_phase_code="design",
    )


@pytest.fixture
def today():
    return date(2025, 3, 1)
