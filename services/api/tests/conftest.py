"""Shared fixtures for API integration tests.

Uses FastAPI TestClient (in-memory, no network) so tests run
without a live server or external dependencies.
"""

from __future__ import annotations

import os
import sys
from datetime import date

import pytest

# Ensure project root is on sys.path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# Force in-memory DB (no PostgreSQL needed for tests)
os.environ.pop("DATABASE_URL", None)
os.environ.pop("STAGEPLAN_TIMEZONE", None)
os.environ.pop("STAGEPLAN_WEIGHTS", None)

TODAY = date(2025, 3, 1)


@pytest.fixture(autouse=True)
def _reset_in_memory_db():
    """Clear in-memory stores and the stage catalog before each test."""
    from services.api.app import db
    from services.api.app.routers import stages

    db._mem_projects.clear()
    db._mem_completions.clear()
    db._mem_stage_names.clear()
    # Reset pool flag so each test starts fresh
    db._pool = None
    db._pool_init_done = False
    stages.stage_catalog.reload()
    yield


@pytest.fixture(autouse=True)
def _fixed_today(monkeypatch):
    """Pin "today" so lamp colours are deterministic."""
    from services.api.app.routers import stageplan

    monkeypatch.setattr(stageplan, "_today", lambda: TODAY)


@pytest.fixture()
def client():
    """FastAPI TestClient - no network, no server startup needed."""
    from fastapi.testclient import TestClient

    from services.api.app.main import app

    return TestClient(app)


@pytest.fixture()
def sample_project(client):
    """A design-phase project: 100 days from 2025-01-01. Returns its id."""
    resp = client.post(
        "/v1/projects",
        json={
            "project_no": "20250001",
            "name": "Riverside House",
            "phase_code": "design",
            "start_date": "2025-01-01",
            "estimated_days": 100,
        },
    )
    assert resp.status_code == 201
    return resp.json()["id"]
