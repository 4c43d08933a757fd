"""Stage plan endpoint - per-stage days, dates and status for one project."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from core.stageplan import (
    MissingProjectReference,
    ProjectPlanRequest,
    StagePlanError,
    build_plan,
    parse_start_date,
    project_due_date,
)
from shared.schemas.stageplan import StagePlanResponse

from .. import db
from .stages import plan_config, stage_catalog

logger = logging.getLogger(__name__)
router = APIRouter()


def _today() -> date:
    return plan_config.today()


def resolve_plan(project_id: str, start: Optional[str] = None, days: Optional[int] = None) -> dict:
    """Look up the project, apply overrides and build the plan payload.

    Raises StagePlanError subclasses for anything the caller sent wrong.
    """
    ref = db.get_project_reference(project_id)
    if not ref or not ref.get("project_no"):
        raise MissingProjectReference(f"project {project_id!r} not found")

    # Query parameters override the stored values (ad-hoc previews)
    start_date = parse_start_date(start if start is not None else ref.get("start_date"))
    total_days = days if days is not None else ref.get("estimated_days")
    phase_code = ref.get("phase_code") or "waiting"

    request = ProjectPlanRequest(
        project_id=ref["project_no"],
        start_date=start_date,
        total_days=total_days,
        overall_phase_code=phase_code,
    )
    completed = db.get_completed_stage_numbers(ref["project_no"])
    today = _today()
    records = build_plan(request, stage_catalog.get(), completed, today=today)

    logger.info(
        "Stage plan for %s: start=%s days=%s phase=%s completed=%s",
        ref["project_no"], start_date, total_days, phase_code, sorted(completed),
    )
    return {
        "project_id": ref["project_no"],
        "start_date": start_date,
        "total_days": total_days,
        "phase_code": phase_code,
        "due_date": project_due_date(start_date, total_days),
        "plan_end": records[-1].planned_end,
        "timezone": plan_config.timezone,
        "today": today,
        "stages": [r.to_dict() for r in records],
    }


def plan_or_http_error(project_id: str, start: Optional[str], days: Optional[int]) -> dict:
    """``resolve_plan`` with errors translated to HTTP responses."""
    try:
        return resolve_plan(project_id, start, days)
    except MissingProjectReference as e:
        raise HTTPException(status_code=404, detail=e.to_dict())
    except StagePlanError as e:
        logger.info("Rejected stage plan request for %s: %s", project_id, e.detail)
        raise HTTPException(status_code=400, detail=e.to_dict())
    except Exception:
        logger.exception("Stage plan failed for project %s", project_id)
        raise HTTPException(
            status_code=500,
            detail={"code": "INTERNAL_ERROR", "message": "server error"},
        )


@router.get("/projects/{project_id}/stage-plan", response_model=StagePlanResponse)
async def get_stage_plan(
    project_id: str,
    start: Optional[str] = Query(default=None, description="Override start date (YYYY-MM-DD)"),
    days: Optional[int] = Query(default=None, description="Override total days"),
):
    """Per-stage allocation, planned dates, flow status and lamp."""
    return plan_or_http_error(project_id, start, days)
