"""Project and stage-completion record endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from core.stageplan import STAGE_COUNT
from shared.schemas.projects import (
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
    StageCompletionCreate,
    StageCompletionResponse,
)

from .. import db

logger = logging.getLogger(__name__)
router = APIRouter()

# Phases whose plan needs a start date and a duration
_SCHEDULED_PHASES = ("design", "build")


def _get_project_or_404(project_id: str) -> dict:
    project = db.get_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail={"code": "PROJECT_NOT_FOUND"})
    return project


def _check_stage_no(stage_no: int) -> None:
    if not 1 <= stage_no <= STAGE_COUNT:
        raise HTTPException(
            status_code=400,
            detail={"code": "INVALID_STAGE", "message": f"stage_no must be 1..{STAGE_COUNT}"},
        )


@router.post("/projects", status_code=201, response_model=ProjectResponse)
async def create_project(body: ProjectCreate):
    """Create a new project."""
    try:
        return db.create_project(
            project_no=body.project_no,
            name=body.name,
            phase_code=body.phase_code,
            start_date=body.start_date,
            estimated_days=body.estimated_days,
        )
    except db.ProjectNoTaken as e:
        raise HTTPException(
            status_code=409,
            detail={"code": "PROJECT_NO_TAKEN", "message": str(e)},
        )


@router.get("/projects", response_model=list[ProjectResponse])
async def list_projects():
    """List all projects."""
    return db.list_projects()


@router.get("/projects/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: str):
    """Get project by ID."""
    return _get_project_or_404(project_id)


@router.patch("/projects/{project_id}", response_model=ProjectResponse)
async def update_project(project_id: str, body: ProjectUpdate):
    """Update name, phase code, start date or estimated days."""
    project = _get_project_or_404(project_id)

    changes = body.model_dump(exclude_unset=True)
    for key in ("name", "phase_code"):
        if key in changes and changes[key] is None:
            del changes[key]
    if not changes:
        return project

    merged = {**project, **changes}
    if merged["phase_code"] in _SCHEDULED_PHASES:
        if not merged.get("start_date"):
            raise HTTPException(
                status_code=400,
                detail={"code": "REQUIRE_START_DATE",
                        "message": "start_date is required while the project is in design or build"},
            )
        if not merged.get("estimated_days"):
            raise HTTPException(
                status_code=400,
                detail={"code": "REQUIRE_ESTIMATED_DAYS",
                        "message": "estimated_days is required while the project is in design or build"},
            )

    updated = db.update_project(project_id, **changes)
    if not updated:
        raise HTTPException(status_code=404, detail={"code": "PROJECT_NOT_FOUND"})
    logger.info("Updated project %s: %s", project["project_no"], sorted(changes))
    return updated


@router.delete("/projects/{project_id}")
async def delete_project(project_id: str):
    """Delete a project and its completion records."""
    project = _get_project_or_404(project_id)
    db.delete_project(project_id)
    logger.info("Deleted project %s", project["project_no"])
    return {"status": "deleted", "project_id": project_id}


@router.put(
    "/projects/{project_id}/stages/{stage_no}/completion",
    response_model=StageCompletionResponse,
)
async def record_completion(project_id: str, stage_no: int, body: StageCompletionCreate):
    """Record (or replace) the completion artifact for one stage."""
    project = _get_project_or_404(project_id)
    _check_stage_no(stage_no)
    return db.record_stage_completion(project["project_no"], stage_no, body.file_url)


@router.get(
    "/projects/{project_id}/stages/{stage_no}/completion",
    response_model=StageCompletionResponse,
)
async def get_completion(project_id: str, stage_no: int):
    """Latest completion artifact for one stage."""
    project = _get_project_or_404(project_id)
    _check_stage_no(stage_no)
    completion = db.get_stage_completion(project["project_no"], stage_no)
    if not completion:
        raise HTTPException(status_code=404, detail={"code": "COMPLETION_NOT_FOUND"})
    return completion
