"""Project and completion-record schemas for API contracts."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from core.stageplan.models import PhaseCode

__all__ = [
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectResponse",
    "StageCompletionCreate",
    "StageCompletionResponse",
]


def _fold_case(v):
    # "Design " and "design" are the same code
    if isinstance(v, str):
        return v.strip().lower()
    return v


class ProjectCreate(BaseModel):
    """Request to create a new project."""

    project_no: str = Field(..., min_length=1, max_length=50, description="Case number, e.g. 20250001")
    name: str = Field(..., min_length=1, max_length=200)
    phase_code: PhaseCode = Field(default="waiting", description="waiting | design | build | finished")
    start_date: Optional[date] = None
    estimated_days: Optional[int] = Field(default=None, gt=0)

    @field_validator("phase_code", mode="before")
    @classmethod
    def _fold_phase_code(cls, v):
        return _fold_case(v)


class ProjectUpdate(BaseModel):
    """Partial update. Fields left out keep their value; ``null`` clears
    ``start_date`` / ``estimated_days``."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    phase_code: Optional[PhaseCode] = None
    start_date: Optional[date] = None
    estimated_days: Optional[int] = Field(default=None, gt=0)

    @field_validator("phase_code", mode="before")
    @classmethod
    def _fold_phase_code(cls, v):
        return _fold_case(v)


class ProjectResponse(BaseModel):
    """API response for a project."""

    id: str
    project_no: str
    name: str
    phase_code: str = "waiting"
    start_date: Optional[date] = None
    estimated_days: Optional[int] = None
    due_date: Optional[date] = None
    created_at: str
    updated_at: str


class StageCompletionCreate(BaseModel):
    """Reference to a submitted work product for one stage."""

    file_url: str = Field(..., min_length=1, max_length=2000)


class StageCompletionResponse(BaseModel):
    project_no: str
    stage_no: int
    file_url: str
    completed_at: str
