"""Stage plan response schemas."""

from __future__ import annotations

from datetime import date
from typing import List, Literal

from pydantic import BaseModel, Field

__all__ = [
    "StageSchema",
    "PhaseStatusSchema",
    "StagePlanResponse",
    "StageCatalogResponse",
]


class StageSchema(BaseModel):
    number: int = Field(..., ge=1)
    name: str
    weight: float = Field(..., ge=0)


class PhaseStatusSchema(StageSchema):
    """One row of a stage plan."""

    days: int = Field(..., ge=1)
    planned_start: date
    planned_end: date
    flow_status: Literal["waiting", "doing", "completed"]
    lamp_status: Literal["none", "green", "orange", "red"]
    overdue_days: int = Field(default=0, ge=0)


class StagePlanResponse(BaseModel):
    project_id: str
    start_date: date
    total_days: int
    phase_code: str
    due_date: date
    plan_end: date
    timezone: str
    today: date
    stages: List[PhaseStatusSchema]


class StageCatalogResponse(BaseModel):
    timezone: str
    stages: List[StageSchema]
