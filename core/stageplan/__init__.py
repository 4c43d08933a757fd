"""Stage planning engine.

Splits a project's estimated duration across its 8 stages, lays the
stages out on the calendar, and classifies each stage's flow status and
overdue lamp.
"""

from .allocator import allocate_days, round_half_up
from .catalog import StageCatalog, build_catalog, validate_catalog
from .config import (
    DEFAULT_STAGE_NAMES,
    DEFAULT_STAGE_WEIGHTS,
    DEFAULT_TIMEZONE,
    STAGE_COUNT,
    StagePlanConfig,
)
from .errors import (
    InvalidCatalog,
    InvalidDuration,
    InvalidStartDate,
    MissingProjectReference,
    StagePlanError,
)
from .models import (
    AllocatedStage,
    PhaseStatusRecord,
    ProjectPlanRequest,
    ScheduledStage,
    StageDefinition,
    StageStatus,
)
from .planner import build_plan, project_due_date
from .schedule import layout, parse_start_date
from .status import classify, normalize_phase_code

__all__ = [
    "allocate_days",
    "round_half_up",
    "StageCatalog",
    "build_catalog",
    "validate_catalog",
    "DEFAULT_STAGE_NAMES",
    "DEFAULT_STAGE_WEIGHTS",
    "DEFAULT_TIMEZONE",
    "STAGE_COUNT",
    "StagePlanConfig",
    "InvalidCatalog",
    "InvalidDuration",
    "InvalidStartDate",
    "MissingProjectReference",
    "StagePlanError",
    "AllocatedStage",
    "PhaseStatusRecord",
    "ProjectPlanRequest",
    "ScheduledStage",
    "StageDefinition",
    "StageStatus",
    "build_plan",
    "project_due_date",
    "layout",
    "parse_start_date",
    "classify",
    "normalize_phase_code",
]
