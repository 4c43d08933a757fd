"""Plan orchestrator - allocation, layout and classification in one call."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Iterable, List, Optional, Sequence

from .allocator import allocate_days, check_total_days
from .config import StagePlanConfig
from .errors import MissingProjectReference
from .models import PhaseStatusRecord, ProjectPlanRequest, StageDefinition
from .schedule import layout, parse_start_date
from .status import classify

logger = logging.getLogger(__name__)


def build_plan(
    request: ProjectPlanRequest,
    catalog: Sequence[StageDefinition],
    completed: Iterable[int] = (),
    *,
    today: Optional[date] = None,
    config: Optional[StagePlanConfig] = None,
) -> List[PhaseStatusRecord]:
    """Build the per-stage plan for one project.

    Args:
        request:   Project identity, start date, total days and phase code.
        catalog:   Stage definitions (usually ``StageCatalog.get()``).
        completed: Stage numbers with a completion record. Copied into a
                   snapshot before use.
        today:     Calendar date to evaluate overdue lamps against.
                   Defaults to today in ``config.timezone``.
        config:    Only consulted when *today* is not given.

    Returns:
        One ``PhaseStatusRecord`` per stage, in stage-number order.

    Any validation error from a sub-step propagates unchanged.
    """
    if not request.project_id:
        raise MissingProjectReference("project_id is required")

    done = frozenset(int(n) for n in completed)
    if today is None:
        today = (config or StagePlanConfig()).today()

    allocated = allocate_days(request.total_days, catalog)
    scheduled = layout(request.start_date, allocated)

    records = [
        PhaseStatusRecord.from_parts(
            stage,
            classify(stage, stage.number in done, request.overall_phase_code, today),
        )
        for stage in scheduled
    ]
    logger.debug(
        "Built plan for project %s: %d stages, %d completed",
        request.project_id, len(records), len(done),
    )
    return records


def project_due_date(start_date: Any, total_days: int) -> date:
    """Project-level due date: *start_date* plus *total_days* calendar days."""
    return parse_start_date(start_date) + timedelta(days=check_total_days(total_days))
