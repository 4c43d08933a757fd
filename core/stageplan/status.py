"""Status classifier - flow status and overdue lamp per stage.

Flow status comes from the project's overall phase code, unless the
stage has a completion record, which always wins:

    waiting  -> waiting
    design   -> doing
    build    -> doing
    finished -> completed
    other    -> waiting

The lamp then follows from the flow status:

- waiting stages never light up;
- completed stages are green;
- doing stages light up only once the planned end has passed:
  orange from the day after the due date, red from 7 days overdue.

``today`` must already be the calendar date in the configured zone
(see ``StagePlanConfig.today``).
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from .models import (
    FLOW_COMPLETED,
    FLOW_DOING,
    FLOW_WAITING,
    LAMP_GREEN,
    LAMP_NONE,
    LAMP_ORANGE,
    LAMP_RED,
    FlowStatus,
    ScheduledStage,
    StageStatus,
)

RED_AFTER_DAYS = 7

PHASE_WAITING = "waiting"
PHASE_DESIGN = "design"
PHASE_BUILD = "build"
PHASE_FINISHED = "finished"

_BASE_FLOW: Dict[str, FlowStatus] = {
    PHASE_WAITING: FLOW_WAITING,
    PHASE_DESIGN: FLOW_DOING,
    PHASE_BUILD: FLOW_DOING,
    PHASE_FINISHED: FLOW_COMPLETED,
}


def normalize_phase_code(code: Any) -> Optional[str]:
    """Lower-case and trim a phase code; ``None`` for unknown codes."""
    if code is None:
        return None
    key = str(code).strip().lower()
    return key if key in _BASE_FLOW else None


def flow_status_for(overall_phase_code: Any, is_completed: bool) -> FlowStatus:
    if is_completed:
        return FLOW_COMPLETED
    return _BASE_FLOW.get(normalize_phase_code(overall_phase_code), FLOW_WAITING)


def lamp_for(flow_status: FlowStatus, planned_end: date, today: date) -> StageStatus:
    if flow_status == FLOW_WAITING:
        return StageStatus(FLOW_WAITING, LAMP_NONE, 0)
    if flow_status == FLOW_COMPLETED:
        return StageStatus(FLOW_COMPLETED, LAMP_GREEN, 0)

    overdue = (today - planned_end).days
    if overdue <= 0:
        # Due today or later
        return StageStatus(flow_status, LAMP_NONE, 0)
    lamp = LAMP_RED if overdue >= RED_AFTER_DAYS else LAMP_ORANGE
    return StageStatus(flow_status, lamp, overdue)


def classify(
    stage: ScheduledStage,
    is_completed: bool,
    overall_phase_code: Any,
    today: date,
) -> StageStatus:
    """Derive flow status, lamp colour and overdue days for one stage."""
    flow = flow_status_for(overall_phase_code, bool(is_completed))
    return lamp_for(flow, stage.planned_end, today)
