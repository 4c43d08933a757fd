"""Value types flowing through the stage planning pipeline.

Each step enriches the previous one:

  StageDefinition -> AllocatedStage -> ScheduledStage -> PhaseStatusRecord

All of them are immutable and computed fresh per request.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, Literal

FlowStatus = Literal["waiting", "doing", "completed"]
LampStatus = Literal["none", "green", "orange", "red"]
PhaseCode = Literal["waiting", "design", "build", "finished"]

FLOW_WAITING: FlowStatus = "waiting"
FLOW_DOING: FlowStatus = "doing"
FLOW_COMPLETED: FlowStatus = "completed"

LAMP_NONE: LampStatus = "none"
LAMP_GREEN: LampStatus = "green"
LAMP_ORANGE: LampStatus = "orange"
LAMP_RED: LampStatus = "red"


@dataclass(frozen=True)
class StageDefinition:
    """One entry of the stage catalog."""

    number: int
    name: str
    weight: float


@dataclass(frozen=True)
class AllocatedStage:
    """A stage with its share of the total duration, in whole days."""

    number: int
    name: str
    weight: float
    days: int


@dataclass(frozen=True)
class ScheduledStage:
    """An allocated stage placed on the calendar (both ends inclusive)."""

    number: int
    name: str
    weight: float
    days: int
    planned_start: date
    planned_end: date


@dataclass(frozen=True)
class StageStatus:
    flow_status: FlowStatus
    lamp_status: LampStatus
    overdue_days: int = 0


@dataclass(frozen=True)
class PhaseStatusRecord:
    """Final output row of a stage plan."""

    number: int
    name: str
    weight: float
    days: int
    planned_start: date
    planned_end: date
    flow_status: FlowStatus
    lamp_status: LampStatus
    overdue_days: int

    @classmethod
    def from_parts(cls, stage: ScheduledStage, status: StageStatus) -> "PhaseStatusRecord":
        return cls(
            **asdict(stage),
            flow_status=status.flow_status,
            lamp_status=status.lamp_status,
            overdue_days=status.overdue_days,
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly dict (dates as ``YYYY-MM-DD``)."""
        d = asdict(self)
        d["planned_start"] = self.planned_start.isoformat()
        d["planned_end"] = self.planned_end.isoformat()
        return d


@dataclass(frozen=True)
class ProjectPlanRequest:
    """Caller-supplied inputs for one plan.

    ``start_date`` may be a ``date`` or a ``YYYY-MM-DD`` string; it is
    validated by the schedule builder.
    """

    project_id: str
    start_date: Any
    total_days: int
    overall_phase_code: str = "waiting"
