"""Schedule builder - lay allocated stages end to end on the calendar."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Any, List, Sequence

from .errors import InvalidDuration, InvalidStartDate
from .models import AllocatedStage, ScheduledStage

_YMD = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_start_date(value: Any) -> date:
    """Coerce *value* to a ``date``.

    Accepts ``date``, ``datetime`` (its calendar date is used as-is) and
    strict ``YYYY-MM-DD`` strings.
    """
    if value is None or value == "":
        raise InvalidStartDate("start date is required")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not _YMD.match(text):
            raise InvalidStartDate(f"start date must be YYYY-MM-DD, got {value!r}")
        try:
            return date.fromisoformat(text)
        except ValueError as e:
            raise InvalidStartDate(f"not a calendar date: {value!r}") from e
    raise InvalidStartDate(f"unsupported start date type: {type(value).__name__}")


def layout(start_date: Any, stages: Sequence[AllocatedStage]) -> List[ScheduledStage]:
    """Place *stages* back to back from *start_date*, in stage-number order.

    Stage n starts the day after stage n-1 ends; both ends are inclusive,
    so ``planned_end = planned_start + days - 1``.
    """
    cursor = parse_start_date(start_date)
    scheduled: List[ScheduledStage] = []
    for stage in sorted(stages, key=lambda s: s.number):
        if stage.days < 1:
            raise InvalidDuration(f"stage {stage.number} has {stage.days} days")
        end = cursor + timedelta(days=stage.days - 1)
        scheduled.append(ScheduledStage(
            number=stage.number,
            name=stage.name,
            weight=stage.weight,
            days=stage.days,
            planned_start=cursor,
            planned_end=end,
        ))
        cursor = end + timedelta(days=1)
    return scheduled
