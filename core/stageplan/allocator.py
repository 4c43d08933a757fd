"""Day allocator - split a total duration across weighted stages.

Each stage first gets ``round_half_up(total * weight)`` days. Naive
rounding rarely hits the total exactly, so the difference is corrected
largest-remainder style:

- short of the total: stages with the largest fractional part get +1
  (cycling through the list when the gap exceeds the stage count);
- over the total: stages with the smallest fractional part (larger
  allocations first on ties) give back 1 day per pass.

Afterwards every stage is lifted to at least one day, and any surplus
this creates is taken back from stages that still have more than one.
Totals smaller than the number of stages are rejected, so for every
accepted input the allocations sum to the total and are all >= 1.
"""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass
from typing import List, Sequence

from .catalog import validate_catalog
from .errors import InvalidDuration
from .models import AllocatedStage, StageDefinition

logger = logging.getLogger(__name__)

# Products like 100 * 0.15 carry float noise (15.000000000000002);
# rounding here keeps remainders comparable.
_EXACT_PRECISION = 9


@dataclass
class _Slot:
    stage: StageDefinition
    days: int
    frac: float


def round_half_up(value: float) -> int:
    """Round half away from zero (2.5 -> 3, -2.5 -> -3)."""
    sign = -1 if value < 0 else 1
    return sign * int(math.floor(abs(value) + 0.5))


def check_total_days(total_days) -> int:
    """Return *total_days* if it is a positive integer, else raise InvalidDuration."""
    if total_days is None:
        raise InvalidDuration("total_days is required")
    if isinstance(total_days, bool) or not isinstance(total_days, numbers.Integral):
        raise InvalidDuration(f"total_days must be an integer, got {total_days!r}")
    if total_days <= 0:
        raise InvalidDuration(f"total_days must be > 0, got {total_days}")
    return int(total_days)


def _by_smallest_remainder(slot: _Slot):
    return (slot.frac, -slot.days)


def allocate_days(total_days: int, stages: Sequence[StageDefinition]) -> List[AllocatedStage]:
    """Allocate *total_days* across *stages*, returned in stage-number order.

    Raises:
        InvalidCatalog: *stages* is empty or malformed.
        InvalidDuration: *total_days* is not a positive integer, or is
            smaller than the number of stages.
    """
    catalog = validate_catalog(stages)
    total = check_total_days(total_days)
    if total < len(catalog):
        raise InvalidDuration(
            f"total_days={total} cannot give each of {len(catalog)} stages at least one day"
        )

    slots: List[_Slot] = []
    for stage in catalog:
        exact = round(total * stage.weight, _EXACT_PRECISION)
        slots.append(_Slot(stage=stage, days=round_half_up(exact), frac=exact - math.floor(exact)))

    diff = total - sum(s.days for s in slots)
    if diff > 0:
        order = sorted(slots, key=lambda s: s.frac, reverse=True)
        for i in range(diff):
            order[i % len(order)].days += 1
    elif diff < 0:
        need = -diff
        while need > 0:
            for slot in sorted(slots, key=_by_smallest_remainder):
                if need > 0 and slot.days > 0:
                    slot.days -= 1
                    need -= 1

    for slot in slots:
        if slot.days <= 0:
            slot.days = 1

    # Lifting to the minimum may overshoot (zero or tiny weights)
    surplus = sum(s.days for s in slots) - total
    while surplus > 0:
        for slot in sorted(slots, key=_by_smallest_remainder):
            if surplus > 0 and slot.days > 1:
                slot.days -= 1
                surplus -= 1

    logger.debug("Allocated %d days: %s", total, [s.days for s in slots])
    return [
        AllocatedStage(number=s.stage.number, name=s.stage.name, weight=s.stage.weight, days=s.days)
        for s in slots
    ]
