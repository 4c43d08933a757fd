"""Stage planning configuration.

Holds the process-wide defaults (time zone, stage names, stage weights)
as an explicit, injectable value. Nothing in the engine reads these from
a global; callers pass a ``StagePlanConfig`` (or rely on the defaults
constructed here).
"""

from __future__ import annotations

import math
import os
from datetime import date, datetime
from typing import Dict, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator

STAGE_COUNT = 8

DEFAULT_TIMEZONE = "Asia/Taipei"

# Display names, aligned with stage numbers 1..8
DEFAULT_STAGE_NAMES: Dict[int, str] = {
    1: "丈量",        # site survey
    2: "案例分析",    # case study
    3: "平面放樣",    # floor layout
    4: "平面圖",      # floor plan
    5: "平面系統圖",  # floor system plan
    6: "立面框體圖",  # elevation frame
    7: "立面圖",      # elevation
    8: "施工圖",      # construction drawings
}

# Share of the total duration per stage
DEFAULT_STAGE_WEIGHTS: Dict[int, float] = {
    1: 0.03,
    2: 0.05,
    3: 0.03,
    4: 0.10,
    5: 0.20,
    6: 0.15,
    7: 0.32,
    8: 0.12,
}


def _check_stage_keys(value: Mapping[int, object], label: str) -> None:
    expected = set(range(1, STAGE_COUNT + 1))
    keys = set(value.keys())
    if keys != expected:
        missing = sorted(expected - keys)
        extra = sorted(keys - expected)
        raise ValueError(
            f"{label} must cover stages 1..{STAGE_COUNT} exactly "
            f"(missing={missing}, unexpected={extra})"
        )


class StagePlanConfig(BaseModel):
    """Settings for the stage planning engine.

    Attributes:
        timezone:      IANA zone used for "today" and for every date
                       comparison (overdue checks never use server-local time).
        stage_names:   Fallback display names, used when the name source
                       has no row for a stage.
        stage_weights: Fraction of the total duration given to each stage.
    """

    model_config = ConfigDict(frozen=True)

    timezone: str = Field(
        default=DEFAULT_TIMEZONE,
        description="IANA time zone for date comparisons",
    )
    stage_names: Dict[int, str] = Field(
        default_factory=lambda: dict(DEFAULT_STAGE_NAMES),
    )
    stage_weights: Dict[int, float] = Field(
        default_factory=lambda: dict(DEFAULT_STAGE_WEIGHTS),
    )

    # -- validators ----------------------------------------------------------

    @field_validator("timezone")
    @classmethod
    def _known_zone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown time zone: {v!r}") from e
        return v

    @field_validator("stage_names")
    @classmethod
    def _names_cover_all_stages(cls, v: Dict[int, str]) -> Dict[int, str]:
        _check_stage_keys(v, "stage_names")
        for no, name in v.items():
            if not str(name).strip():
                raise ValueError(f"stage_names[{no}] is empty")
        return v

    @field_validator("stage_weights")
    @classmethod
    def _weights_cover_all_stages(cls, v: Dict[int, float]) -> Dict[int, float]:
        _check_stage_keys(v, "stage_weights")
        for no, weight in v.items():
            if not math.isfinite(weight) or weight < 0:
                raise ValueError(f"stage_weights[{no}] must be a non-negative number, got {weight!r}")
        return v

    # -- helpers -------------------------------------------------------------

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def today(self) -> date:
        """Current calendar date in the configured zone."""
        return datetime.now(self.tzinfo).date()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StagePlanConfig":
        """Build a config from ``STAGEPLAN_*`` environment variables.

        ``STAGEPLAN_TIMEZONE``  -- IANA zone name.
        ``STAGEPLAN_WEIGHTS``   -- eight comma-separated weights, stage 1 first.
        """
        env = os.environ if environ is None else environ
        kwargs: dict = {}

        tz = env.get("STAGEPLAN_TIMEZONE", "").strip()
        if tz:
            kwargs["timezone"] = tz

        raw_weights = env.get("STAGEPLAN_WEIGHTS", "").strip()
        if raw_weights:
            parts = [p.strip() for p in raw_weights.split(",")]
            if len(parts) != STAGE_COUNT:
                raise ValueError(
                    f"STAGEPLAN_WEIGHTS needs {STAGE_COUNT} values, got {len(parts)}"
                )
            kwargs["stage_weights"] = {i + 1: float(p) for i, p in enumerate(parts)}

        return cls(**kwargs)
