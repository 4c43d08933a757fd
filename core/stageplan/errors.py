"""Error taxonomy for the stage planning engine.

Every error carries a machine-readable ``kind`` and a descriptive
``detail``. Translating them into user-facing text is the caller's job.
"""

from __future__ import annotations


class StagePlanError(Exception):
    """Base class for all stage planning failures."""

    kind: str = "STAGE_PLAN_ERROR"

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.kind)
        self.detail = detail

    def to_dict(self) -> dict:
        return {"code": self.kind, "message": self.detail}


class InvalidDuration(StagePlanError):
    """Total duration missing, not an integer, or too small."""

    kind = "INVALID_DURATION"


class InvalidStartDate(StagePlanError):
    """Start date missing or not a valid calendar date."""

    kind = "INVALID_START_DATE"


class InvalidCatalog(StagePlanError):
    """Stage catalog empty or malformed."""

    kind = "INVALID_CATALOG"


class MissingProjectReference(StagePlanError):
    """Project could not be resolved to a phase code, start date and duration."""

    kind = "MISSING_PROJECT_REFERENCE"
