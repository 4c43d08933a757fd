"""Stage catalog - names and weights for stages 1..8.

Names come from an external source (the ``project_text`` rows in the
database); anything missing falls back to the configured defaults. The
catalog is cached per process and can be reloaded; a reload builds the
new catalog first and then swaps the reference under a lock, so readers
only ever see a complete catalog.
"""

from __future__ import annotations

import logging
import math
import threading
from typing import Callable, Iterable, Mapping, Optional, Tuple

from .config import StagePlanConfig
from .errors import InvalidCatalog
from .models import StageDefinition

logger = logging.getLogger(__name__)

Catalog = Tuple[StageDefinition, ...]
NameLoader = Callable[[], Mapping[int, str]]


def build_catalog(
    names: Optional[Mapping[int, str]] = None,
    config: Optional[StagePlanConfig] = None,
) -> Catalog:
    """Merge external *names* over the configured defaults."""
    config = config or StagePlanConfig()
    names = names or {}
    stages = []
    for no in sorted(config.stage_weights):
        name = (names.get(no) or "").strip() or config.stage_names[no]
        stages.append(StageDefinition(number=no, name=name, weight=config.stage_weights[no]))
    return tuple(stages)


def validate_catalog(stages: Iterable[StageDefinition]) -> Catalog:
    """Check a catalog and return it sorted by stage number.

    Raises:
        InvalidCatalog: no stages, numbers other than 1..n exactly once,
            or a negative / non-finite weight.
    """
    ordered = tuple(sorted(stages, key=lambda s: s.number))
    if not ordered:
        raise InvalidCatalog("catalog has no stages")

    numbers = [s.number for s in ordered]
    expected = list(range(1, len(ordered) + 1))
    if numbers != expected:
        raise InvalidCatalog(f"stage numbers must be 1..{len(ordered)} exactly once, got {numbers}")

    for s in ordered:
        if not isinstance(s.weight, (int, float)) or not math.isfinite(s.weight) or s.weight < 0:
            raise InvalidCatalog(f"stage {s.number} has invalid weight {s.weight!r}")
    return ordered


class StageCatalog:
    """Read-through cache around a stage-name loader."""

    def __init__(
        self,
        loader: Optional[NameLoader] = None,
        config: Optional[StagePlanConfig] = None,
    ):
        self._loader = loader
        self.config = config or StagePlanConfig()
        self._stages: Optional[Catalog] = None
        self._lock = threading.Lock()

    def get(self) -> Catalog:
        """Return the cached catalog, loading it on first use."""
        stages = self._stages
        if stages is not None:
            return stages
        with self._lock:
            if self._stages is None:
                self._stages = self._load()
            return self._stages

    def reload(self) -> Catalog:
        """Re-read names from the loader and replace the cached catalog."""
        fresh = self._load()
        with self._lock:
            self._stages = fresh
        logger.info("Stage catalog reloaded (%d stages)", len(fresh))
        return fresh

    def _load(self) -> Catalog:
        names: Mapping[int, str] = {}
        if self._loader is not None:
            try:
                names = self._loader() or {}
            except Exception as e:
                logger.warning("Failed to load stage names: %s - using defaults", e)
                names = {}
        if not names:
            logger.info("No stage names available - using built-in defaults")
        return validate_catalog(build_catalog(names, self.config))
