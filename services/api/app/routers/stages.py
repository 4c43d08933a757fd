"""Stage catalog endpoints and the shared catalog cache."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from core.stageplan import StageCatalog, StagePlanConfig
from shared.schemas.stageplan import StageCatalogResponse

from .. import db

logger = logging.getLogger(__name__)
router = APIRouter()

plan_config = StagePlanConfig.from_env()
stage_catalog = StageCatalog(loader=db.load_stage_names, config=plan_config)


def _catalog_response() -> dict:
    return {
        "timezone": plan_config.timezone,
        "stages": [
            {"number": s.number, "name": s.name, "weight": s.weight}
            for s in stage_catalog.get()
        ],
    }


@router.get("/stages", response_model=StageCatalogResponse)
async def list_stages():
    """List stage names and weights currently in use."""
    return _catalog_response()


@router.post("/stages/reload", response_model=StageCatalogResponse)
async def reload_stages():
    """Re-read stage names from the database and swap the cached catalog."""
    stage_catalog.reload()
    return _catalog_response()
