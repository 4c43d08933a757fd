"""Excel export of a project's stage plan."""

from __future__ import annotations

import io
import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse

from src.excel.writer import StagePlanWriter

from .stageplan import plan_or_http_error

logger = logging.getLogger(__name__)
router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/projects/{project_id}/stage-plan/export")
async def export_stage_plan(
    project_id: str,
    start: Optional[str] = Query(default=None),
    days: Optional[int] = Query(default=None),
):
    """Download the stage plan as an .xlsx file."""
    plan = plan_or_http_error(project_id, start, days)
    content = StagePlanWriter(plan).to_bytes()
    logger.info("Exported stage plan for %s (%d bytes)", plan["project_id"], len(content))

    filename = f"stage_plan_{plan['project_id']}.xlsx"
    # RFC 5987 encoding for non-ASCII project numbers
    disposition = f"attachment; filename*=UTF-8''{quote(filename)}"

    return StreamingResponse(
        io.BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": disposition},
    )
