"""FastAPI application - Stage Planner API.

Serves stage plans (per-stage days, planned dates, flow status and
overdue lamp) for design/construction projects.
"""

from __future__ import annotations

import os
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import __version__

from .routers import export, projects, stageplan, stages

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Stage Planner API",
    version=__version__,
    description="Stage allocation, scheduling and overdue lamps for 8-stage projects",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------
ALLOWED_ORIGINS = os.environ.get(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:5173",
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in ALLOWED_ORIGINS],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=3600,
)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(projects.router, prefix="/v1", tags=["projects"])
app.include_router(stages.router, prefix="/v1", tags=["stages"])
app.include_router(stageplan.router, prefix="/v1", tags=["stage-plan"])
app.include_router(export.router, prefix="/v1", tags=["export"])


# ---------------------------------------------------------------------------
# Health Check
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return {"status": "ok", "version": __version__}


@app.get("/")
async def root():
    return {"message": "Stage Planner API", "docs": "/docs"}
