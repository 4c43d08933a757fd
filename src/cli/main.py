"""CLI interface for the Stage Planner."""
import json
import logging
from typing import List, Optional

import typer

from core.stageplan import (
    ProjectPlanRequest,
    StageCatalog,
    StagePlanConfig,
    StagePlanError,
    build_plan,
    parse_start_date,
    project_due_date,
)

app = typer.Typer(help="Stage Planner - allocate project days across 8 stages")

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def _parse_completed(raw: str) -> List[int]:
    """Parse ``"1,2,5"`` into ``[1, 2, 5]``."""
    if not raw.strip():
        return []
    try:
        return sorted({int(p) for p in raw.split(",") if p.strip()})
    except ValueError:
        raise typer.BadParameter(f"expected comma-separated stage numbers, got {raw!r}")


def preview_plan(
    start: str,
    days: int,
    phase_code: str = "waiting",
    completed: Optional[List[int]] = None,
    today: Optional[str] = None,
    project_id: str = "preview",
    config: Optional[StagePlanConfig] = None,
) -> dict:
    """Build a plan payload without touching any store."""
    config = config or StagePlanConfig.from_env()
    catalog = StageCatalog(config=config).get()
    start_date = parse_start_date(start)
    as_of = parse_start_date(today) if today else config.today()

    request = ProjectPlanRequest(
        project_id=project_id,
        start_date=start_date,
        total_days=days,
        overall_phase_code=phase_code,
    )
    records = build_plan(request, catalog, completed or [], today=as_of)
    return {
        "project_id": project_id,
        "start_date": start_date.isoformat(),
        "total_days": days,
        "phase_code": phase_code,
        "due_date": project_due_date(start_date, days).isoformat(),
        "plan_end": records[-1].planned_end.isoformat(),
        "timezone": config.timezone,
        "today": as_of.isoformat(),
        "stages": [r.to_dict() for r in records],
    }


@app.command()
def preview(
    start: str = typer.Option(..., help="Start date (YYYY-MM-DD)"),
    days: int = typer.Option(..., help="Total estimated days"),
    phase_code: str = typer.Option("waiting", help="waiting | design | build | finished"),
    completed: str = typer.Option("", help="Completed stage numbers (comma-separated)"),
    today: Optional[str] = typer.Option(None, help="Evaluate lamps as of this date (YYYY-MM-DD)"),
    project_id: str = typer.Option("preview", help="Project number to show in the output"),
    xlsx: Optional[str] = typer.Option(None, help="Also write the plan to this .xlsx path"),
):
    """Print a stage plan as JSON."""
    try:
        plan = preview_plan(
            start, days, phase_code, _parse_completed(completed), today, project_id,
        )
    except StagePlanError as e:
        typer.echo(json.dumps(e.to_dict(), ensure_ascii=False), err=True)
        raise typer.Exit(code=2)

    typer.echo(json.dumps(plan, ensure_ascii=False, indent=2))

    if xlsx:
        from src.excel.writer import StagePlanWriter
        StagePlanWriter(plan).save(xlsx)
        typer.echo(f"✓ Workbook written to {xlsx}", err=True)


@app.command()
def stages():
    """List the default stage catalog."""
    config = StagePlanConfig.from_env()
    for s in StageCatalog(config=config).get():
        typer.echo(f"{s.number}  {s.weight:>5.2f}  {s.name}")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
