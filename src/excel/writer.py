"""Excel writer for stage plans - one row per stage, lamp-coloured status."""
import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

logger = logging.getLogger(__name__)

SHEET_TITLE = "Stage Plan"

COLUMNS = [
    ("number", "No."),
    ("name", "Stage"),
    ("weight", "Weight"),
    ("days", "Days"),
    ("planned_start", "Planned start"),
    ("planned_end", "Planned end"),
    ("flow_status", "Flow"),
    ("lamp_status", "Lamp"),
    ("overdue_days", "Overdue days"),
]

# AARRGGBB, keyed by lamp status ("none" stays unfilled)
LAMP_FILLS = {
    "green": "FFC6EFCE",
    "orange": "FFFFD8A8",
    "red": "FFFFC7CE",
}

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(start_color="FFD9D9D9", end_color="FFD9D9D9", fill_type="solid")


class StagePlanWriter:
    """Renders a stage plan payload into a workbook.

    *plan* is the same dict the API returns: project fields plus a
    ``stages`` list of row dicts.
    """

    def __init__(self, plan: Dict[str, Any]):
        self.plan = plan
        self.wb: Optional[openpyxl.Workbook] = None

    def build(self) -> openpyxl.Workbook:
        self.wb = openpyxl.Workbook()
        ws = self.wb.active
        ws.title = SHEET_TITLE

        summary = [
            ("Project", self.plan.get("project_id", "")),
            ("Start date", _as_text(self.plan.get("start_date"))),
            ("Total days", self.plan.get("total_days")),
            ("Due date", _as_text(self.plan.get("due_date"))),
            ("Phase", self.plan.get("phase_code", "")),
        ]
        for i, (label, value) in enumerate(summary, start=1):
            ws.cell(row=i, column=1, value=label).font = HEADER_FONT
            ws.cell(row=i, column=2, value=value)

        header_row = len(summary) + 2
        for col, (_key, title) in enumerate(COLUMNS, start=1):
            cell = ws.cell(row=header_row, column=col, value=title)
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.alignment = Alignment(horizontal="center")

        lamp_col = [k for k, _ in COLUMNS].index("lamp_status") + 1
        stages: List[Dict[str, Any]] = self.plan.get("stages", [])
        for r, stage in enumerate(stages, start=header_row + 1):
            for col, (key, _title) in enumerate(COLUMNS, start=1):
                ws.cell(row=r, column=col, value=_as_text(stage.get(key)))
            color = LAMP_FILLS.get(stage.get("lamp_status"))
            if color:
                ws.cell(row=r, column=lamp_col).fill = PatternFill(
                    start_color=color, end_color=color, fill_type="solid",
                )

        for col, (key, title) in enumerate(COLUMNS, start=1):
            width = max([len(title)] + [len(str(_as_text(s.get(key)))) for s in stages])
            ws.column_dimensions[get_column_letter(col)].width = width + 4

        ws.freeze_panes = ws.cell(row=header_row + 1, column=1)
        return self.wb

    def save(self, output: Union[str, Path, io.BytesIO]) -> None:
        wb = self.build()
        if isinstance(output, (str, Path)):
            Path(output).parent.mkdir(parents=True, exist_ok=True)
            wb.save(str(output))
            logger.info("Stage plan saved to %s", output)
        else:
            wb.save(output)

    def to_bytes(self) -> bytes:
        buf = io.BytesIO()
        self.save(buf)
        return buf.getvalue()


def _as_text(value: Any) -> Any:
    """Dates become ISO strings; everything else passes through."""
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value
