"""Tests for src.cli.main -- the preview command."""

import json

import openpyxl
from typer.testing import CliRunner

from src.cli.main import app, preview_plan

runner = CliRunner()


class TestPreviewPlan:
    def test_payload(self):
        plan = preview_plan("2025-01-01", 100, "design", [1], today="2025-03-01")
        assert plan["start_date"] == "2025-01-01"
        assert plan["due_date"] == "2025-04-11"
        assert plan["plan_end"] == "2025-04-10"
        assert plan["today"] == "2025-03-01"
        assert [s["days"] for s in plan["stages"]] == [3, 5, 3, 10, 20, 15, 32, 12]
        assert plan["stages"][0]["lamp_status"] == "green"
        assert plan["stages"][1]["lamp_status"] == "red"


class TestPreviewCommand:
    def test_prints_json(self):
        result = runner.invoke(app, [
            "preview", "--start", "2025-01-01", "--days", "100",
            "--phase-code", "build", "--today", "2025-01-04",
        ])
        assert result.exit_code == 0, result.output
        plan = json.loads(result.stdout)
        assert plan["total_days"] == 100
        assert plan["stages"][0]["lamp_status"] == "orange"
        assert plan["stages"][0]["overdue_days"] == 1

    def test_completed_option(self):
        result = runner.invoke(app, [
            "preview", "--start", "2025-01-01", "--days", "100",
            "--phase-code", "design", "--completed", "1,2", "--today", "2025-03-01",
        ])
        assert result.exit_code == 0, result.output
        stages = json.loads(result.stdout)["stages"]
        assert [s["flow_status"] for s in stages[:3]] == ["completed", "completed", "doing"]

    def test_invalid_duration_exits_2(self):
        result = runner.invoke(app, ["preview", "--start", "2025-01-01", "--days", "5"])
        assert result.exit_code == 2
        assert "INVALID_DURATION" in result.output

    def test_invalid_start_exits_2(self):
        result = runner.invoke(app, ["preview", "--start", "2025-02-30", "--days", "100"])
        assert result.exit_code == 2
        assert "INVALID_START_DATE" in result.output

    def test_writes_xlsx(self, tmp_path):
        out = tmp_path / "plan.xlsx"
        result = runner.invoke(app, [
            "preview", "--start", "2025-01-01", "--days", "100", "--xlsx", str(out),
        ])
        assert result.exit_code == 0, result.output
        assert openpyxl.load_workbook(out).sheetnames == ["Stage Plan"]


def test_stages_command_lists_catalog():
    result = runner.invoke(app, ["stages"])
    assert result.exit_code == 0
    assert len(result.stdout.strip().splitlines()) == 8
