"""Tests for progress_insights/cli.py: the Progress Insights CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from progress_insights import __version__
from progress_insights.cli import app

runner = CliRunner()


@pytest.fixture
def log_file(tmp_path) -> Path:
    log = tmp_path / "sessions.json"
    log.write_text(json.dumps([
        {"student": "Aisha Okoro", "activity": "Line Follower Time Trial", "result": "33.0s"},
        {"student": "Ben Li", "activity": "Sumo Bot", "result": "Top 3"},
        {"student": "Aisha Okoro", "activity": "Line Follower Time Trial", "result": "38.2s"},
        {"student": "Ben Li", "activity": "Maze Solve", "result": "Completed"},
    ]), encoding="utf-8")
    return log


# ---------------------------------------------------------------------------
# version / demo / config
# ---------------------------------------------------------------------------


class TestBasics:
    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_demo(self):
        result = runner.invoke(app, ["demo", "--format", "markdown"])
        assert result.exit_code == 0
        assert "Aisha Okoro" in result.output
        assert "No sessions logged yet." in result.output

    def test_config_init_and_show(self, tmp_path):
        result = runner.invoke(app, ["config", "--init", "--repo", str(tmp_path)])
        assert result.exit_code == 0
        assert (tmp_path / "insights.toml").exists()
        shown = runner.invoke(app, ["config", "--repo", str(tmp_path)])
        assert shown.exit_code == 0
        assert "improvement_pct" in shown.output

    def test_bad_config_exits_1(self, tmp_path, log_file):
        (tmp_path / "insights.toml").write_text("[thresholds]\nmin_sessions = -1\n")
        result = runner.invoke(
            app, ["insight", "Ben Li", "--log", str(log_file), "--repo", str(tmp_path)]
        )
        assert result.exit_code == 1


# ---------------------------------------------------------------------------
# log
# ---------------------------------------------------------------------------


class TestLogCommand:
    def test_log_prepends_entry(self, log_file):
        result = runner.invoke(
            app,
            ["log", "Aisha Okoro", "Line Follower Time Trial", "30.1", "--log", str(log_file),
             "--note", "Tighter turns"],
        )
        assert result.exit_code == 0
        data = json.loads(log_file.read_text(encoding="utf-8"))
        assert len(data) == 5
        assert data[0]["result"] == "30.1s"
        assert data[0]["note"] == "Tighter turns"

    def test_log_status_unit(self, tmp_path):
        log = tmp_path / "new.json"
        result = runner.invoke(
            app, ["log", "Chloe Ahmed", "Maze Solve", "Completed", "--unit", "status", "--log", str(log)]
        )
        assert result.exit_code == 0
        assert json.loads(log.read_text(encoding="utf-8"))[0]["result"] == "Completed"
        assert "Not enough data" in result.output

    def test_log_dry_run(self, tmp_path):
        log = tmp_path / "new.json"
        result = runner.invoke(app, ["log", "A", "Maze Solve", "40", "--log", str(log), "--dry-run"])
        assert result.exit_code == 0
        assert not log.exists()

    def test_log_unknown_unit(self, tmp_path):
        result = runner.invoke(
            app, ["log", "A", "Maze", "5", "--unit", "minutes", "--log", str(tmp_path / "x.json")]
        )
        assert result.exit_code == 1

    def test_log_uses_repo_thresholds(self, log_file, tmp_path):
        repo = tmp_path / "club"
        repo.mkdir()
        (repo / "insights.toml").write_text("[thresholds]\nmin_sessions = 4\n", encoding="utf-8")
        result = runner.invoke(
            app,
            ["log", "Aisha Okoro", "Line Follower Time Trial", "30.1", "--log", str(log_file),
             "--repo", str(repo)],
        )
        assert result.exit_code == 0
        assert "Not enough data" in result.output
        assert "Log at least 4 sessions" in result.output

    def test_log_without_repo_uses_defaults(self, log_file):
        result = runner.invoke(
            app, ["log", "Aisha Okoro", "Line Follower Time Trial", "30.1", "--log", str(log_file)]
        )
        assert result.exit_code == 0
        assert "Improving" in result.output

    def test_log_bad_repo_config_exits_1(self, log_file, tmp_path):
        (tmp_path / "insights.toml").write_text("[thresholds]\nmin_sessions = 1\n")
        result = runner.invoke(
            app, ["log", "A", "Maze", "40", "--log", str(log_file), "--repo", str(tmp_path)]
        )
        assert result.exit_code == 1
        assert len(json.loads(log_file.read_text(encoding="utf-8"))) == 4


# ---------------------------------------------------------------------------
# insight / weekly / export
# ---------------------------------------------------------------------------


class TestInsightCommand:
    def test_improving(self, log_file):
        result = runner.invoke(app, ["insight", "Aisha Okoro", "--log", str(log_file)])
        assert result.exit_code == 0
        assert "Improving" in result.output

    def test_json(self, log_file):
        result = runner.invoke(app, ["insight", "Ben Li", "--log", str(log_file), "--json"])
        assert result.exit_code == 0
        assert "Consistent performer" in result.output

    def test_malformed_log_exits_1(self, tmp_path):
        log = tmp_path / "bad.json"
        log.write_text("{nope", encoding="utf-8")
        result = runner.invoke(app, ["insight", "Ben Li", "--log", str(log)])
        assert result.exit_code == 1


class TestWeeklyCommand:
    def test_markdown_to_file(self, log_file, tmp_path):
        out = tmp_path / "summary.md"
        result = runner.invoke(
            app,
            ["weekly", "--log", str(log_file), "--week-label", "Week 3",
             "--format", "markdown", "--output", str(out)],
        )
        assert result.exit_code == 0
        md = out.read_text(encoding="utf-8")
        assert md.startswith("# Week 3")
        assert "| Aisha Okoro | 2 | Improving |" in md

    def test_json_with_explicit_roster(self, log_file, tmp_path):
        out = tmp_path / "summary.json"
        result = runner.invoke(
            app,
            ["weekly", "--log", str(log_file), "-s", "Chloe Ahmed", "-s", "Ben Li",
             "--format", "json", "--output", str(out)],
        )
        assert result.exit_code == 0
        data = json.loads(out.read_text(encoding="utf-8"))
        assert [r["student"] for r in data["rows"]] == ["Chloe Ahmed", "Ben Li"]
        assert data["rows"][0]["entries_count"] == 0

    def test_table(self, log_file):
        result = runner.invoke(app, ["weekly", "--log", str(log_file), "--format", "table"])
        assert result.exit_code == 0
        assert "Ben Li" in result.output

    def test_unknown_format(self, log_file):
        result = runner.invoke(app, ["weekly", "--log", str(log_file), "--format", "pdf"])
        assert result.exit_code == 1


class TestExportCommand:
    def test_writes_all_formats(self, log_file, tmp_path):
        out_dir = tmp_path / "exports"
        result = runner.invoke(
            app, ["export", "--log", str(log_file), "--out-dir", str(out_dir), "--name", "week3"]
        )
        assert result.exit_code == 0
        assert (out_dir / "week3.json").exists()
        assert (out_dir / "week3.md").exists()
        assert (out_dir / "week3.html").exists()

    def test_bad_format_exits_1(self, log_file, tmp_path):
        result = runner.invoke(
            app, ["export", "--log", str(log_file), "--out-dir", str(tmp_path), "-f", "pdf"]
        )
        assert result.exit_code == 1
