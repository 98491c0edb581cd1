"""Command-line interface for Progress Insights."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .classifier import TrendLabel, classify
from .config import ConfigError, InsightsConfig, load_config, save_default_config
from .demo import DEMO_ROSTER, demo_records
from .exporter import FORMATS, export_summary
from .records import SessionRecord
from .session_log import (
    DEFAULT_LOG_FILENAME,
    SessionLogError,
    append_record,
    format_result,
    load_records,
    roster_from_records,
)
from .weekly import WeeklySummary, build_weekly_summary

app = typer.Typer(
    name="progress-insights",
    help="Progress Insights -- explainable trend insights for logged sessions.",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

_LABEL_STYLE = {
    TrendLabel.IMPROVING: "green",
    TrendLabel.NEEDS_PRACTICE: "yellow",
    TrendLabel.CONSISTENT_PERFORMER: "blue",
    TrendLabel.NOT_ENOUGH_DATA: "dim",
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fail(msg: str) -> None:
    err_console.print(f"[red]{msg}[/red]")
    raise typer.Exit(1)


def _config(repo: Optional[str]) -> InsightsConfig:
    path = Path(repo) if repo else None
    if path is not None and not path.exists():
        _fail(f"Path not found: {path}")
    try:
        return load_config(path)
    except ConfigError as exc:
        _fail(f"Invalid config: {exc}")


def _records(log: str):
    try:
        return load_records(Path(log))
    except SessionLogError as exc:
        _fail(str(exc))


def _summary_table(summary: WeeklySummary) -> Table:
    t = Table("Student", "Entries", "Trend", "Why", "Highlight", title=summary.week_label)
    for row in summary.rows:
        style = _LABEL_STYLE[row.insight.label]
        t.add_row(
            row.student,
            str(row.entries_count),
            f"[{style}]{row.insight.label.value}[/{style}]",
            row.insight.reason,
            row.highlight,
        )
    return t


def _emit(summary: WeeklySummary, fmt: str, output: Optional[str]) -> None:
    if fmt == "json":
        rendered = summary.to_json()
    elif fmt == "markdown":
        rendered = summary.to_markdown()
    elif fmt == "table":
        if output:
            _fail("Table output cannot be written to a file; use markdown or json")
        console.print(_summary_table(summary))
        return
    else:
        _fail(f"Unknown format: {fmt} (markdown | json | table)")
    if output:
        Path(output).write_text(rendered, encoding="utf-8")
        console.print(f"[green]Summary written to {output}[/green]")
    elif fmt == "json":
        console.print_json(rendered)
    else:
        console.print(rendered, markup=False)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------


@app.command()
def version() -> None:
    """Print the Progress Insights version."""
    console.print(f"progress-insights {__version__}")


# ---------------------------------------------------------------------------
# Session log
# ---------------------------------------------------------------------------


@app.command(name="log")
def log_session(
    student: str = typer.Argument(..., help="Student name"),
    activity: str = typer.Argument(..., help="Challenge attempted"),
    value: str = typer.Argument(..., help="Result value, e.g. 38.2 or Completed"),
    unit: str = typer.Option("seconds", "--unit", "-u", help="seconds | points | status"),
    note: Optional[str] = typer.Option(None, "--note", "-n"),
    log: str = typer.Option(DEFAULT_LOG_FILENAME, "--log", "-l"),
    dry_run: bool = typer.Option(False, "--dry-run"),
    repo: Optional[str] = typer.Option(None, "--repo", "-r", help="Directory holding insights.toml"),
) -> None:
    """Log a challenge result as the newest session entry."""
    from datetime import datetime

    cfg = _config(repo)
    try:
        result = format_result(value, unit)
    except ValueError as exc:
        _fail(str(exc))
    record = SessionRecord(
        student=student,
        activity=activity,
        result=result,
        note=note or None,
        occurred_at=datetime.now().strftime("%Y-%m-%d %H:%M"),
    )
    try:
        updated = append_record(Path(log), record, dry_run=dry_run)
    except SessionLogError as exc:
        _fail(str(exc))
    insight = classify(student, updated, cfg)
    style = _LABEL_STYLE[insight.label]
    console.print(f"[green]Logged[/green] {student}: {activity} — {result or '(no result)'}")
    console.print(f"[{style}]{insight.label.value}[/{style}]: {insight.reason}")


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------


@app.command()
def insight(
    student: str = typer.Argument(..., help="Student name"),
    log: str = typer.Option(DEFAULT_LOG_FILENAME, "--log", "-l"),
    repo: Optional[str] = typer.Option(None, "--repo", "-r", help="Directory holding insights.toml"),
    as_json: bool = typer.Option(False, "--json"),
) -> None:
    """Classify one student's progress trend."""
    cfg = _config(repo)
    result = classify(student, _records(log), cfg)
    if as_json:
        import json

        console.print_json(json.dumps(result.to_dict()))
        return
    style = _LABEL_STYLE[result.label]
    console.print(f"[bold]{student}[/bold]: [{style}]{result.label.value}[/{style}]")
    console.print(result.reason)


@app.command()
def weekly(
    log: str = typer.Option(DEFAULT_LOG_FILENAME, "--log", "-l"),
    student: list[str] = typer.Option([], "--student", "-s", help="Roster entry (repeatable)"),
    week_label: Optional[str] = typer.Option(None, "--week-label", "-w"),
    fmt: Optional[str] = typer.Option(None, "--format", "-f", help="markdown | json | table"),
    output: Optional[str] = typer.Option(None, "--output", "-o"),
    repo: Optional[str] = typer.Option(None, "--repo", "-r"),
) -> None:
    """Build the weekly progress summary for a roster."""
    cfg = _config(repo)
    records = _records(log)
    roster = student or roster_from_records(records)
    summary = build_weekly_summary(records, roster, week_label, cfg)
    _emit(summary, fmt or cfg.output.format, output)


@app.command()
def export(
    log: str = typer.Option(DEFAULT_LOG_FILENAME, "--log", "-l"),
    student: list[str] = typer.Option([], "--student", "-s"),
    week_label: Optional[str] = typer.Option(None, "--week-label", "-w"),
    out_dir: str = typer.Option("exports", "--out-dir", "-d"),
    name: str = typer.Option("weekly-summary", "--name"),
    formats: list[str] = typer.Option([], "--format", "-f", help="json | markdown | html"),
    repo: Optional[str] = typer.Option(None, "--repo", "-r"),
) -> None:
    """Export the weekly summary to JSON, Markdown and HTML files."""
    cfg = _config(repo)
    records = _records(log)
    roster = student or roster_from_records(records)
    summary = build_weekly_summary(records, roster, week_label, cfg)
    result = export_summary(summary, Path(out_dir), name, formats=formats or list(FORMATS))
    for fmt, path in result.files.items():
        console.print(f"[green]{fmt}[/green] -> {path}")
    if result.errors:
        for err in result.errors:
            err_console.print(f"[red]{err}[/red]")
        raise typer.Exit(1)


@app.command()
def demo(
    fmt: str = typer.Option("table", "--format", "-f", help="markdown | json | table"),
) -> None:
    """Show the weekly summary for the built-in demo club."""
    summary = build_weekly_summary(demo_records(), DEMO_ROSTER, "Week summary (demo)")
    _emit(summary, fmt, None)


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


@app.command(name="config")
def config_cmd(
    init: bool = typer.Option(False, "--init", help="Write a default insights.toml"),
    repo: Optional[str] = typer.Option(None, "--repo", "-r"),
) -> None:
    """Show the active configuration, or write the defaults."""
    if init:
        target = Path(repo) if repo else Path.cwd()
        if not target.is_dir():
            _fail(f"Path not found: {target}")
        path = save_default_config(target)
        console.print(f"[green]Config written to {path}[/green]")
        return
    console.print(_config(repo).to_markdown(), markup=False)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    app()


if __name__ == "__main__":
    main()
