"""Export system for Progress Insights: write summaries as JSON/HTML/Markdown.

- **Markdown** (.md): the summary's rendered report
- **JSON** (.json): structured machine-readable data
- **HTML** (.html): self-contained page with embedded CSS

Works with any report object exposing ``to_markdown()`` and ``to_dict()``;
HTML gets a dedicated table layout when handed a :class:`WeeklySummary`.

Public API
----------
ExportEngine
export_summary(summary, out_dir, name, formats) -> ExportResult
render_html_summary(summary, generated_at) -> str
"""

from __future__ import annotations

import html
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from .classifier import TrendLabel
from .weekly import WeeklySummary

logger = logging.getLogger(__name__)


@runtime_checkable
class Exportable(Protocol):
    """Any object that has to_markdown() and to_dict()."""

    def to_markdown(self) -> str:
        ...

    def to_dict(self) -> dict:
        ...


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------

_LABEL_CLASS = {
    TrendLabel.IMPROVING: "improving",
    TrendLabel.NEEDS_PRACTICE: "practice",
    TrendLabel.CONSISTENT_PERFORMER: "consistent",
    TrendLabel.NOT_ENOUGH_DATA: "nodata",
}

_HTML_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
  <style>
    body {{ font-family: -apple-system, "Segoe UI", Helvetica, Arial, sans-serif;
           color: #0f172a; background: #f8fafc; padding: 2rem; line-height: 1.5; }}
    .container {{ max-width: 960px; margin: 0 auto; }}
    table {{ width: 100%; border-collapse: collapse; background: #fff; }}
    th, td {{ text-align: left; padding: .6rem .8rem; border-bottom: 1px solid #e2e8f0; }}
    th {{ background: #f1f5f9; font-size: .85rem; }}
    .label {{ border-radius: 999px; padding: .1rem .6rem; font-size: .8rem; font-weight: 600; }}
    .improving {{ background: #ecfdf5; color: #047857; }}
    .practice {{ background: #fffbeb; color: #b45309; }}
    .consistent {{ background: #eff6ff; color: #1d4ed8; }}
    .nodata {{ background: #f1f5f9; color: #475569; }}
    .reason {{ color: #475569; font-size: .85rem; }}
    footer {{ margin-top: 1.5rem; color: #64748b; font-size: .8rem; }}
  </style>
</head>
<body>
  <div class="container">
    <h1>{title}</h1>
    <table>
      <thead><tr><th>Student</th><th>Entries</th><th>Trend</th><th>Highlight</th></tr></thead>
      <tbody>
{rows}
      </tbody>
    </table>
    <footer>Insights are explainable and advisory only. Generated {generated_at}.</footer>
  </div>
</body>
</html>
"""


def render_html_summary(summary: WeeklySummary, generated_at: Optional[str] = None) -> str:
    """Render a full HTML page for a weekly summary."""
    if generated_at is None:
        generated_at = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    rows = []
    for row in summary.rows:
        label = row.insight.label
        rows.append(
            "        <tr>"
            f"<td>{html.escape(row.student)}</td>"
            f"<td>{row.entries_count}</td>"
            f'<td><span class="label {_LABEL_CLASS[label]}">{html.escape(label.value)}</span>'
            f'<div class="reason">{html.escape(row.insight.reason)}</div></td>'
            f"<td>{html.escape(row.highlight)}</td>"
            "</tr>"
        )
    return _HTML_TEMPLATE.format(
        title=html.escape(summary.week_label),
        rows="\n".join(rows),
        generated_at=generated_at,
    )


# ---------------------------------------------------------------------------
# Export engine
# ---------------------------------------------------------------------------


FORMATS = ("json", "markdown", "html")


@dataclass
class ExportResult:
    """Result of an export operation."""

    name: str
    files: dict[str, Path] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "files": {k: str(v) for k, v in self.files.items()},
            "errors": self.errors,
        }


class ExportEngine:
    """Writes a report object to one file per requested format."""

    def __init__(self, name: str, out_dir: Path) -> None:
        self.name = name
        self.out_dir = out_dir

    def export(self, report: Exportable, formats: Optional[list[str]] = None) -> ExportResult:
        """Export *report* to the requested formats."""
        if formats is None:
            formats = list(FORMATS)

        self.out_dir.mkdir(parents=True, exist_ok=True)
        result = ExportResult(name=self.name)

        for fmt in formats:
            try:
                path = self._export_one(report, fmt)
            except (ValueError, OSError) as exc:
                logger.warning("Export of %s as %s failed: %s", self.name, fmt, exc)
                result.errors.append(f"{fmt}: {exc}")
                continue
            result.files[fmt] = path
            logger.info("Wrote %s", path)

        return result

    def _export_one(self, report: Exportable, fmt: str) -> Path:
        fmt = fmt.lower()
        if fmt == "json":
            path = self.out_dir / f"{self.name}.json"
            path.write_text(
                json.dumps(report.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
            )
        elif fmt in ("markdown", "md"):
            path = self.out_dir / f"{self.name}.md"
            path.write_text(report.to_markdown(), encoding="utf-8")
        elif fmt == "html":
            if not isinstance(report, WeeklySummary):
                raise ValueError("HTML export is only available for weekly summaries")
            path = self.out_dir / f"{self.name}.html"
            path.write_text(render_html_summary(report), encoding="utf-8")
        else:
            raise ValueError(f"Unknown format: {fmt!r}. Choose from: {FORMATS}")
        return path


def export_summary(
    summary: Exportable,
    out_dir: Path,
    name: str,
    formats: Optional[list[str]] = None,
) -> ExportResult:
    """Convenience function to export without creating an ExportEngine manually."""
    return ExportEngine(name=name, out_dir=out_dir).export(summary, formats=formats)
