"""Weekly progress rollup across a roster of students.

Runs the trend classifier once per roster entry and pairs each insight with
a one-line highlight of the student's most recent session.

Public API
----------
build_weekly_summary(records, roster, week_label=None, config=None) -> WeeklySummary
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .classifier import Insight, TrendLabel, classify
from .config import InsightsConfig
from .records import DisplayOrderRecords, SessionRecord, as_display_order

logger = logging.getLogger(__name__)

NO_SESSIONS_HIGHLIGHT = "No sessions logged yet."


@dataclass(frozen=True)
class StudentSummary:
    """One row of the weekly summary."""

    student: str
    entries_count: int
    insight: Insight
    highlight: str

    def to_dict(self) -> dict:
        """Return a dictionary representation of this row."""
        return {
            "student": self.student,
            "entries_count": self.entries_count,
            "insight": self.insight.to_dict(),
            "highlight": self.highlight,
        }


@dataclass(frozen=True)
class WeeklySummary:
    """Cohort summary produced by build_weekly_summary()."""

    week_label: str
    rows: list[StudentSummary] = field(default_factory=list)

    def label_counts(self) -> dict[str, int]:
        """Count rows per trend label, every label present."""
        counts = {label.value: 0 for label in TrendLabel}
        for row in self.rows:
            counts[row.insight.label.value] += 1
        return counts

    def to_dict(self) -> dict:
        """Return a fully serializable dictionary of this summary."""
        return {
            "week_label": self.week_label,
            "rows": [r.to_dict() for r in self.rows],
            "label_counts": self.label_counts(),
        }

    def to_json(self) -> str:
        """Serialize this summary to a JSON string."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    def to_markdown(self) -> str:
        """Render this summary as a Markdown report."""
        lines = [f"# {self.week_label}", ""]
        if not self.rows:
            lines.append("_No students on the roster._")
            lines.append("")
            return "\n".join(lines)

        lines.append("| Student | Entries | Trend | Highlight |")
        lines.append("|---------|---------|-------|-----------|")
        for row in self.rows:
            lines.append(
                f"| {row.student} | {row.entries_count} | "
                f"{row.insight.label.value} | {row.highlight} |"
            )
        lines.append("")

        lines.append("## Why")
        lines.append("")
        for row in self.rows:
            lines.append(f"- **{row.student}**: {row.insight.reason}")
        lines.append("")

        lines.append("## Cohort")
        lines.append("")
        for label, count in self.label_counts().items():
            lines.append(f"- {label}: {count}")
        lines.append("")
        return "\n".join(lines)


def render_highlight(latest: Optional[SessionRecord]) -> str:
    """Describe the most recent session, or the no-sessions sentinel."""
    if latest is None:
        return NO_SESSIONS_HIGHLIGHT
    text = f"Latest: {latest.activity} — {latest.result}"
    if latest.note:
        text += f" (“{latest.note}”)"
    return text


def build_weekly_summary(
    records: DisplayOrderRecords | Iterable[SessionRecord],
    roster: Iterable[str],
    week_label: Optional[str] = None,
    config: Optional[InsightsConfig] = None,
) -> WeeklySummary:
    """Build one summary row per roster entry, in roster order.

    ``records`` are taken in display order (newest first): the first record
    found for a student is the one highlighted.  Duplicate roster entries
    produce duplicate rows.
    """
    cfg = config or InsightsConfig.defaults()
    entries = as_display_order(records)

    rows = []
    for student in roster:
        own = entries.for_student(student)
        rows.append(
            StudentSummary(
                student=student,
                entries_count=len(own),
                insight=classify(student, entries, cfg),
                highlight=render_highlight(entries.latest_for(student)),
            )
        )

    label = week_label if week_label is not None else cfg.summary.week_label
    logger.debug("Built %r with %d row(s) from %d record(s)", label, len(rows), len(entries))
    return WeeklySummary(week_label=label, rows=rows)
