"""
classifier.py: Trend classifier for a single student's session history.

Reads one student's logged results and answers a single question: is this
student getting better, getting worse, holding steady, or is it too early
to tell?

Evidence is consulted in a fixed priority order:
  1. not enough sessions            -> Not enough data
  2. two or more timed results      -> compare earliest vs latest time
  3. otherwise qualitative results  -> count "Completed" / "Top N" outcomes

Only one evidence channel decides a classification.  The function is pure:
same records in, same Insight out.

Public API
----------
classify(student, records, config=None) -> Insight
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional

from .config import InsightsConfig, ThresholdsConfig
from .records import (
    ChronologicalRecords,
    Qualitative,
    RecordInput,
    Timed,
    as_chronological,
    parse_result,
)

logger = logging.getLogger(__name__)


class TrendLabel(str, Enum):
    IMPROVING = "Improving"
    NEEDS_PRACTICE = "Needs practice"
    CONSISTENT_PERFORMER = "Consistent performer"
    NOT_ENOUGH_DATA = "Not enough data"


@dataclass(frozen=True)
class Insight:
    """A trend label plus the explanation shown to club staff."""

    label: TrendLabel
    reason: str

    def to_dict(self) -> dict:
        """Return a dictionary representation of this insight."""
        return {"label": self.label.value, "reason": self.reason}


# ---------------------------------------------------------------------------
# Evidence channels
# ---------------------------------------------------------------------------


def _timed_values(history: ChronologicalRecords) -> list[float]:
    values = []
    for record in history:
        parsed = parse_result(record.result)
        if isinstance(parsed, Timed):
            values.append(parsed.seconds)
    return values


def _success_count(history: ChronologicalRecords) -> int:
    count = 0
    for record in history:
        parsed = parse_result(record.result)
        if isinstance(parsed, Qualitative) and parsed.success:
            count += 1
    return count


def _fixed(value: float, places: int) -> str:
    """Format *value* to *places* decimals, ties rounded away from zero."""
    return str(Decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def _classify_times(times: list[float], t: ThresholdsConfig) -> Insight:
    first, last = times[0], times[-1]
    change = (first - last) / first * 100
    shown_first, shown_last = _fixed(first, 1), _fixed(last, 1)

    if change >= t.improvement_pct:
        return Insight(
            TrendLabel.IMPROVING,
            f"Time reduced from {shown_first}s to {shown_last}s (≈{_fixed(change, 0)}% improvement).",
        )
    if change <= -t.decline_pct:
        return Insight(
            TrendLabel.NEEDS_PRACTICE,
            f"Time increased from {shown_first}s to {shown_last}s. "
            "Consider extra calibration practice.",
        )
    return Insight(
        TrendLabel.CONSISTENT_PERFORMER,
        "Performance is stable across sessions (time variation is small).",
    )


def _classify_outcomes(successes: int, t: ThresholdsConfig) -> Insight:
    if successes >= max(t.min_qualitative_successes, 1):
        return Insight(
            TrendLabel.CONSISTENT_PERFORMER,
            f"Multiple successful outcomes logged ({successes} recent achievements).",
        )
    return Insight(
        TrendLabel.NEEDS_PRACTICE,
        "Add one more session score/time to generate a stronger trend insight.",
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def classify(
    student: str,
    records: RecordInput,
    config: Optional[InsightsConfig] = None,
) -> Insight:
    """Classify *student*'s progress from the full record set.

    ``records`` may hold any number of students.  Display-order input
    (newest first, the record store's order) is reversed before the trend
    is read; :class:`ChronologicalRecords` is used as given.
    """
    t = (config or InsightsConfig.defaults()).thresholds
    history = as_chronological(records).for_student(student)

    needed = max(t.min_sessions, 2)
    if len(history) < needed:
        logger.debug("%s: %d session(s), not enough data", student, len(history))
        return Insight(
            TrendLabel.NOT_ENOUGH_DATA,
            f"Log at least {needed} sessions to generate a trend insight.",
        )

    times = _timed_values(history)
    if len(times) >= max(t.min_timed_values, 2):
        insight = _classify_times(times, t)
        logger.debug("%s: %d timed values -> %s", student, len(times), insight.label.value)
        return insight

    successes = _success_count(history)
    insight = _classify_outcomes(successes, t)
    logger.debug("%s: %d qualitative successes -> %s", student, successes, insight.label.value)
    return insight
