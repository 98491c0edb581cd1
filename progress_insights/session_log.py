"""Session log for Progress Insights.

A JSON file standing in for the club's record store.  Entries are kept
newest first: logging a session prepends it, exactly as the session-log page
shows the latest entry at the top.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

from .records import DisplayOrderRecords, SessionRecord

logger = logging.getLogger(__name__)

DEFAULT_LOG_FILENAME = "sessions.json"

RESULT_UNITS = ("seconds", "points", "status")


class SessionLogError(ValueError):
    """Raised when a session log file cannot be read."""


def format_result(value: str, unit: str = "seconds") -> str:
    """Build the stored result string from a typed value and its unit.

    ``seconds`` -> ``"38.2s"``, ``points`` -> ``"87/100"``, ``status`` is kept
    as typed.  A blank value stays blank.
    """
    if unit not in RESULT_UNITS:
        raise ValueError(f"Unknown unit: {unit!r}. Choose from: {RESULT_UNITS}")
    value = value.strip()
    if not value:
        return ""
    if unit == "seconds":
        return f"{value}s"
    if unit == "points":
        return f"{value}/100"
    return value


def load_records(log_path: Path) -> DisplayOrderRecords:
    """Read the session log; a missing file is an empty log."""
    if not log_path.exists():
        return DisplayOrderRecords()
    try:
        payload = json.loads(log_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SessionLogError(f"{log_path}: invalid JSON ({exc})") from exc
    if not isinstance(payload, list):
        raise SessionLogError(f"{log_path}: expected a JSON list of session entries")

    records = []
    for i, item in enumerate(payload):
        if not isinstance(item, dict):
            raise SessionLogError(f"{log_path}: entry {i} is not an object")
        if not item.get("student"):
            logger.warning("Skipping entry %d in %s: no student", i, log_path)
            continue
        records.append(SessionRecord.from_dict(item))
    logger.debug("Loaded %d record(s) from %s", len(records), log_path)
    return DisplayOrderRecords(tuple(records))


def save_records(log_path: Path, records: DisplayOrderRecords) -> None:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    log_path.write_text(
        json.dumps(records.to_list(), indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )


def append_record(
    log_path: Path,
    record: SessionRecord,
    *,
    dry_run: bool = False,
) -> DisplayOrderRecords:
    """Prepend a session to the log.

    Args:
        log_path: Path to the JSON log file.
        record: The session to add as the newest entry.
        dry_run: If True, return the updated records without writing.

    Returns:
        The full updated log, newest first.
    """
    updated = load_records(log_path).prepend(record)
    if not dry_run:
        save_records(log_path, updated)
        logger.info("Logged %s / %s to %s", record.student, record.activity, log_path)
    return updated


def roster_from_records(records: Iterable[SessionRecord]) -> list[str]:
    """Distinct students in order of first appearance."""
    seen: dict[str, None] = {}
    for record in records:
        seen.setdefault(record.student, None)
    return list(seen)
