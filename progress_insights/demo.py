"""Seed roster and entries for the demo summary."""

from __future__ import annotations

from .records import DisplayOrderRecords, SessionRecord

DEMO_ROSTER: list[str] = ["Aisha Okoro", "Ben Li", "Chloe Ahmed"]

# newest first
_SEED_DATA: list[dict] = [
    {"student": "Ben Li",      "activity": "Sumo Bot",                 "result": "Top 3",     "note": "Great defensive strategy",   "occurred_at": "2026-01-12 16:05"},
    {"student": "Aisha Okoro", "activity": "Maze Solve",               "result": "Completed", "note": "Improved obstacle planning", "occurred_at": "2026-01-10 16:20"},
    {"student": "Aisha Okoro", "activity": "Line Follower Time Trial", "result": "38.2s",     "note": "Better steering control",    "occurred_at": "2026-01-05 16:10"},
]


def demo_records() -> DisplayOrderRecords:
    return DisplayOrderRecords(tuple(SessionRecord.from_dict(d) for d in _SEED_DATA))
