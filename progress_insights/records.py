"""Session records, result parsing, and ordering-typed record sequences.

A logged session carries a free-form ``result`` string.  Two sub-grammars are
recognized:

  - *timed*: a decimal number followed by ``s`` (``"38.2s"``), elapsed seconds
  - *qualitative*: anything mentioning ``completed`` or ``top`` (``"Top 3"``)

Everything else is inert.  :func:`parse_result` is the single place where
those format assumptions live.

Record collections come in two orders.  The record store keeps entries
newest first (:class:`DisplayOrderRecords`); trend detection needs them oldest
first (:class:`ChronologicalRecords`).  Keeping the two as distinct types makes
each consumer state which order it relies on.

Public API
----------
SessionRecord
Timed, Qualitative, Unrecognized, parse_result(text) -> ParsedResult
ChronologicalRecords, DisplayOrderRecords
as_display_order(records) -> DisplayOrderRecords
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, asdict
from typing import Iterable, Iterator, Optional, Sequence, Union


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SessionRecord:
    """One logged attempt at an activity."""

    student: str
    activity: str
    result: str
    note: Optional[str] = None
    occurred_at: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> "SessionRecord":
        """Build a record from a raw mapping.

        Accepts the web app's field names (``challenge``, ``score``,
        ``createdAt``) as aliases so exported entries load unchanged.
        """
        note = d.get("note")
        return cls(
            student=str(d.get("student", "")),
            activity=str(d.get("activity", d.get("challenge", ""))),
            result=str(d.get("result", d.get("score", "")) or ""),
            note=str(note) if note else None,
            occurred_at=str(d.get("occurred_at", d.get("createdAt", "")) or ""),
        )

    def to_dict(self) -> dict:
        """Return a dictionary representation of the record"""
        return asdict(self)


# ---------------------------------------------------------------------------
# Result parsing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Timed:
    seconds: float


@dataclass(frozen=True)
class Qualitative:
    success: bool


@dataclass(frozen=True)
class Unrecognized:
    pass


ParsedResult = Union[Timed, Qualitative, Unrecognized]

_TIMED_RE = re.compile(r"^(\d+(?:\.\d+)?)s$", re.IGNORECASE)
_SUCCESS_RE = re.compile(r"completed|top", re.IGNORECASE)


def parse_result(text: Optional[str]) -> ParsedResult:
    """Classify a free-form result string.

    Timed values are tried first.  A zero-second time carries no usable
    trend signal (it would divide by zero as a baseline) and is reported as
    :class:`Unrecognized`.
    """
    if not text:
        return Unrecognized()
    m = _TIMED_RE.match(text.strip())
    if m:
        seconds = float(m.group(1))
        if seconds > 0:
            return Timed(seconds)
        return Unrecognized()
    if _SUCCESS_RE.search(text):
        return Qualitative(success=True)
    return Unrecognized()


# ---------------------------------------------------------------------------
# Ordered sequences
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _RecordSequence:
    records: tuple[SessionRecord, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[SessionRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __bool__(self) -> bool:
        return bool(self.records)

    def for_student(self, student: str):
        """Return the records belonging to *student*, order preserved."""
        return type(self)(tuple(r for r in self.records if r.student == student))

    def to_list(self) -> list[dict]:
        return [r.to_dict() for r in self.records]


@dataclass(frozen=True)
class ChronologicalRecords(_RecordSequence):
    """Records ordered oldest first."""

    def chronological(self) -> "ChronologicalRecords":
        return self


@dataclass(frozen=True)
class DisplayOrderRecords(_RecordSequence):
    """Records ordered newest first, as the record store returns them."""

    def chronological(self) -> ChronologicalRecords:
        return ChronologicalRecords(tuple(reversed(self.records)))

    def latest_for(self, student: str) -> Optional[SessionRecord]:
        """Return the most recent record for *student*, or None."""
        for record in self.records:
            if record.student == student:
                return record
        return None

    def prepend(self, record: SessionRecord) -> "DisplayOrderRecords":
        """Return a new sequence with *record* as the newest entry."""
        return DisplayOrderRecords((record,) + self.records)


RecordInput = Union[ChronologicalRecords, DisplayOrderRecords, Sequence[SessionRecord]]


def as_display_order(records: Union[DisplayOrderRecords, Iterable[SessionRecord]]) -> DisplayOrderRecords:
    """Coerce *records* to display order.

    A plain sequence is taken to be in the record store's order (newest
    first).  Chronological input is reversed.
    """
    if isinstance(records, DisplayOrderRecords):
        return records
    if isinstance(records, ChronologicalRecords):
        return DisplayOrderRecords(tuple(reversed(records.records)))
    return DisplayOrderRecords(tuple(records))


def as_chronological(records: RecordInput) -> ChronologicalRecords:
    """Coerce *records* to oldest-first order."""
    if isinstance(records, ChronologicalRecords):
        return records
    return as_display_order(records).chronological()
