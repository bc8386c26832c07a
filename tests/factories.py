"""Small builders for shift maps used across the test modules."""
from __future__ import annotations

from domain import HoursSpec, ShiftKind, ShiftRecord


def shift(key: str, kind: ShiftKind, hours: int | None = None, note: str | None = None) -> ShiftRecord:
    spec = HoursSpec(hours=hours) if hours is not None else None
    return ShiftRecord(date=key, kind=kind, note=note, hours_spec=spec)


def make_map(*records: ShiftRecord) -> dict[str, ShiftRecord]:
    return {r.date: r for r in records}
