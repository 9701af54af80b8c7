from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Tuple

from .dates import month_key, week_end, week_start
from .entries import Direction, LogEntry, RequiredTest


@dataclass(frozen=True)
class MonthGroup:
    """Entries of one calendar month, in input order."""
    year: int
    month: int
    entries: Tuple[LogEntry, ...]

    @property
    def key(self) -> str:
        return f"{self.year:04d}/{self.month:02d}"

    @property
    def sheet_name(self) -> str:
        return f"{self.month:02d}-{self.year:04d}"


def group_by_month(entries: Iterable[LogEntry]) -> Dict[str, MonthGroup]:
    """Partition entries by (year, month) of their timestamp; keys ascend ('YYYY/MM')."""
    buckets: Dict[str, List[LogEntry]] = {}
    for e in entries:
        buckets.setdefault(month_key(e.timestamp), []).append(e)
    out: Dict[str, MonthGroup] = {}
    for key in sorted(buckets):
        y, m = key.split("/")
        out[key] = MonthGroup(int(y), int(m), tuple(buckets[key]))
    return out

def select(entries: Iterable[LogEntry], direction: Direction, kind: RequiredTest) -> List[LogEntry]:
    """Entries of one direction/kind sorted by timestamp (stable for equal times)."""
    picked = [e for e in entries if e.direction is direction and e.kind is kind]
    return sorted(picked, key=lambda e: e.timestamp)

def weeks_of(entries: Iterable[LogEntry]) -> List[datetime]:
    """Distinct week starts over every entry of the month, ascending."""
    return sorted({week_start(e.timestamp) for e in entries})

def rwt_received_sources(entries: Iterable[LogEntry]) -> List[str]:
    return sorted({e.source for e in entries
                   if e.direction is Direction.RECEIVED and e.kind is RequiredTest.RWT})

def find_in_week(entries: Iterable[LogEntry], source: str, start: datetime) -> LogEntry | None:
    """First entry (input order) from source inside [start, start + 7d)."""
    end = week_end(start)
    for e in entries:
        if e.source == source and start <= e.timestamp < end:
            return e
    return None
