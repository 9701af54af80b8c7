"""
Typed log entries and the record classifier.

A raw record is one decoded <entry> of the Sage log: a str->str mapping with at
least `type` (Sent/Received), `zczc` (the SAME header), `details` and `date`.
Only Sent/Received RWT/RMT rows with a usable date become LogEntry objects;
everything else is dropped without raising.
"""
from __future__ import annotations
import re
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Tuple

from .dates import parse_device_timestamp


class Direction(str, Enum):
    SENT = "Sent"
    RECEIVED = "Received"


class RequiredTest(str, Enum):
    RWT = "RWT"
    RMT = "RMT"


# marker order matters: RWT signals win over RMT signals
_KIND_MARKERS = (
    (RequiredTest.RWT, "-RWT-", "Required Weekly Test"),
    (RequiredTest.RMT, "-RMT-", "Required Monthly Test"),
)
_MONITOR_RE = re.compile(r'Received on Monitor (\d+)')
_WS_RE = re.compile(r'\s+')

DEFAULT_SOURCE_LABELS = {
    "Monitor 1": "KBOI 670AM LP2+PEP Monitor 1",
    "Monitor 2": "KBSU 90.3FM LP1 Monitor 2",
    "Monitor 3": "WXK68 162.55 NWS Monitor 3",
    "CAP": "CAP-IPAWS",
    "CAP_IPAWS": "CAP-IPAWS IPAWS@DHS.GOV",
    "Station": "Station Log",
}

UNKNOWN = "Unknown"


class SourceLabels(Mapping[str, str]):
    """Immutable source-code -> display-label table handed to the classifier."""

    def __init__(self, table: Mapping[str, str] | None = None):
        merged = dict(DEFAULT_SOURCE_LABELS)
        for k, v in (table or {}).items():
            merged[str(k).strip()] = str(v)
        self._table = MappingProxyType(merged)

    def __getitem__(self, key):
        return self._table[key]

    def __iter__(self):
        return iter(self._table)

    def __len__(self):
        return len(self._table)

    def __repr__(self):
        return f"SourceLabels({dict(self._table)!r})"

    def monitor(self, number: str) -> str:
        code = f"Monitor {number}"
        return self._table.get(code, code)


@dataclass(frozen=True)
class LogEntry:
    direction: Direction
    kind: RequiredTest
    timestamp: datetime
    source: str       # display label
    source_code: str  # raw token: "Monitor 2", "CAP", "Station", "Unknown"
    details: str


def _text(row: Mapping, key: str) -> str:
    v = row.get(key, "")
    return v if isinstance(v, str) else ("" if v is None else str(v))

def detect_kind(zczc: str, details: str) -> RequiredTest | None:
    """Substring markers, case-sensitive as the device writes them."""
    for kind, code_marker, text_marker in _KIND_MARKERS:
        if code_marker in zczc or text_marker in details:
            return kind
    return None

def resolve_source(direction: Direction, details: str, labels: SourceLabels) -> Tuple[str, str]:
    """Return (source_code, label)."""
    if "Received from CAP" in details:
        label = labels["CAP_IPAWS"] if "IPAWS" in details else labels["CAP"]
        return "CAP", label
    if "Received on Monitor" in details:
        m = _MONITOR_RE.search(details)
        if m:
            return f"Monitor {m.group(1)}", labels.monitor(m.group(1))
        return UNKNOWN, UNKNOWN
    if direction is Direction.SENT:
        return "Station", labels["Station"]
    return UNKNOWN, UNKNOWN

def _classify(row: Mapping, labels: SourceLabels) -> Tuple[LogEntry | None, str | None]:
    direction = _text(row, "type")
    if direction not in (Direction.SENT.value, Direction.RECEIVED.value):
        return None, "bad_direction"
    details = _text(row, "details")
    kind = detect_kind(_text(row, "zczc"), details)
    if kind is None:
        return None, "no_test_marker"
    ts = parse_device_timestamp(_text(row, "date"))
    if ts is None:
        return None, "bad_date"
    direction = Direction(direction)
    code, label = resolve_source(direction, details, labels)
    entry = LogEntry(
        direction=direction,
        kind=kind,
        timestamp=ts,
        source=label,
        source_code=code,
        details=_WS_RE.sub(" ", details).strip(),
    )
    return entry, None

def classify(row: Mapping, labels: SourceLabels | None = None) -> LogEntry | None:
    """Map one raw record to a LogEntry, or None when it is not a reportable test event."""
    entry, _ = _classify(row, labels if labels is not None else SourceLabels())
    return entry

def classify_all(rows: Iterable[Mapping], labels: SourceLabels | None = None) -> Tuple[List[LogEntry], Dict[str, int]]:
    """Classify every row; returns (entries in input order, dropped-reason counts)."""
    labels = labels if labels is not None else SourceLabels()
    kept: List[LogEntry] = []
    dropped: Counter = Counter()
    for row in rows:
        entry, reason = _classify(row, labels)
        if entry is None:
            dropped[reason] += 1
        else:
            kept.append(entry)
    return kept, dict(sorted(dropped.items()))
