# RMT retransmission rule: a Sent RMT must follow the latest prior Received RMT
# by no more than the window (60 minutes, inclusive). Only looks backward.
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable

from .entries import LogEntry

RMT_WINDOW_MINUTES = 60.0

TAG_COMPLIANT = "Y"
TAG_LATE = "N (Over 1hr)"
TAG_NO_RX = "N (No RX)"


@dataclass(frozen=True)
class ComplianceOutcome:
    matched: bool
    within_window: bool
    received: LogEntry | None = None
    gap_minutes: float | None = None

    @property
    def tag(self) -> str:
        if not self.matched:
            return TAG_NO_RX
        return TAG_COMPLIANT if self.within_window else TAG_LATE


def check_compliance(sent: LogEntry, received_rmt: Iterable[LogEntry],
                     window_minutes: float = RMT_WINDOW_MINUTES) -> ComplianceOutcome:
    eligible = [r for r in received_rmt if r.timestamp < sent.timestamp]
    if not eligible:
        return ComplianceOutcome(matched=False, within_window=False)
    latest = max(eligible, key=lambda r: r.timestamp)
    gap = (sent.timestamp - latest.timestamp).total_seconds() / 60.0
    return ComplianceOutcome(matched=True, within_window=gap <= window_minutes,
                             received=latest, gap_minutes=gap)
