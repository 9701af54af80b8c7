"""
Monthly EAS log layout.

build_month_grid() lays out one month of classified entries as a sparse grid of
(value, style) cells, top to bottom:

  1. title block
  2. RMT received
  3. RMT transmitted (with the one-hour compliance tag)
  4. RWT received matrix (source x week, MISSING where a week has no test)
  5. RWT transmitted
  6. weekly log review sign-off

Colors and fonts are not decided here; workbook.py maps each Style to them.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Tuple

from .compliance import RMT_WINDOW_MINUTES, TAG_COMPLIANT, TAG_LATE, TAG_NO_RX, check_compliance
from .dates import format_short_date, format_time, format_week_range, month_label, week_start
from .entries import Direction, LogEntry, RequiredTest
from .grouping import find_in_week, rwt_received_sources, select, weeks_of


class Style(str, Enum):
    TITLE = "title"
    HEADER = "header"
    CELL = "cell"
    CENTER = "center"
    SUCCESS = "success"
    MISSING = "missing"
    WARNING = "warning"


COLUMN_WIDTHS = (35, 18, 18, 15, 30, 15, 15)
MISSING = "MISSING"

_TAG_STYLES = {TAG_COMPLIANT: Style.SUCCESS, TAG_LATE: Style.MISSING, TAG_NO_RX: Style.WARNING}


@dataclass(frozen=True)
class GridCell:
    row: int
    col: int
    value: str
    style: Style


@dataclass(frozen=True)
class ReportGrid:
    """Finished layout for one month; cells are sorted by (row, col)."""
    title: str
    cells: Tuple[GridCell, ...]
    n_rows: int
    n_cols: int
    column_widths: Tuple[int, ...] = COLUMN_WIDTHS

    def cell(self, row: int, col: int) -> GridCell | None:
        for c in self.cells:
            if c.row == row and c.col == col:
                return c
        return None

    def row_values(self, row: int) -> List[str]:
        return [c.value for c in self.cells if c.row == row]

    def find(self, value: str) -> List[GridCell]:
        return [c for c in self.cells if c.value == value]


class GridBuilder:
    """Write-once cursor over a sparse grid."""

    def __init__(self):
        self.row = 0
        self._cells: Dict[Tuple[int, int], GridCell] = {}

    def put(self, col: int, value, style: Style, row: int | None = None) -> None:
        r = self.row if row is None else row
        self._cells[(r, col)] = GridCell(r, col, "" if value is None else str(value), style)

    def put_row(self, values: Iterable, style: Style) -> None:
        for i, v in enumerate(values):
            self.put(i, v, style)
        self.row += 1

    def skip(self, n: int = 1) -> None:
        self.row += n

    def build(self, title: str, n_cols: int) -> ReportGrid:
        cells = tuple(self._cells[k] for k in sorted(self._cells))
        return ReportGrid(title=title, cells=cells, n_rows=self.row, n_cols=n_cols)


def _title_block(g: GridBuilder, year: int, month: int, station_name: str) -> None:
    g.put(0, "Emergency Alert System Log", Style.TITLE)
    g.put(3, f"Station: {station_name}".rstrip(), Style.CELL)
    g.skip()
    g.put(3, f"Month/Year: {month_label(year, month)} {year}", Style.TITLE)
    g.skip(2)

def _rmt_received(g: GridBuilder, received: List[LogEntry], signature: str) -> None:
    g.put_row(["Required Monthly Test (RMT) Received"], Style.HEADER)
    g.put_row(["Received From", "Date", "Time", "", "Signature or Notes"], Style.HEADER)
    if not received:
        g.put_row(["(No RMT Received)"], Style.CELL)
    for e in received:
        g.put(0, e.source, Style.CELL)
        g.put(1, format_short_date(e.timestamp), Style.CENTER)
        g.put(2, format_time(e.timestamp), Style.CENTER)
        g.put(4, signature, Style.CELL)
        g.skip()
    g.put(0, "Explanation for RMT not received:", Style.CELL)
    g.skip(2)

def _rmt_sent(g: GridBuilder, sent: List[LogEntry], received: List[LogEntry],
              signature: str, window_minutes: float) -> None:
    g.put_row(["Required Monthly Test (RMT) Transmitted"], Style.HEADER)
    g.put_row(["Date", "Time Sent", "Within 1 Hour? Y/N", "", "Signature or Notes"], Style.HEADER)
    if not sent:
        g.put_row(["(No RMT Sent)"], Style.CELL)
    for e in sent:
        tag = check_compliance(e, received, window_minutes).tag
        g.put(0, format_short_date(e.timestamp), Style.CENTER)
        g.put(1, format_time(e.timestamp), Style.CENTER)
        g.put(2, tag, _TAG_STYLES[tag])
        g.put(4, signature, Style.CELL)
        g.skip()
    g.put(0, "Explanation for RMT not transmitted:", Style.CELL)
    g.skip(2)

def _rwt_matrix(g: GridBuilder, weeks, entries: List[LogEntry]) -> None:
    g.put_row(["Required Weekly Test (RWT) Received"], Style.HEADER)
    g.put_row(["LP or NWS"] + [f"WEEK OF\n{format_week_range(w)}" for w in weeks], Style.HEADER)
    rwt_rx = [e for e in entries if e.direction is Direction.RECEIVED and e.kind is RequiredTest.RWT]
    sources = rwt_received_sources(entries)
    for src in sources:
        g.put(0, src, Style.CELL)
        for i, w in enumerate(weeks):
            hit = find_in_week(rwt_rx, src, w)
            if hit is None:
                g.put(i + 1, MISSING, Style.MISSING)
            else:
                g.put(i + 1, f"{format_short_date(hit.timestamp)}\n{format_time(hit.timestamp)}", Style.CENTER)
        g.skip()
    if not sources:
        g.put_row(["No RWT Received Data"], Style.CELL)
    g.skip(2)

def _rwt_sent(g: GridBuilder, sent: List[LogEntry], signature: str) -> None:
    g.put_row(["Required Weekly Test (RWT) Transmitted"], Style.HEADER)
    g.put_row(["WEEK OF", "DATE", "TIME", "SIGNATURE or NOTES"], Style.HEADER)
    for e in sent:
        g.put(0, format_week_range(week_start(e.timestamp)), Style.CENTER)
        g.put(1, format_short_date(e.timestamp), Style.CENTER)
        g.put(2, format_time(e.timestamp), Style.CENTER)
        g.put(3, signature, Style.CELL)
        g.skip()
    g.put(0, "Explanation of RWT Failures:", Style.CELL)
    g.skip(2)
    g.put(0, "Other Information:", Style.CELL)
    g.skip(3)

def _weekly_review(g: GridBuilder, weeks, signature: str) -> None:
    g.put_row(["Weekly Log Review by Chief Operator or Designee"], Style.HEADER)
    g.put_row(["WEEK OF", "SIGNATURE"], Style.HEADER)
    for w in weeks:
        g.put(0, format_week_range(w), Style.CENTER)
        g.put(1, signature, Style.CELL)
        g.skip()

def build_month_grid(entries: Iterable[LogEntry], year: int, month: int, *,
                     signature: str = "", station_name: str = "",
                     window_minutes: float = RMT_WINDOW_MINUTES) -> ReportGrid:
    entries = list(entries)
    weeks = weeks_of(entries)
    rmt_rx = select(entries, Direction.RECEIVED, RequiredTest.RMT)
    g = GridBuilder()
    _title_block(g, year, month, station_name)
    _rmt_received(g, rmt_rx, signature)
    _rmt_sent(g, select(entries, Direction.SENT, RequiredTest.RMT), rmt_rx, signature, window_minutes)
    _rwt_matrix(g, weeks, entries)
    _rwt_sent(g, select(entries, Direction.SENT, RequiredTest.RWT), signature)
    _weekly_review(g, weeks, signature)
    return g.build(f"{month:02d}-{year:04d}", n_cols=max(len(weeks) + 2, len(COLUMN_WIDTHS)))
