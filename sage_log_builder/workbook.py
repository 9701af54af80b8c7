# Render a ReportGrid into a single-sheet .xlsx (pandas ExcelWriter + openpyxl styles).
from __future__ import annotations
import io

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .sections import ReportGrid, Style

_THIN = Side(style="thin", color="000000")


def _fill(rgb: str) -> PatternFill:
    return PatternFill(start_color=rgb, end_color=rgb, fill_type="solid")

STYLE_MAP = {
    Style.TITLE: {"font": Font(bold=True, size=14), "alignment": Alignment(horizontal="left")},
    Style.HEADER: {
        "font": Font(bold=True, size=11, color="000000"),
        "fill": _fill("E0E0E0"),
        "border": Border(bottom=_THIN),
        "alignment": Alignment(horizontal="left", vertical="center", wrap_text=True),
    },
    Style.CELL: {"font": Font(size=10), "alignment": Alignment(vertical="top", wrap_text=True)},
    Style.CENTER: {"font": Font(size=10), "alignment": Alignment(horizontal="center", vertical="center", wrap_text=True)},
    Style.SUCCESS: {
        "font": Font(color="006100"),
        "fill": _fill("C6EFCE"),
        "alignment": Alignment(horizontal="center", vertical="center", wrap_text=True),
    },
    Style.MISSING: {
        "font": Font(bold=True, color="9C0006"),
        "fill": _fill("FFC7CE"),
        "border": Border(top=_THIN, bottom=_THIN, left=_THIN, right=_THIN),
        "alignment": Alignment(horizontal="center", vertical="center"),
    },
    Style.WARNING: {
        "fill": _fill("FFEB9C"),
        "alignment": Alignment(horizontal="center", vertical="center", wrap_text=True),
    },
}

def render_workbook(grid: ReportGrid, sheet_name: str | None = None) -> bytes:
    """Return .xlsx bytes holding one sheet laid out from grid."""
    name = sheet_name or grid.title
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        # empty frame only creates the named sheet; cells are written below
        pd.DataFrame().to_excel(writer, sheet_name=name, index=False)
        ws = writer.sheets[name]
        for c in grid.cells:
            cell = ws.cell(row=c.row + 1, column=c.col + 1, value=c.value)
            for attr, val in STYLE_MAP[c.style].items():
                setattr(cell, attr, val)
        for i in range(grid.n_cols):
            width = grid.column_widths[i] if i < len(grid.column_widths) else 18
            ws.column_dimensions[get_column_letter(i + 1)].width = width
    return buf.getvalue()
