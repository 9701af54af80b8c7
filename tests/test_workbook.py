import io

from openpyxl import load_workbook

from sage_log_builder.sections import MISSING, build_month_grid
from sage_log_builder.workbook import render_workbook


def _sheet(data, name):
    wb = load_workbook(io.BytesIO(data))
    assert wb.sheetnames == [name]
    return wb[name]


def test_render_single_named_sheet(received_rwt, sent_rmt, march):
    grid = build_month_grid([received_rwt(march(5, 8)), received_rwt(march(12, 8)), sent_rmt(march(20))], 2024, 3)
    ws = _sheet(render_workbook(grid, "03-2024"), "03-2024")
    assert ws["A1"].value == "Emergency Alert System Log"
    assert ws["A1"].font.bold
    assert ws.column_dimensions["A"].width == 35
    assert ws.column_dimensions["B"].width == 18


def test_missing_and_compliance_fills(received_rwt, sent_rmt, march):
    grid = build_month_grid([received_rwt(march(5, 8)), sent_rmt(march(20))], 2024, 3)
    ws = _sheet(render_workbook(grid), grid.title)
    missing = grid.find(MISSING)[0]
    cell = ws.cell(row=missing.row + 1, column=missing.col + 1)
    assert cell.value == MISSING
    assert cell.fill.start_color.rgb.endswith("FFC7CE")
    assert cell.font.bold
    tag = grid.find("N (No RX)")[0]
    assert ws.cell(row=tag.row + 1, column=tag.col + 1).fill.start_color.rgb.endswith("FFEB9C")


def test_wide_matrix_gets_default_width(received_rwt):
    from datetime import datetime, timedelta
    entries = [received_rwt(datetime(2024, 3, 1) + timedelta(days=7 * i)) for i in range(7)]
    grid = build_month_grid(entries, 2024, 3)
    ws = _sheet(render_workbook(grid), grid.title)
    assert ws.column_dimensions["H"].width == 18
