"""Weekly crewboard workbook export, mirroring the import grid."""
from __future__ import annotations

from io import BytesIO

import pandas as pd

from endorsement_tracker.domain.models import WEEKDAYS, WeeklyData
from endorsement_tracker.infrastructure.parsing.weekly import (
    DAY_COLUMNS,
    DAY_HEADER_ROW,
    DAY_LABELS,
    GRID_WIDTH,
    TITLE_CELL,
    WEEK_LABEL_CELL,
    WEEK_NUMBER_CELL,
    WEEKLY_GRID,
)

SHEET_NAME = "Sheet1"
COLUMN_WIDTHS = (30, 15, 15, 15, 15, 15, 10)


def weekly_rows(weekly: WeeklyData) -> list[list[object]]:
    last_row = max(grid_row.row_index for grid_row in WEEKLY_GRID)
    grid: list[list[object]] = [[""] * GRID_WIDTH for _ in range(last_row + 1)]
    grid[TITLE_CELL[0]][TITLE_CELL[1]] = "Crewing Board"
    grid[WEEK_LABEL_CELL[0]][WEEK_LABEL_CELL[1]] = "Week "
    grid[WEEK_NUMBER_CELL[0]][WEEK_NUMBER_CELL[1]] = weekly.week_number
    for day, label in zip(WEEKDAYS, DAY_LABELS):
        grid[DAY_HEADER_ROW][DAY_COLUMNS[day]] = label
    for grid_row in WEEKLY_GRID:
        grid[grid_row.row_index][0] = grid_row.label
        for day, column in DAY_COLUMNS.items():
            grid[grid_row.row_index][column] = getattr(weekly.days[day], grid_row.field)

    if weekly.correction_notes:
        grid.append([""] * GRID_WIDTH)
        grid.append(["Correction Notes"] + [""] * (GRID_WIDTH - 1))
        for index, note in enumerate(weekly.correction_notes, start=1):
            status = "✓ DONE" if note.completed else "○ PENDING"
            grid.append([f"{index}. {note.text}", status] + [""] * (GRID_WIDTH - 2))
    return grid


def workbook_filename(weekly: WeeklyData) -> str:
    return f"Week_{weekly.week_number}.xlsx"


def build_weekly_workbook(weekly: WeeklyData) -> bytes:
    frame = pd.DataFrame(weekly_rows(weekly))
    buf = BytesIO()
    with pd.ExcelWriter(buf, engine="xlsxwriter") as writer:
        frame.to_excel(writer, sheet_name=SHEET_NAME, index=False, header=False)
        worksheet = writer.sheets[SHEET_NAME]
        for column, width in enumerate(COLUMN_WIDTHS):
            worksheet.set_column(column, column, width)
    buf.seek(0)
    return buf.getvalue()
