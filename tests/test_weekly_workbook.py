from io import BytesIO

import pandas as pd
import pytest

from endorsement_tracker.domain.models import DailyCounters
from endorsement_tracker.domain.weekly import add_correction_note, blank_week, toggle_correction_note, update_day
from endorsement_tracker.errors import ParseFailed
from endorsement_tracker.infrastructure.parsing.utils import parse_int_cell
from endorsement_tracker.infrastructure.parsing.weekly import read_weekly_grid, weekly_workbook_to_import
from endorsement_tracker.infrastructure.repositories.excel_repositories import WeeklyExcelRepository
from endorsement_tracker.presentation.weekly_workbook import build_weekly_workbook, weekly_rows, workbook_filename


def make_grid(rows: dict[int, list[object]], week_number: object = "") -> list[list[object]]:
    grid = [[""] * 7 for _ in range(12)]
    grid[0][1] = "Crewing Board"
    grid[1][5] = "Week "
    grid[1][6] = week_number
    grid[3][1:6] = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
    for row_index, values in rows.items():
        grid[row_index][0] = f"row {row_index}"
        grid[row_index][1 : 1 + len(values)] = values
    return grid


def write_grid(grid: list[list[object]]) -> bytes:
    buf = BytesIO()
    pd.DataFrame(grid).to_excel(buf, index=False, header=False, engine="xlsxwriter")
    return buf.getvalue()


def test_exported_week_reads_back_identically():
    week = blank_week(46)
    week = update_day(week, "monday", "endorsements_received", "3/5")
    week = update_day(week, "wednesday", "applications_received", "2/4")
    week = update_day(week, "thursday", "sending_sra", "Sent to Nordic")
    week = update_day(week, "friday", "corrections", 2)

    imported = WeeklyExcelRepository(build_weekly_workbook(week), filename="Week_46.xlsx").load_week()

    assert imported.week_number == 46
    assert imported.days == week.days


def test_import_reads_declared_grid_positions():
    grid = make_grid(
        {
            4: ["1/2", "", "5/5", "0/1", "2/2"],
            7: ["3/4", "1/1"],
            8: ["2/6"],
            9: ["yes"],
            11: ["3 fixes", 1.0],
        },
        week_number=12,
    )

    imported = weekly_workbook_to_import(write_grid(grid))

    assert imported.week_number == 12
    monday, tuesday = imported.days["monday"], imported.days["tuesday"]
    assert monday.endorsements_to_be_issued == "1/2"
    assert tuesday.endorsements_to_be_issued == "0/0"
    assert monday.endorsements_received == "3/4"
    assert monday.applications_received == "2/6"
    assert monday.sending_sra == "yes"
    assert monday.corrections == 3
    assert tuesday.corrections == 1
    assert imported.days["friday"] == DailyCounters(endorsements_to_be_issued="2/2")


@pytest.mark.parametrize(
    "raw, expected",
    [("3", 3), ("2.0", 2), ("3 fixes", 3), ("", 0), ("none yet", 0), (None, 0), (4, 4)],
)
def test_corrections_cells_parse_leniently(raw, expected):
    assert parse_int_cell(raw) == expected


def test_missing_week_number_is_absent():
    imported = weekly_workbook_to_import(write_grid(make_grid({7: ["1/1"]})))

    assert imported.week_number is None
    assert imported.days["monday"].endorsements_received == "1/1"


def test_truncated_sheet_falls_back_to_defaults():
    frame = pd.DataFrame([["", "Crewing Board"]])

    imported = read_weekly_grid(frame)

    assert imported.week_number is None
    assert all(counters == DailyCounters() for counters in imported.days.values())


def test_unreadable_weekly_workbook():
    with pytest.raises(ParseFailed):
        weekly_workbook_to_import(b"not a workbook", "Week_1.xlsx")
    with pytest.raises(ParseFailed):
        weekly_workbook_to_import(b"")


def test_export_layout_and_notes_block():
    week = add_correction_note(blank_week(7), "Fix COC for John")
    week = add_correction_note(week, "Resend SRA")
    week = toggle_correction_note(week, week.correction_notes[0].id)

    rows = weekly_rows(week)

    assert rows[0][1] == "Crewing Board"
    assert rows[1][6] == 7
    assert rows[3][1:6] == ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
    assert rows[7][0] == "Endorsements received"
    assert rows[13][0] == "Correction Notes"
    assert rows[14][:2] == ["1. Fix COC for John", "✓ DONE"]
    assert rows[15][:2] == ["2. Resend SRA", "○ PENDING"]
    assert workbook_filename(week) == "Week_7.xlsx"
