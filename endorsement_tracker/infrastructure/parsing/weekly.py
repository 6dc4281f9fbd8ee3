"""Weekly crewboard workbook: fixed-position grid layout and reader.

The layout is declared once in ``WEEKLY_GRID`` and shared by the reader here
and the writer in ``presentation.weekly_workbook``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import pandas as pd

from endorsement_tracker.domain.models import DailyCounters, WEEKDAYS
from endorsement_tracker.domain.repositories import WeeklyImport
from endorsement_tracker.infrastructure.parsing.utils import cell_text, parse_int_cell, read_first_sheet

logger = logging.getLogger(__name__)

TITLE_CELL = (0, 1)
WEEK_LABEL_CELL = (1, 5)
WEEK_NUMBER_CELL = (1, 6)
DAY_HEADER_ROW = 3
GRID_WIDTH = 7
DAY_COLUMNS = {day: index + 1 for index, day in enumerate(WEEKDAYS)}
DAY_LABELS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")


def _pair_cell(value: object) -> str:
    return cell_text(value) or "0/0"


@dataclass(frozen=True)
class GridRow:
    row_index: int
    field: str
    label: str
    parser: Callable[[object], object]


WEEKLY_GRID: tuple[GridRow, ...] = (
    GridRow(4, "endorsements_to_be_issued", "Endorsements to be issued", _pair_cell),
    GridRow(5, "endorsements_ready_to_be_issued", "Endorsements ready to be issued", _pair_cell),
    GridRow(6, "weeks_ahead_sra_exp", "Weeks ahead/     SRA Exp.", _pair_cell),
    GridRow(7, "endorsements_received", "Endorsements received", _pair_cell),
    GridRow(8, "applications_received", "Applications / Cert per app", _pair_cell),
    GridRow(9, "sending_sra", "Sending SRA", cell_text),
    GridRow(10, "sending_endorsements", "Sending Endorsements", cell_text),
    GridRow(11, "corrections", "Corrections", parse_int_cell),
)


def _cell(frame: pd.DataFrame, row: int, column: int) -> object:
    if row < frame.shape[0] and column < frame.shape[1]:
        return frame.iat[row, column]
    return None


def read_weekly_grid(frame: pd.DataFrame) -> WeeklyImport:
    raw_week = cell_text(_cell(frame, *WEEK_NUMBER_CELL))
    week_number = parse_int_cell(raw_week, default=0) or None
    if week_number is None:
        logger.warning("Weekly workbook has no week number in G2 (found %r)", raw_week)

    days: dict[str, DailyCounters] = {}
    for day, column in DAY_COLUMNS.items():
        values = {
            grid_row.field: grid_row.parser(_cell(frame, grid_row.row_index, column))
            for grid_row in WEEKLY_GRID
        }
        days[day] = DailyCounters(**values)
    return WeeklyImport(week_number=week_number, days=days)


def weekly_workbook_to_import(data: bytes, source_name: str = "weekly workbook") -> WeeklyImport:
    frame = read_first_sheet(data, source_name, header=None, dtype=str, keep_default_na=False)
    return read_weekly_grid(frame)
