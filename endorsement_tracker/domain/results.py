"""Report model handed to the renderers."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Sequence

from .models import NextExpiring, OutstandingEntry, WeeklyTotals
from .rollup import RollupRow, WeekTotal

NOTE_TOKENS = ("{endorsements}", "{applications}", "{certificates}")


@dataclass(frozen=True)
class WeekRow:
    label: str
    per_seafarer: int | None
    per_endorsement: int


@dataclass(frozen=True)
class ReportModel:
    report_date: date
    week_number: int
    totals: WeeklyTotals
    weekly_rows: Sequence[WeekRow] = field(default_factory=tuple)
    weekly_total: int = 0
    notes: Sequence[str] = field(default_factory=tuple)
    next_expiring: NextExpiring | None = None
    outstanding: Sequence[OutstandingEntry] | None = None
    outstanding_all_cases: int = 0
    outstanding_can_be_issued: int = 0
    monthly: Sequence[RollupRow] = field(default_factory=tuple)

    @property
    def title(self) -> str:
        return f"Seafarers Status {self.report_date.strftime('%d-%m-%Y')}"


def render_notes(templates: Sequence[str], totals: WeeklyTotals) -> tuple[str, ...]:
    values = {
        "{endorsements}": str(totals.per_endorsement),
        "{applications}": str(totals.app_seafarer),
        "{certificates}": str(totals.app_cert),
    }
    rendered = []
    for template in templates:
        text = template
        for token in NOTE_TOKENS:
            text = text.replace(token, values[token])
        rendered.append(text)
    return tuple(rendered)


def assemble_report(
    report_date: date,
    week_number: int,
    totals: WeeklyTotals,
    previous_weeks: Sequence[WeekTotal],
    note_templates: Sequence[str],
    next_expiring: NextExpiring | None,
    outstanding: Sequence[OutstandingEntry] | None,
    monthly: Sequence[RollupRow],
) -> ReportModel:
    weekly_rows = [
        WeekRow(label=f"Week {week.week_number}", per_seafarer=None, per_endorsement=week.endorsements)
        for week in previous_weeks
    ]
    weekly_rows.append(
        WeekRow(label=f"Week {week_number}", per_seafarer=totals.per_seafarer, per_endorsement=totals.per_endorsement)
    )
    outstanding = tuple(outstanding) if outstanding is not None else None
    return ReportModel(
        report_date=report_date,
        week_number=week_number,
        totals=totals,
        weekly_rows=tuple(weekly_rows),
        weekly_total=sum(row.per_endorsement for row in weekly_rows),
        notes=render_notes(note_templates, totals),
        next_expiring=next_expiring,
        outstanding=outstanding,
        outstanding_all_cases=sum(entry.all_cases for entry in outstanding or ()),
        outstanding_can_be_issued=sum(entry.can_be_issued for entry in outstanding or ()),
        monthly=tuple(monthly),
    )
