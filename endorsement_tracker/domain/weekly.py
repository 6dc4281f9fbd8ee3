"""Operations on the in-progress week (crewboard)."""
from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

from .models import (
    DailyCounters,
    CorrectionNote,
    Malformed,
    WEEKDAYS,
    WeeklyData,
    WeeklyTotals,
    parse_pair,
)


def current_week_number(today: date | None = None) -> int:
    today = today or date.today()
    days = (today - date(today.year, 1, 1)).days
    # a partial week counts, so day 7 already starts week 2
    return days // 7 + 1


def blank_week(week_number: int | None = None, today: date | None = None) -> WeeklyData:
    if week_number is None:
        week_number = current_week_number(today)
    return WeeklyData(week_number=week_number)


def update_day(week: WeeklyData, day: str, field_name: str, value: object) -> WeeklyData:
    if day not in WEEKDAYS:
        raise ValueError(f"Unknown weekday: {day!r}")
    if field_name not in DailyCounters.field_names():
        raise ValueError(f"Unknown counter field: {field_name!r}")
    if field_name == "corrections":
        value = int(value)
    else:
        value = "" if value is None else str(value)
    days = dict(week.days)
    days[day] = replace(days[day], **{field_name: value})
    return replace(week, days=days)


def add_correction_note(week: WeeklyData, text: str, now: datetime | None = None) -> WeeklyData:
    text = (text or "").strip()
    if not text:
        return week
    now = now or datetime.now()
    note_id = int(now.timestamp() * 1000)
    taken = {note.id for note in week.correction_notes}
    while note_id in taken:
        note_id += 1
    note = CorrectionNote(id=note_id, text=text, completed=False)
    return replace(week, correction_notes=week.correction_notes + (note,))


def toggle_correction_note(week: WeeklyData, note_id: int) -> WeeklyData:
    notes = tuple(
        replace(note, completed=not note.completed) if note.id == note_id else note
        for note in week.correction_notes
    )
    return replace(week, correction_notes=notes)


def delete_correction_note(week: WeeklyData, note_id: int) -> WeeklyData:
    notes = tuple(note for note in week.correction_notes if note.id != note_id)
    return replace(week, correction_notes=notes)


def compute_totals(week: WeeklyData) -> WeeklyTotals:
    """Sum the received counters over the five weekdays.

    Malformed cells contribute nothing and are reported by ``"day.field"``
    so the caller can flag them instead of silently treating them as zero.
    """
    per_seafarer = per_endorsement = app_seafarer = app_cert = 0
    malformed: list[str] = []
    for day in WEEKDAYS:
        counters = week.days[day]
        received = parse_pair(counters.endorsements_received)
        if isinstance(received, Malformed):
            malformed.append(f"{day}.endorsements_received")
        else:
            per_seafarer += received.first
            per_endorsement += received.second
        applications = parse_pair(counters.applications_received)
        if isinstance(applications, Malformed):
            malformed.append(f"{day}.applications_received")
        else:
            app_seafarer += applications.first
            app_cert += applications.second
    return WeeklyTotals(
        per_seafarer=per_seafarer,
        per_endorsement=per_endorsement,
        app_seafarer=app_seafarer,
        app_cert=app_cert,
        malformed=tuple(malformed),
    )
