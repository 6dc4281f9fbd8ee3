from datetime import date, datetime

import pytest

from endorsement_tracker.domain.models import (
    DailyCounters,
    Malformed,
    PairCount,
    WEEKDAYS,
    WeeklyData,
    pair_or_zero,
    parse_pair,
)
from endorsement_tracker.domain.weekly import (
    add_correction_note,
    blank_week,
    compute_totals,
    current_week_number,
    delete_correction_note,
    toggle_correction_note,
    update_day,
)


def make_week(**days: DailyCounters) -> WeeklyData:
    return WeeklyData(week_number=46, days=days)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("3/5", PairCount(3, 5)),
        (" 12 / 0 ", PairCount(12, 0)),
        ("0/0", PairCount(0, 0)),
    ],
)
def test_parse_pair_accepts_counters(raw, expected):
    assert parse_pair(raw) == expected


@pytest.mark.parametrize("raw", ["", "3", "3/", "/5", "a/b", "3/5/7", "-1/2", "1.5/2", None])
def test_parse_pair_tags_malformed_input(raw):
    result = parse_pair(raw)

    assert isinstance(result, Malformed)
    assert pair_or_zero(raw) == PairCount(0, 0)


def test_weekly_data_always_has_five_weekdays():
    week = WeeklyData(week_number=3, days={"monday": DailyCounters(corrections=2)})

    assert tuple(week.days) == WEEKDAYS
    assert week.days["monday"].corrections == 2
    assert week.days["friday"] == DailyCounters()


def test_weekly_data_rejects_unknown_days():
    with pytest.raises(ValueError):
        WeeklyData(week_number=3, days={"saturday": DailyCounters()})


def test_compute_totals_sums_received_counters():
    week = make_week(
        monday=DailyCounters(endorsements_received="3/5", applications_received="2/4"),
        wednesday=DailyCounters(endorsements_received="1/1", applications_received="0/2"),
        friday=DailyCounters(endorsements_to_be_issued="99/99"),
    )

    totals = compute_totals(week)

    assert (totals.per_seafarer, totals.per_endorsement) == (4, 6)
    assert (totals.app_seafarer, totals.app_cert) == (2, 6)
    assert totals.malformed == ()


def test_compute_totals_reports_malformed_cells():
    week = make_week(
        monday=DailyCounters(endorsements_received="3/5"),
        tuesday=DailyCounters(endorsements_received="three/5", applications_received=""),
    )

    totals = compute_totals(week)

    assert totals.per_seafarer == 3
    assert totals.per_endorsement == 5
    assert totals.malformed == ("tuesday.endorsements_received", "tuesday.applications_received")


def test_update_day_replaces_one_counter():
    week = blank_week(10)

    updated = update_day(week, "tuesday", "endorsements_received", "4/7")
    updated = update_day(updated, "tuesday", "corrections", "3")

    assert updated.days["tuesday"].endorsements_received == "4/7"
    assert updated.days["tuesday"].corrections == 3
    assert week.days["tuesday"] == DailyCounters()
    assert updated.week_number == 10


def test_update_day_validates_day_and_field():
    week = blank_week(10)

    with pytest.raises(ValueError):
        update_day(week, "sunday", "corrections", 1)
    with pytest.raises(ValueError):
        update_day(week, "monday", "unknown", "1/1")


def test_correction_notes_lifecycle():
    now = datetime(2025, 11, 10, 9, 30)
    week = add_correction_note(blank_week(46), "Fix COC number for John", now=now)
    week = add_correction_note(week, "Resend SRA", now=now)
    first, second = week.correction_notes

    assert first.id != second.id
    assert not first.completed

    week = toggle_correction_note(week, first.id)
    assert week.correction_notes[0].completed
    week = toggle_correction_note(week, first.id)
    assert not week.correction_notes[0].completed

    week = delete_correction_note(week, second.id)
    assert [note.text for note in week.correction_notes] == ["Fix COC number for John"]


def test_blank_notes_are_ignored():
    week = blank_week(46)

    assert add_correction_note(week, "   ") is week


def test_is_blank():
    week = blank_week(5)

    assert week.is_blank()
    assert not update_day(week, "monday", "sending_sra", "x").is_blank()
    assert not add_correction_note(week, "note").is_blank()


@pytest.mark.parametrize(
    "today, expected",
    [
        (date(2025, 1, 1), 1),
        (date(2025, 1, 7), 1),
        (date(2025, 1, 8), 2),
        (date(2025, 1, 9), 2),
        (date(2025, 11, 19), 47),
        (date(2025, 12, 15), 50),
    ],
)
def test_current_week_number(today, expected):
    assert current_week_number(today) == expected
    assert blank_week(today=today).week_number == expected
