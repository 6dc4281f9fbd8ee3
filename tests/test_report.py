from datetime import date

from endorsement_tracker.domain.models import NextExpiring, OutstandingEntry, WeeklyTotals
from endorsement_tracker.domain.rollup import RollupRow, WeekTotal
from endorsement_tracker.domain.results import assemble_report, render_notes
from endorsement_tracker.presentation.report_html import render_html

TOTALS = WeeklyTotals(per_seafarer=9, per_endorsement=21, app_seafarer=6, app_cert=14)


def make_report(**overrides):
    kwargs = dict(
        report_date=date(2025, 11, 14),
        week_number=46,
        totals=TOTALS,
        previous_weeks=[WeekTotal(2025, 44, 30, 12), WeekTotal(2025, 45, 25, 10)],
        note_templates=["Received {endorsements} endorsements.", "{applications} applications, {certificates} certs."],
        next_expiring=NextExpiring(date="2025-11-20", ship="Nordic", name="Jane <Doe>", company="-"),
        outstanding=[OutstandingEntry("November 2025", 2, 1), OutstandingEntry("December 2025", 5, 3)],
        monthly=[RollupRow("2025-11", "November 2025", 40, 30, 75, 10)],
    )
    kwargs.update(overrides)
    return assemble_report(**kwargs)


def test_render_notes_substitutes_tokens():
    notes = render_notes(
        ["We received {endorsements} endorsements.", "Plain note", "{applications}/{certificates}/{unknown}"],
        TOTALS,
    )

    assert notes == ("We received 21 endorsements.", "Plain note", "6/14/{unknown}")


def test_assemble_report_totals():
    report = make_report()

    assert [row.label for row in report.weekly_rows] == ["Week 44", "Week 45", "Week 46"]
    assert report.weekly_rows[0].per_seafarer is None
    assert report.weekly_rows[-1].per_seafarer == 9
    assert report.weekly_total == 30 + 25 + 21
    assert report.outstanding_all_cases == 7
    assert report.outstanding_can_be_issued == 4
    assert report.notes == ("Received 21 endorsements.", "6 applications, 14 certs.")
    assert report.title == "Seafarers Status 14-11-2025"


def test_assemble_report_without_case_file():
    report = make_report(outstanding=None, next_expiring=None, previous_weeks=[])

    assert report.outstanding is None
    assert report.outstanding_all_cases == 0
    assert report.weekly_total == 21


def test_render_html_sections():
    html = render_html(make_report())

    assert "<title>Seafarers Status 14-11-2025</title>" in html
    assert "Week 46 - Endorsements Received" in html
    assert "<td>Week 45</td><td>-</td><td>25</td>" in html
    assert "<td>Total</td><td>-</td><td>76</td>" in html
    assert "Received 21 endorsements." in html
    assert "Jane &lt;Doe&gt;" in html
    assert "<td>Total</td><td>7</td><td>4</td>" in html
    assert "<td>November 2025</td><td>40</td><td>30</td><td>75%</td><td>10</td>" in html


def test_render_html_skips_absent_sections():
    html = render_html(make_report(outstanding=None, next_expiring=None, monthly=[], note_templates=[]))

    assert "Outstanding End" not in html
    assert "Next SRA Expiring" not in html
    assert "Monthly Overview" not in html
    assert "Notes" not in html
