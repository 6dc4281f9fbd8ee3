"""Printable HTML rendering of the weekly report model."""
from __future__ import annotations

from html import escape

from endorsement_tracker.domain.results import ReportModel

STYLE = """
    body { font-family: Arial, sans-serif; margin: 40px; color: #333; }
    h1 { color: #C00000; text-align: center; border-bottom: 2px solid #C00000; padding-bottom: 10px; }
    .section-title { background: #C00000; color: white; padding: 8px 15px; margin: 20px 0 10px 0; font-weight: bold; }
    table { border-collapse: collapse; margin: 10px 0; width: 100%; }
    th, td { border: 1px solid #ccc; padding: 8px 12px; text-align: center; }
    th { background: #404040; color: white; }
    .total-row { background: #f2f2f2; font-weight: bold; }
    .notes { margin: 10px 0; padding-left: 20px; }
    .sra-alert p { margin: 5px 0; }
    .sra-alert span { display: inline-block; width: 120px; font-weight: bold; color: #C00000; }
    .green-header th { background: #70AD47; }
    @media print { body { margin: 20px; } }
"""


def _row(cells: list[object], css_class: str | None = None) -> str:
    attr = f' class="{css_class}"' if css_class else ""
    return f"<tr{attr}>" + "".join(f"<td>{escape(str(cell))}</td>" for cell in cells) + "</tr>"


def _header(columns: list[str]) -> str:
    return "<tr>" + "".join(f"<th>{escape(col)}</th>" for col in columns) + "</tr>"


def _weekly_section(report: ReportModel) -> str:
    body = [_header(["End Received", "Per Seafarer", "Per Endorsement Issued"])]
    for row in report.weekly_rows:
        seafarer = "-" if row.per_seafarer is None else row.per_seafarer
        body.append(_row([row.label, seafarer, row.per_endorsement]))
    body.append(_row(["Total", "-", report.weekly_total], "total-row"))
    return (
        f'<div class="section-title">Week {report.week_number} - Endorsements Received</div>'
        f"<table>{''.join(body)}</table>"
    )


def _notes_section(report: ReportModel) -> str:
    if not report.notes:
        return ""
    items = "".join(f"<p>• {escape(note)}</p>" for note in report.notes)
    return f'<div class="section-title">Notes</div><div class="notes">{items}</div>'


def _next_expiring_section(report: ReportModel) -> str:
    item = report.next_expiring
    if item is None:
        return ""
    lines = [("Date", item.date), ("Ship", item.ship), ("Seafarer", item.name), ("Company", item.company)]
    body = "".join(f"<p><span>{label}:</span> {escape(value)}</p>" for label, value in lines)
    return f'<div class="section-title">Next SRA Expiring</div><div class="sra-alert">{body}</div>'


def _outstanding_section(report: ReportModel) -> str:
    if report.outstanding is None:
        return ""
    body = [_header(["Outstanding End", "All Cases", "Can Be Issued"])]
    for entry in report.outstanding:
        body.append(_row([entry.month, entry.all_cases, entry.can_be_issued]))
    body.append(
        _row(["Total", report.outstanding_all_cases, report.outstanding_can_be_issued], "total-row")
    )
    return f'<div class="section-title">Outstanding End</div><table>{"".join(body)}</table>'


def _monthly_section(report: ReportModel) -> str:
    if not report.monthly:
        return ""
    body = [_header(["Month", "Endorsements Received", "Certificates", "Processing Rate", "Net Flow"])]
    for row in report.monthly:
        body.append(
            _row([row.label, row.endorsements, row.certificates, f"{row.processing_rate}%", row.net_flow])
        )
    return (
        '<div class="section-title">Monthly Overview - Endorsements Received</div>'
        f'<table class="green-header">{"".join(body)}</table>'
    )


def render_html(report: ReportModel) -> str:
    title = escape(report.title)
    sections = "".join(
        [
            _weekly_section(report),
            _notes_section(report),
            _next_expiring_section(report),
            _outstanding_section(report),
            _monthly_section(report),
        ]
    )
    return (
        "<!DOCTYPE html><html><head>"
        f'<meta charset="UTF-8"><title>{title}</title><style>{STYLE}</style>'
        f"</head><body><h1>{title}</h1>{sections}</body></html>"
    )
