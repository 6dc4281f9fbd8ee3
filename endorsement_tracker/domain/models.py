"""Domain models for the endorsement tracker.

Case records come from the uploaded case file, weekly data is the crewboard
being edited this week, and weekly snapshots are the finalized history the
monthly views are derived from.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday")

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def month_label(year: int, month: int) -> str:
    return f"{MONTH_NAMES[month - 1]} {year}"


def period_key(year: int, month: int) -> str:
    return f"{year}-{month:02d}"


@dataclass(frozen=True)
class CertificateRef:
    kind: str
    value: str


@dataclass(frozen=True)
class CaseRecord:
    """One row of the uploaded case file."""

    sra_expiry: date | None
    certificate_refs: tuple[CertificateRef, ...] = ()
    paid: bool = False
    ship: str = ""
    name: str = ""
    invoice_address: str = ""


@dataclass(frozen=True)
class PairCount:
    """A parsed ``"X/Y"`` counter."""

    first: int
    second: int


@dataclass(frozen=True)
class Malformed:
    raw: str


_PAIR_PATTERN = re.compile(r"^\s*(\d+)\s*/\s*(\d+)\s*$")


def parse_pair(value: object) -> PairCount | Malformed:
    text = "" if value is None else str(value)
    match = _PAIR_PATTERN.match(text)
    if not match:
        return Malformed(text)
    return PairCount(int(match.group(1)), int(match.group(2)))


def pair_or_zero(value: object) -> PairCount:
    """Display helper: malformed counters show as 0/0."""
    parsed = parse_pair(value)
    if isinstance(parsed, Malformed):
        return PairCount(0, 0)
    return parsed


DAILY_FIELD_LABELS = {
    "endorsements_to_be_issued": "Endorsements to be issued",
    "endorsements_ready_to_be_issued": "Endorsements ready to be issued",
    "weeks_ahead_sra_exp": "Weeks ahead / SRA Exp.",
    "endorsements_received": "Endorsements received",
    "applications_received": "Applications / Cert",
    "sending_sra": "Sending SRA",
    "sending_endorsements": "Sending Endorsements",
    "corrections": "Corrections",
}


@dataclass(frozen=True)
class DailyCounters:
    endorsements_to_be_issued: str = "0/0"
    endorsements_ready_to_be_issued: str = "0/0"
    weeks_ahead_sra_exp: str = "0/0"
    endorsements_received: str = "0/0"
    applications_received: str = "0/0"
    sending_sra: str = ""
    sending_endorsements: str = ""
    corrections: int = 0

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))


@dataclass(frozen=True)
class CorrectionNote:
    id: int
    text: str
    completed: bool = False


@dataclass(frozen=True)
class WeeklyData:
    """The in-progress week. Always holds exactly one entry per weekday."""

    week_number: int
    days: dict[str, DailyCounters] = field(default_factory=dict)
    correction_notes: tuple[CorrectionNote, ...] = ()

    def __post_init__(self) -> None:
        unknown = set(self.days) - set(WEEKDAYS)
        if unknown:
            raise ValueError(f"Unknown weekdays: {sorted(unknown)}")
        days = {day: self.days.get(day) or DailyCounters() for day in WEEKDAYS}
        object.__setattr__(self, "days", days)
        object.__setattr__(self, "correction_notes", tuple(self.correction_notes))

    def is_blank(self) -> bool:
        return not self.correction_notes and all(
            counters == DailyCounters() for counters in self.days.values()
        )


@dataclass(frozen=True)
class WeeklyTotals:
    per_seafarer: int = 0
    per_endorsement: int = 0
    app_seafarer: int = 0
    app_cert: int = 0
    malformed: tuple[str, ...] = ()


@dataclass(frozen=True)
class OutstandingEntry:
    month: str
    all_cases: int
    can_be_issued: int


@dataclass(frozen=True)
class NextExpiring:
    date: str
    ship: str
    name: str
    company: str


@dataclass(frozen=True)
class WeeklySnapshot:
    week_number: int
    year: int
    month: int
    month_year: int
    endorsements: int
    seafarers: int
    certificates: int
    saved_at: datetime

    @property
    def period(self) -> str:
        return period_key(self.month_year, self.month)


@dataclass(frozen=True)
class MonthlyAggregate:
    endorsements: int = 0
    certificates: int = 0

    @property
    def processing_rate(self) -> int:
        if self.endorsements == 0:
            return 0
        ratio = Decimal(self.certificates) / Decimal(self.endorsements) * 100
        return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @property
    def net_flow(self) -> int:
        return self.endorsements - self.certificates
