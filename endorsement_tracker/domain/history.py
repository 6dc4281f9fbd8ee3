"""Weekly snapshot ledger and month resolution for saved weeks."""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterator, Mapping

from .models import WeeklySnapshot, WeeklyTotals

CONFLICT_NONE = "none"
CONFLICT_EXISTS = "exists"


def week_year(week_number: int, today: date | None = None) -> int:
    """Guess which year a bare week number belongs to.

    Week numbers near the turn of the year are ambiguous: a late-December week
    saved in January belongs to the previous year, an early-January week saved
    in December to the next one.
    """
    today = today or date.today()
    if week_number >= 49 and today.month in (1, 2):
        return today.year - 1
    if week_number <= 2 and today.month in (11, 12):
        return today.year + 1
    return today.year


def week_monday(year: int, week_number: int) -> date:
    if week_number < 1:
        raise ValueError(f"Week number must be positive, got {week_number}")
    return date.fromisocalendar(year, 1, 1) + timedelta(weeks=week_number - 1)


def resolve_month_key(
    week_number: int,
    explicit_month: tuple[int, int] | None = None,
    today: date | None = None,
) -> tuple[int, int]:
    """Return ``(year, month)`` a week's figures are booked against.

    An explicit ``(year, month)`` override is used verbatim; otherwise the
    month containing the Monday of the week wins.
    """
    if explicit_month is not None:
        year, month = explicit_month
        if not 1 <= month <= 12:
            raise ValueError(f"Month out of range: {month}")
        return int(year), int(month)
    monday = week_monday(week_year(week_number, today), week_number)
    return monday.year, monday.month


def snapshot_key(year: int, week_number: int, explicit_month: tuple[int, int] | None = None) -> str:
    key = f"{year}-W{week_number}"
    if explicit_month is not None:
        month_year, month = explicit_month
        key += f"-{month_year}-{month:02d}"
    return key


def build_snapshot(
    week_number: int,
    totals: WeeklyTotals,
    explicit_month: tuple[int, int] | None = None,
    today: date | None = None,
    saved_at: datetime | None = None,
    endorsements: int | None = None,
    seafarers: int | None = None,
    certificates: int | None = None,
) -> tuple[str, WeeklySnapshot]:
    """Finalize a week into a ``(key, snapshot)`` pair.

    Manually entered figures take precedence over the computed totals.
    """
    year = week_year(week_number, today)
    month_year, month = resolve_month_key(week_number, explicit_month, today)
    snapshot = WeeklySnapshot(
        week_number=week_number,
        year=year,
        month=month,
        month_year=month_year,
        endorsements=totals.per_endorsement if endorsements is None else endorsements,
        seafarers=totals.per_seafarer if seafarers is None else seafarers,
        certificates=totals.app_cert if certificates is None else certificates,
        saved_at=saved_at or datetime.now(),
    )
    return snapshot_key(year, week_number, explicit_month), snapshot


class WeeklySnapshotStore:
    """Keyed ledger of finalized weeks.

    ``put`` replaces unconditionally; callers ask ``check_conflict`` first and
    only overwrite an existing key after the user confirmed it.
    """

    def __init__(self, snapshots: Mapping[str, WeeklySnapshot] | None = None) -> None:
        self._snapshots: dict[str, WeeklySnapshot] = dict(snapshots or {})

    def check_conflict(self, key: str) -> str:
        return CONFLICT_EXISTS if key in self._snapshots else CONFLICT_NONE

    def put(self, key: str, snapshot: WeeklySnapshot) -> None:
        self._snapshots[key] = snapshot

    def delete(self, key: str) -> None:
        self._snapshots.pop(key, None)

    def get(self, key: str) -> WeeklySnapshot | None:
        return self._snapshots.get(key)

    def items(self) -> list[tuple[str, WeeklySnapshot]]:
        return [(key, self._snapshots[key]) for key in sorted(self._snapshots)]

    def snapshots(self) -> list[WeeklySnapshot]:
        return [self._snapshots[key] for key in sorted(self._snapshots)]

    def as_dict(self) -> dict[str, WeeklySnapshot]:
        return dict(self._snapshots)

    def __contains__(self, key: object) -> bool:
        return key in self._snapshots

    def __len__(self) -> int:
        return len(self._snapshots)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._snapshots))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WeeklySnapshotStore):
            return NotImplemented
        return self._snapshots == other._snapshots
