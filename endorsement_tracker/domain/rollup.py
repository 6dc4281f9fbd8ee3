"""Monthly and weekly rollups folded from the weekly snapshot ledger."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, Mapping

from .models import MonthlyAggregate, WeeklySnapshot, month_label


@dataclass(frozen=True)
class RollupRow:
    period: str
    label: str
    endorsements: int
    certificates: int
    processing_rate: int
    net_flow: int


@dataclass(frozen=True)
class WeekTotal:
    year: int
    week_number: int
    endorsements: int
    seafarers: int


def compute(snapshots: Iterable[WeeklySnapshot]) -> dict[str, MonthlyAggregate]:
    """Group snapshots by booked month and sum them.

    A week split across two explicit months contributes to each month
    independently.
    """
    sums: dict[str, list[int]] = defaultdict(lambda: [0, 0])
    for snapshot in snapshots:
        bucket = sums[snapshot.period]
        bucket[0] += snapshot.endorsements
        bucket[1] += snapshot.certificates
    return {
        period: MonthlyAggregate(endorsements=endorsements, certificates=certificates)
        for period, (endorsements, certificates) in sorted(sums.items())
    }


def with_baseline(
    rollup: Mapping[str, MonthlyAggregate],
    baseline: Mapping[str, int],
) -> dict[str, MonthlyAggregate]:
    """Fill months with no snapshots from a legacy endorsements-only baseline."""
    merged = {period: MonthlyAggregate(endorsements=value) for period, value in baseline.items()}
    merged.update(rollup)
    return dict(sorted(merged.items()))


def _label(period: str) -> str:
    year, month = period.split("-")
    return month_label(int(year), int(month))


def rows(rollup: Mapping[str, MonthlyAggregate], descending: bool = False) -> list[RollupRow]:
    return [
        RollupRow(
            period=period,
            label=_label(period),
            endorsements=aggregate.endorsements,
            certificates=aggregate.certificates,
            processing_rate=aggregate.processing_rate,
            net_flow=aggregate.net_flow,
        )
        for period, aggregate in sorted(rollup.items(), reverse=descending)
    ]


def backlog_series(rollup: Mapping[str, MonthlyAggregate]) -> list[tuple[str, int]]:
    """Running backlog for trend charts, oldest month first."""
    series: list[tuple[str, int]] = []
    backlog = 0
    for period, aggregate in sorted(rollup.items()):
        backlog += aggregate.certificates - aggregate.endorsements
        series.append((period, backlog))
    return series


def weekly_totals(snapshots: Iterable[WeeklySnapshot]) -> list[WeekTotal]:
    """Per-week totals, merging the parts of a week split across months."""
    sums: dict[tuple[int, int], list[int]] = defaultdict(lambda: [0, 0])
    for snapshot in snapshots:
        bucket = sums[(snapshot.year, snapshot.week_number)]
        bucket[0] += snapshot.endorsements
        bucket[1] += snapshot.seafarers
    return [
        WeekTotal(year=year, week_number=week_number, endorsements=endorsements, seafarers=seafarers)
        for (year, week_number), (endorsements, seafarers) in sorted(sums.items())
    ]
