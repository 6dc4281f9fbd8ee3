"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Protocol, Sequence

from .models import (
    CaseRecord,
    DailyCounters,
    NextExpiring,
    OutstandingEntry,
    WeeklyData,
    WeeklySnapshot,
)


@dataclass(frozen=True)
class WeeklyImport:
    """Counters read from a weekly workbook; notes stay with the session."""

    week_number: int | None
    days: Mapping[str, DailyCounters]


@dataclass(frozen=True)
class PersistedState:
    """The document kept in the local cache or the shared store."""

    weekly_data: WeeklyData
    outstanding_end: Sequence[OutstandingEntry] | None = None
    next_sra: NextExpiring | None = None
    weekly_history: Mapping[str, WeeklySnapshot] = field(default_factory=dict)
    report_notes: Sequence[str] = field(default_factory=tuple)
    updated_at: datetime | None = None


class CaseRepository(Protocol):
    """Provides case records from an uploaded case file."""

    def list_case_records(self) -> Sequence[CaseRecord]:
        ...


class WeeklyWorkbookRepository(Protocol):
    """Provides one week of counters from an imported workbook."""

    def load_week(self) -> WeeklyImport:
        ...


class StateRepository(Protocol):
    """Loads and saves the persisted tracker state document."""

    def load(self) -> PersistedState | None:
        ...

    def save(self, state: PersistedState) -> None:
        ...
