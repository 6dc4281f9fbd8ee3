"""Application-level session context and its persisted form."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Mapping, Sequence

from endorsement_tracker.config import LEGACY_MONTHLY_ENDORSEMENTS, SETTINGS
from endorsement_tracker.domain.history import WeeklySnapshotStore
from endorsement_tracker.domain.models import CaseRecord, NextExpiring, OutstandingEntry, WeeklyData
from endorsement_tracker.domain.repositories import PersistedState
from endorsement_tracker.domain.weekly import blank_week


@dataclass(slots=True)
class TrackerSession:
    """Everything one editing session works on, passed explicitly to each use case."""

    weekly_data: WeeklyData
    history: WeeklySnapshotStore = field(default_factory=WeeklySnapshotStore)
    case_records: Sequence[CaseRecord] = ()
    outstanding: Sequence[OutstandingEntry] | None = None
    next_expiring: NextExpiring | None = None
    report_notes: Sequence[str] = field(default_factory=lambda: SETTINGS.default_report_notes)
    monthly_baseline: Mapping[str, int] = field(default_factory=lambda: dict(LEGACY_MONTHLY_ENDORSEMENTS))
    updated_at: datetime | None = None

    @classmethod
    def new(cls, today: date | None = None) -> "TrackerSession":
        return cls(weekly_data=blank_week(today=today))

    @classmethod
    def from_state(cls, state: PersistedState) -> "TrackerSession":
        return cls(
            weekly_data=state.weekly_data,
            history=WeeklySnapshotStore(state.weekly_history),
            outstanding=tuple(state.outstanding_end) if state.outstanding_end is not None else None,
            next_expiring=state.next_sra,
            report_notes=tuple(state.report_notes) or SETTINGS.default_report_notes,
            updated_at=state.updated_at,
        )

    def to_state(self) -> PersistedState:
        return PersistedState(
            weekly_data=self.weekly_data,
            outstanding_end=tuple(self.outstanding) if self.outstanding is not None else None,
            next_sra=self.next_expiring,
            weekly_history=self.history.as_dict(),
            report_notes=tuple(self.report_notes),
            updated_at=self.updated_at,
        )

    def touch(self, now: datetime | None = None) -> None:
        self.updated_at = now or datetime.now()


@dataclass(slots=True, frozen=True)
class IngestResult:
    records: int
    dated: int
    outstanding: Sequence[OutstandingEntry]
    next_expiring: NextExpiring | None
