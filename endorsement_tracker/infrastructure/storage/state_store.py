"""JSON storage for the persisted tracker state.

The document shape is ``{weeklyData, outstandingEnd, nextSRA, weeklyHistory,
reportNotes, updatedAt}`` with camelCase keys, so a cache written by one
session can be read by any other.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any

from endorsement_tracker.config import SETTINGS
from endorsement_tracker.domain.models import (
    CorrectionNote,
    DailyCounters,
    NextExpiring,
    OutstandingEntry,
    WEEKDAYS,
    WeeklyData,
    WeeklySnapshot,
)
from endorsement_tracker.domain.repositories import PersistedState, StateRepository
from endorsement_tracker.errors import SyncUnavailable
from endorsement_tracker.infrastructure.parsing.utils import parse_int_cell

logger = logging.getLogger(__name__)

_COUNTER_KEYS = {
    "endorsements_to_be_issued": "endorsementsToBeIssued",
    "endorsements_ready_to_be_issued": "endorsementsReadyToBeIssued",
    "weeks_ahead_sra_exp": "weeksAheadSRAExp",
    "endorsements_received": "endorsementsReceived",
    "applications_received": "applicationsReceived",
    "sending_sra": "sendingSRA",
    "sending_endorsements": "sendingEndorsements",
    "corrections": "corrections",
}

_SNAPSHOT_KEYS = {
    "week_number": "weekNumber",
    "year": "year",
    "month": "month",
    "month_year": "monthYear",
    "endorsements": "endorsements",
    "seafarers": "seafarers",
    "certificates": "certificates",
}


def _parse_timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


def weekly_data_to_dict(weekly: WeeklyData) -> dict[str, Any]:
    return {
        "weekNumber": weekly.week_number,
        "days": {
            day: {camel: getattr(weekly.days[day], name) for name, camel in _COUNTER_KEYS.items()}
            for day in WEEKDAYS
        },
        "correctionNotes": [asdict(note) for note in weekly.correction_notes],
    }


def _counters_from_dict(raw: Any) -> DailyCounters:
    if not isinstance(raw, dict):
        return DailyCounters()
    defaults = DailyCounters()
    values: dict[str, Any] = {}
    for name, camel in _COUNTER_KEYS.items():
        value = raw.get(camel, getattr(defaults, name))
        if name == "corrections":
            values[name] = parse_int_cell(value)
        else:
            values[name] = "" if value is None else str(value)
    return DailyCounters(**values)


def _note_from_dict(raw: Any) -> CorrectionNote | None:
    if not isinstance(raw, dict):
        return None
    try:
        note_id = int(raw.get("id"))
    except (TypeError, ValueError, OverflowError):
        return None
    return CorrectionNote(id=note_id, text=str(raw.get("text", "")), completed=bool(raw.get("completed")))


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def weekly_data_from_dict(raw: Any) -> WeeklyData:
    raw = _as_dict(raw)
    days_raw = _as_dict(raw.get("days"))
    notes = tuple(
        note
        for note in (_note_from_dict(item) for item in _as_list(raw.get("correctionNotes")))
        if note is not None
    )
    return WeeklyData(
        week_number=max(1, parse_int_cell(raw.get("weekNumber"), default=1)),
        days={day: _counters_from_dict(days_raw.get(day)) for day in WEEKDAYS},
        correction_notes=notes,
    )


def snapshot_to_dict(snapshot: WeeklySnapshot) -> dict[str, Any]:
    data = {camel: getattr(snapshot, name) for name, camel in _SNAPSHOT_KEYS.items()}
    data["savedAt"] = snapshot.saved_at.isoformat()
    return data


def snapshot_from_dict(raw: dict[str, Any]) -> WeeklySnapshot:
    values = {name: parse_int_cell(raw.get(camel)) for name, camel in _SNAPSHOT_KEYS.items()}
    return WeeklySnapshot(**values, saved_at=_parse_timestamp(raw.get("savedAt")) or datetime.fromtimestamp(0))


def state_to_document(state: PersistedState) -> dict[str, Any]:
    return {
        "weeklyData": weekly_data_to_dict(state.weekly_data),
        "outstandingEnd": (
            [
                {"month": entry.month, "allCases": entry.all_cases, "canBeIssued": entry.can_be_issued}
                for entry in state.outstanding_end
            ]
            if state.outstanding_end is not None
            else None
        ),
        "nextSRA": asdict(state.next_sra) if state.next_sra is not None else None,
        "weeklyHistory": {key: snapshot_to_dict(snap) for key, snap in sorted(state.weekly_history.items())},
        "reportNotes": list(state.report_notes),
        "updatedAt": state.updated_at.isoformat() if state.updated_at else None,
    }


def state_from_document(doc: dict[str, Any]) -> PersistedState:
    outstanding_raw = doc.get("outstandingEnd")
    next_raw = doc.get("nextSRA")
    return PersistedState(
        weekly_data=weekly_data_from_dict(doc.get("weeklyData")),
        outstanding_end=(
            tuple(
                OutstandingEntry(
                    month=str(item.get("month", "")),
                    all_cases=parse_int_cell(item.get("allCases")),
                    can_be_issued=parse_int_cell(item.get("canBeIssued")),
                )
                for item in outstanding_raw
                if isinstance(item, dict)
            )
            if isinstance(outstanding_raw, list)
            else None
        ),
        next_sra=(
            NextExpiring(
                date=str(next_raw.get("date", "")),
                ship=str(next_raw.get("ship", "")),
                name=str(next_raw.get("name", "")),
                company=str(next_raw.get("company", "-")),
            )
            if isinstance(next_raw, dict)
            else None
        ),
        weekly_history={
            str(key): snapshot_from_dict(value)
            for key, value in _as_dict(doc.get("weeklyHistory")).items()
            if isinstance(value, dict)
        },
        report_notes=tuple(
            str(note) for note in _as_list(doc.get("reportNotes")) or SETTINGS.default_report_notes
        ),
        updated_at=_parse_timestamp(doc.get("updatedAt")),
    )


class JsonFileStateRepository(StateRepository):
    """Local cache: one JSON document on disk."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = Path(path or SETTINGS.state_path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> PersistedState | None:
        if not self._path.exists():
            return None
        try:
            doc = json.loads(self._path.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, ValueError):
            logger.warning("Ignoring corrupt state file %s", self._path)
            return None
        if not isinstance(doc, dict):
            return None
        return state_from_document(doc)

    def save(self, state: PersistedState) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(
            json.dumps(state_to_document(state), ensure_ascii=False, indent=2, sort_keys=True),
            encoding="utf-8",
        )
        tmp_path.replace(self._path)


class SharedFolderStateRepository(JsonFileStateRepository):
    """Shared store kept in a synced folder (network drive, cloud sync client).

    Any filesystem failure is reported as ``SyncUnavailable``.
    """

    def load(self) -> PersistedState | None:
        try:
            return super().load()
        except OSError as exc:
            raise SyncUnavailable(f"Shared state at {self.path} is unreachable: {exc}") from exc

    def save(self, state: PersistedState) -> None:
        try:
            super().save(state)
        except OSError as exc:
            raise SyncUnavailable(f"Shared state at {self.path} is unreachable: {exc}") from exc
