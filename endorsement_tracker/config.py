"""Central configuration for the endorsement tracker package."""
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"
REPORT_DIR = DATA_DIR / "reports"

# Spreadsheet serial day 0, including the 1900 leap-year quirk.
EXCEL_EPOCH = date(1899, 12, 30)

DEFAULT_REPORT_NOTES = (
    "This week we received a total of {endorsements} endorsements.",
    "This week we received {applications} applications - we have submitted {certificates} certificates.",
)

# Endorsements received per month before weekly snapshots were kept.
LEGACY_MONTHLY_ENDORSEMENTS = {
    "2024-10": 1013, "2024-11": 1139, "2024-12": 1345,
    "2025-01": 745, "2025-02": 875, "2025-03": 1061,
    "2025-04": 1084, "2025-05": 1315, "2025-06": 1029,
    "2025-07": 2178, "2025-08": 1398, "2025-09": 1090,
}


@dataclass(slots=True, frozen=True)
class Settings:
    debounce_seconds: float
    report_history_weeks: int
    state_path: Path
    shared_state_path: Path | None
    report_dir: Path
    excel_epoch: date
    default_report_notes: tuple[str, ...]


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _path_env(name: str) -> Path | None:
    raw = os.environ.get(name)
    return Path(raw) if raw else None


SETTINGS = Settings(
    debounce_seconds=_float_env("ENDORSEMENT_DEBOUNCE_SECONDS", 1.0),
    report_history_weeks=4,
    state_path=Path(os.environ.get("ENDORSEMENT_STATE_PATH") or DATA_DIR / "state.json"),
    shared_state_path=_path_env("ENDORSEMENT_SHARED_STATE_PATH"),
    report_dir=REPORT_DIR,
    excel_epoch=EXCEL_EPOCH,
    default_report_notes=DEFAULT_REPORT_NOTES,
)
