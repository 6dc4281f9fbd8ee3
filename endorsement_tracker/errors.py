"""Error taxonomy for the endorsement tracker.

None of these are fatal to the process; each one narrows the scope of the
failure (one record, one file, one remote write) while keeping the data the
user already entered.
"""
from __future__ import annotations


class TrackerError(Exception):
    """Base class for tracker errors."""


class UnparseableDate(TrackerError, ValueError):
    """A date cell could not be interpreted. Record-level; callers skip the record."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Unparseable date: {value!r}")
        self.value = value


class ParseFailed(TrackerError):
    """A whole uploaded file could not be read or decoded."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Could not read {source}: {reason}")
        self.source = source
        self.reason = reason


class SyncUnavailable(TrackerError):
    """The shared remote store could not be reached."""


class DuplicateHistoryKey(TrackerError):
    """A weekly snapshot already exists under this key and overwrite was not confirmed."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Week {key} is already saved in history")
        self.key = key
