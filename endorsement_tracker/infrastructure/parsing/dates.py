"""Normalization of heterogeneous date cells into calendar dates.

Case exports mix spreadsheet serial numbers, ISO strings and day-first
strings. Everything is reduced to a plain ``datetime.date`` in UTC terms;
anything that cannot be read comes back as ``None`` and the caller treats the
date as absent.
"""
from __future__ import annotations

import math
import numbers
import re
import warnings
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pandas as pd

from endorsement_tracker.config import SETTINGS
from endorsement_tracker.errors import UnparseableDate

_ISO_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_NUMERIC = re.compile(r"^-?\d+(\.\d+)?$")
_SEPARATORS = re.compile(r"[-/]")


def _from_serial(value: float) -> date | None:
    if not math.isfinite(value):
        return None
    # Round half up so values a hair below midnight land on the right day.
    days = math.floor(value + 0.5)
    try:
        return SETTINGS.excel_epoch + timedelta(days=days)
    except OverflowError:
        return None


def _from_datetime(value: datetime) -> date:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date()


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _from_text(text: str) -> date | None:
    if _NUMERIC.match(text):
        return _from_serial(float(text))

    iso = _ISO_PREFIX.match(text)
    if iso:
        return _safe_date(int(iso.group(1)), int(iso.group(2)), int(iso.group(3)))

    parts = _SEPARATORS.split(text)
    if len(parts) == 3 and all(part.isdigit() for part in parts):
        day, month, year = parts
        if len(year) == 4 and int(year) > 1900:
            return _safe_date(int(year), int(month), int(day))

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(text, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    if parsed is pd.NaT or pd.isna(parsed):
        return None
    return _from_datetime(parsed.to_pydatetime())


def normalize_date(value: object) -> date | None:
    """Return the calendar date for ``value`` or ``None`` when it is unreadable."""
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, str) and pd.isna(value):
        return None
    if isinstance(value, datetime):
        return _from_datetime(value)
    if isinstance(value, date):
        return value
    if isinstance(value, (numbers.Real, Decimal)):
        return _from_serial(float(value))
    text = str(value).strip()
    if not text:
        return None
    return _from_text(text)


def require_date(value: object) -> date:
    parsed = normalize_date(value)
    if parsed is None:
        raise UnparseableDate(value)
    return parsed
