import math
from datetime import date, datetime, timedelta, timezone

import pandas as pd
import pytest

from endorsement_tracker.errors import UnparseableDate
from endorsement_tracker.infrastructure.parsing.dates import normalize_date, require_date


def test_serial_number_uses_spreadsheet_epoch():
    assert normalize_date(45971) == date(2025, 11, 10)
    assert normalize_date(1) == date(1899, 12, 31)


@pytest.mark.parametrize("serial", [45971.0000001, 45970.9999999, 45971.3, 45970.6, 45971.49])
def test_serial_rounds_to_nearest_day(serial):
    assert normalize_date(serial) == normalize_date(math.floor(serial + 0.5))
    assert normalize_date(serial) == date(2025, 11, 10)


def test_numeric_string_is_treated_as_serial():
    assert normalize_date("45971") == date(2025, 11, 10)
    assert normalize_date("45971.0") == date(2025, 11, 10)


def test_iso_string_ignores_time_suffix():
    assert normalize_date("2025-11-10") == date(2025, 11, 10)
    assert normalize_date("2025-11-10 23:59:59") == date(2025, 11, 10)
    assert normalize_date("2025-11-10T00:30:00+05:00") == date(2025, 11, 10)


@pytest.mark.parametrize("text", ["10/11/2025", "10-11-2025", " 10/11/2025 "])
def test_day_first_strings(text):
    assert normalize_date(text) == date(2025, 11, 10)


def test_generic_fallback():
    assert normalize_date("10 November 2025") == date(2025, 11, 10)


@pytest.mark.parametrize("value", [None, "", "   ", "not a date", "31/02/2025", "2025-13-45", float("nan"), pd.NaT, True])
def test_unparseable_values_return_none(value):
    assert normalize_date(value) is None


def test_date_and_datetime_inputs():
    assert normalize_date(date(2025, 1, 2)) == date(2025, 1, 2)
    assert normalize_date(pd.Timestamp("2025-01-02 10:00")) == date(2025, 1, 2)
    aware = datetime(2025, 1, 2, 1, 0, tzinfo=timezone(timedelta(hours=3)))
    assert normalize_date(aware) == date(2025, 1, 1)


def test_require_date_raises_for_unparseable():
    assert require_date("2025-11-10") == date(2025, 11, 10)
    with pytest.raises(UnparseableDate):
        require_date("soon")
