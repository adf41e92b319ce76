from datetime import date, datetime, time, timezone

import pytest

from gym_management.core.timezone_utils import (
    combine_in_gym_timezone,
    format_clock_time,
    get_current_time_in_gym_timezone,
    normalize_clock_time,
    parse_calendar_date,
    parse_clock_time,
)


def test_parse_clock_time():
    assert parse_clock_time("09:30") == time(9, 30)
    assert parse_clock_time("9:30") == time(9, 30)
    assert parse_clock_time("23:59") == time(23, 59)


@pytest.mark.parametrize("value", ["24:00", "12:60", "9:5", "noon", "", None])
def test_parse_clock_time_rejects_bad_values(value):
    with pytest.raises(ValueError):
        parse_clock_time(value)


def test_normalize_clock_time_pads_hours():
    assert normalize_clock_time("9:00") == "09:00"
    assert normalize_clock_time("14:05") == "14:05"


@pytest.mark.parametrize("value,expected", [
    ("14:00", "2:00 PM"),
    ("09:00", "9:00 AM"),
    ("00:30", "12:30 AM"),
    ("12:00", "12:00 PM"),
])
def test_format_clock_time(value, expected):
    assert format_clock_time(value) == expected


def test_parse_calendar_date_keeps_only_the_day():
    assert parse_calendar_date("2025-07-01") == date(2025, 7, 1)
    assert parse_calendar_date("2025-07-01T10:00:00Z") == date(2025, 7, 1)
    assert parse_calendar_date("2025-07-01T10:00:00.000Z") == date(2025, 7, 1)
    assert parse_calendar_date(datetime(2025, 7, 1, 23, 0)) == date(2025, 7, 1)
    assert parse_calendar_date(date(2025, 7, 1)) == date(2025, 7, 1)
    with pytest.raises(ValueError):
        parse_calendar_date("next tuesday")


@pytest.mark.parametrize("value", ["2030/07/01", "07/01/2030", "July 1, 2030", "1 Jul 2030", " 2030-07-01 "])
def test_parse_calendar_date_accepts_common_formats(value):
    assert parse_calendar_date(value) == date(2030, 7, 1)


@pytest.mark.parametrize("value", ["", "not-a-date", "2030-13-45", 20300701, None])
def test_parse_calendar_date_rejects_non_dates(value):
    with pytest.raises(ValueError):
        parse_calendar_date(value)


def test_combine_in_gym_timezone():
    # July 1, 2025 at 10:00 local (EDT is UTC-4)
    starts_at = combine_in_gym_timezone(date(2025, 7, 1), "10:00", "America/New_York")
    utc = starts_at.astimezone(timezone.utc)
    assert utc.hour == 14 and utc.minute == 0


def test_current_time_is_aware():
    now = get_current_time_in_gym_timezone("America/Mexico_City")
    assert now.tzinfo is not None
