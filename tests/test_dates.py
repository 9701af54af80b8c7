from datetime import datetime

import pytest

from sage_log_builder.dates import (
    format_short_date, format_time, format_week_range, month_key,
    month_label, parse_device_timestamp, week_end, week_start,
)


def test_parse_four_digit_year():
    assert parse_device_timestamp("3/15/2024 14:00:00") == datetime(2024, 3, 15, 14, 0, 0)


def test_parse_time_defaults_to_midnight():
    assert parse_device_timestamp("12/1/2023") == datetime(2023, 12, 1, 0, 0, 0)


def test_parse_hours_minutes_only():
    assert parse_device_timestamp("3/15/2024 14:05") == datetime(2024, 3, 15, 14, 5, 0)


@pytest.mark.parametrize("yy", [0, 7, 24, 99])
def test_two_digit_year_is_2000_based(yy):
    ts = parse_device_timestamp(f"1/2/{yy:02d} 10:00:00")
    assert ts is not None
    assert ts.year == 2000 + yy


@pytest.mark.parametrize("text", [
    None, "", " 10:00:00", "2024-03-15 14:00:00", "3/15 14:00:00", "3/15/2024/1",
    "13/45/2024 00:00:00", "2/30/2024", "3/15/2024 2:00:00", "3/15/2024 25:00:00",
    "3/15/202 10:00:00", 20240315,
])
def test_parse_failures_return_none(text):
    assert parse_device_timestamp(text) is None


@pytest.mark.parametrize("ts", [
    datetime(2024, 3, 10, 0, 0, 0),    # Sunday midnight
    datetime(2024, 3, 10, 23, 59, 59), # Sunday late
    datetime(2024, 3, 16, 12, 30, 0),  # Saturday
    datetime(2024, 3, 13, 7, 0, 0),
    datetime(2024, 1, 1, 0, 0, 1),     # crosses the year boundary
])
def test_week_start_is_sunday_midnight_and_idempotent(ts):
    ws = week_start(ts)
    assert ws.weekday() == 6
    assert (ws.hour, ws.minute, ws.second, ws.microsecond) == (0, 0, 0, 0)
    assert ws <= ts < week_end(ws)
    assert week_start(ws) == ws


def test_week_start_year_boundary():
    assert week_start(datetime(2024, 1, 1, 0, 0, 1)) == datetime(2023, 12, 31)


def test_formatting_is_zero_padded():
    ts = datetime(2024, 3, 5, 9, 5, 7)
    assert format_short_date(ts) == "03/05/2024"
    assert format_time(ts) == "09:05:07"
    assert month_key(ts) == "2024/03"


def test_week_range():
    assert format_week_range(datetime(2024, 3, 10)) == "03/10 - 03/16"
    assert format_week_range(datetime(2024, 3, 31)) == "03/31 - 04/06"


def test_month_helpers():
    assert month_label(2024, 3) == "March"
    with pytest.raises(ValueError):
        month_label(2024, 13)
