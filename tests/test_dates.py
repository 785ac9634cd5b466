# tests/test_dates.py
from datetime import date, datetime

import pytest

from bar_planner.dates import (
    InvalidDateFormat, add_days, day_of_week, days_between, each_day, end_of_month,
    format_iso_date, is_weekend, months_between, parse_iso_date, start_of_month,
    to_date, week_of_month,
)


def test_parse_iso_date():
    assert parse_iso_date("2026-01-14") == date(2026, 1, 14)


def test_parse_iso_date_drops_time_part():
    assert parse_iso_date("2026-01-14T23:59:00Z") == date(2026, 1, 14)


@pytest.mark.parametrize("value", ["01/14/2026", "2026-1-14", "2026-02-30", "", "soon"])
def test_parse_iso_date_rejects_bad_input(value):
    with pytest.raises(InvalidDateFormat):
        parse_iso_date(value)


def test_parse_iso_date_rejects_non_string():
    with pytest.raises(InvalidDateFormat):
        parse_iso_date(None)


def test_invalid_date_format_is_value_error():
    assert issubclass(InvalidDateFormat, ValueError)


def test_format_iso_date():
    assert format_iso_date(date(2026, 7, 8)) == "2026-07-08"


def test_to_date_accepts_strings_dates_and_datetimes():
    assert to_date("2026-01-14") == date(2026, 1, 14)
    assert to_date(date(2026, 1, 14)) == date(2026, 1, 14)
    assert to_date(datetime(2026, 1, 14, 23, 30)) == date(2026, 1, 14)


def test_add_days_crosses_month():
    assert add_days(date(2026, 1, 30), 3) == date(2026, 2, 2)


def test_days_between_is_signed():
    assert days_between(date(2026, 1, 14), date(2026, 1, 16)) == 2
    assert days_between(date(2026, 1, 16), date(2026, 1, 14)) == -2


def test_is_weekend():
    assert is_weekend(date(2026, 1, 17))  # Saturday
    assert is_weekend(date(2026, 1, 18))  # Sunday
    assert not is_weekend(date(2026, 1, 16))


def test_day_of_week_sunday_is_zero():
    assert day_of_week(date(2026, 1, 18)) == 0
    assert day_of_week(date(2026, 1, 14)) == 3
    assert day_of_week(date(2026, 1, 17)) == 6


def test_week_of_month():
    assert week_of_month(date(2026, 2, 1)) == 0
    assert week_of_month(date(2026, 2, 7)) == 0
    assert week_of_month(date(2026, 2, 8)) == 1
    assert week_of_month(date(2026, 3, 29)) == 4


def test_month_bounds():
    assert start_of_month(date(2026, 2, 17)) == date(2026, 2, 1)
    assert end_of_month(date(2026, 2, 17)) == date(2026, 2, 28)
    assert end_of_month(date(2024, 2, 1)) == date(2024, 2, 29)
    assert end_of_month(date(2026, 12, 5)) == date(2026, 12, 31)


def test_months_between_counts_whole_months():
    start = date(2026, 1, 14)
    assert months_between(start, date(2026, 1, 31)) == 0
    assert months_between(start, date(2026, 2, 13)) == 0
    assert months_between(start, date(2026, 2, 14)) == 1
    assert months_between(start, date(2026, 7, 28)) == 6


def test_each_day_is_inclusive():
    days = list(each_day(date(2026, 1, 14), date(2026, 1, 16)))
    assert days == [date(2026, 1, 14), date(2026, 1, 15), date(2026, 1, 16)]


def test_each_day_empty_when_reversed():
    assert list(each_day(date(2026, 1, 16), date(2026, 1, 14))) == []
