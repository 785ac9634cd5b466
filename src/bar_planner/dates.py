"""Calendar-day arithmetic. Dates never carry a time of day."""
import re
from datetime import date, timedelta
from typing import Iterator, Union

ISO_DATE = re.compile(r"^(\d{4}-\d{2}-\d{2})(T.*)?$")

DateLike = Union[date, str]


class InvalidDateFormat(ValueError):
    """Raised when a date string is not yyyy-MM-dd."""

    def __init__(self, value):
        super().__init__(f"Invalid date (expected yyyy-MM-dd): {value!r}")
        self.value = value


def parse_iso_date(value: str) -> date:
    """Parse ``yyyy-MM-dd``. A trailing ``T...`` time part is accepted and dropped."""
    if not isinstance(value, str):
        raise InvalidDateFormat(value)
    match = ISO_DATE.match(value.strip())
    if not match:
        raise InvalidDateFormat(value)
    try:
        return date.fromisoformat(match.group(1))
    except ValueError as exc:
        raise InvalidDateFormat(value) from exc


def format_iso_date(d: date) -> str:
    return d.isoformat()


def to_date(value: DateLike) -> date:
    """Accept a date (or datetime) or an ISO string and return a plain date."""
    if isinstance(value, str):
        return parse_iso_date(value)
    if hasattr(value, "date") and callable(value.date):
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidDateFormat(value)


def add_days(d: date, n: int) -> date:
    return d + timedelta(days=n)


def days_between(start: date, end: date) -> int:
    """Signed number of calendar days from ``start`` to ``end``."""
    return (end - start).days


def is_weekend(d: date) -> bool:
    return d.weekday() >= 5


def day_of_week(d: date) -> int:
    """0..6 with Sunday = 0."""
    return (d.weekday() + 1) % 7


def week_of_month(d: date) -> int:
    """Zero-based week index within the month: days 1-7 are week 0."""
    return (d.day - 1) // 7


def start_of_month(d: date) -> date:
    return d.replace(day=1)


def end_of_month(d: date) -> date:
    if d.month == 12:
        return date(d.year, 12, 31)
    return date(d.year, d.month + 1, 1) - timedelta(days=1)


def months_between(start: date, d: date) -> int:
    """Whole months elapsed from ``start`` to ``d`` (0 during the first month)."""
    months = (d.year - start.year) * 12 + (d.month - start.month)
    if d.day < start.day:
        months -= 1
    return months


def each_day(start: date, end: date) -> Iterator[date]:
    """Yield every day from start to end inclusive; nothing when end < start."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
