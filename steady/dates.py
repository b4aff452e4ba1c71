"""Calendar normalization for the steady engine.

Every component uses the same calendar: weeks start on Monday, a "day" is a
plain ``datetime.date`` and timestamps are timezone-aware datetimes in the
user's timezone.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterator


# ── Constants ─────────────────────────────────────────────────

DAY_NAMES = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]


# ── Day normalization ─────────────────────────────────────────


def start_of_day(value: date | datetime) -> date:
    """Truncate a timestamp to its calendar day. Dates pass through unchanged."""
    if isinstance(value, datetime):
        return value.date()
    return value


def weekday_index(day: date | datetime) -> int:
    """Monday=0 ... Sunday=6, derived from the ISO weekday."""
    return start_of_day(day).isoweekday() - 1


def parse_day(value: str | date | None) -> date | None:
    """Parse 'YYYY-MM-DD' (or a full ISO timestamp) into a day."""
    if value is None or value == "":
        return None
    if isinstance(value, (date, datetime)):
        return start_of_day(value)
    text = str(value)
    if len(text) > 10:
        return datetime.fromisoformat(text).date()
    return date.fromisoformat(text)


def format_day(day: date | None) -> str | None:
    return day.isoformat() if day else None


# ── Intervals ─────────────────────────────────────────────────


def week_start(day: date | datetime) -> date:
    """The Monday on or before *day*."""
    d = start_of_day(day)
    return d - timedelta(days=weekday_index(d))


def week_interval(day: date | datetime) -> tuple[date, date]:
    """Half-open [monday, next monday) interval containing *day*."""
    start = week_start(day)
    return start, start + timedelta(days=7)


def week_days(day: date | datetime) -> list[date]:
    start = week_start(day)
    return [start + timedelta(days=i) for i in range(7)]


def month_interval(day: date | datetime) -> tuple[date, date]:
    """Half-open [first of month, first of next month) interval."""
    d = start_of_day(day)
    start = d.replace(day=1)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


def year_start(day: date | datetime) -> date:
    return start_of_day(day).replace(month=1, day=1)


def year_end(day: date | datetime) -> date:
    return start_of_day(day).replace(month=12, day=31)


# ── Iteration ─────────────────────────────────────────────────


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every day in the inclusive range [start, end]."""
    d = start
    while d <= end:
        yield d
        d += timedelta(days=1)


def iter_weeks(start: date, end: date) -> Iterator[date]:
    """Yield the Monday of every week that touches [start, end]."""
    w = week_start(start)
    while w <= end:
        yield w
        w += timedelta(days=7)


# ── Percentages ───────────────────────────────────────────────


def percent(completed: int, target: int) -> int:
    """round(100 * completed / target), rounding halves up. Requires target > 0."""
    if target <= 0:
        raise ValueError("target must be positive")
    return (200 * completed + target) // (2 * target)
