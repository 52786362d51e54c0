"""
Calendar period utilities for analytics windows.

Query windows are calendar windows: both bounds are dates and the window
includes its first and last day. Stays are the half-open span
[check_in, check_out), so a one-night stay has check_out = check_in + 1.

All arithmetic here works on dates, never on wall-clock durations, so
day counts are whole numbers and DST or time-of-day never leaks into them.
"""
import calendar
from datetime import date, datetime, timedelta
from typing import Iterator, List, Optional, Tuple, Union

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

DEFAULT_WINDOW_DAYS = 30
MAX_WINDOW_DAYS = 731


def to_date(value: Union[date, datetime, str]) -> date:
    """
    Normalize a date-like value to a calendar date.

    Accepts date objects, datetimes (time part dropped) and ISO strings,
    either plain dates ("2026-01-05") or timestamps ("2026-01-05T13:20:00Z").
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def overlap_nights(start: date, end: date, window_start: date, window_end: date) -> int:
    """
    Nights a [start, end) stay overlaps the [window_start, window_end] window.

    overlap = min(end, window_end) - max(start, window_start), in days,
    clamped at zero. Spans that do not intersect contribute nothing.

    Example:
        stay 2026-03-30 -> 2026-04-03, window March 1..31
        overlap = Mar 31 - Mar 30 = 1
    """
    overlap_start = max(start, window_start)
    overlap_end = min(end, window_end)
    if overlap_start > overlap_end:
        return 0
    return max(0, (overlap_end - overlap_start).days)


def stay_nights(check_in: date, check_out: date) -> int:
    """Length of a stay in nights"""
    return (check_out - check_in).days


def days_in_window(start: date, end: date) -> int:
    """Inclusive day count of a calendar window (same-day window = 1 day)"""
    return max(0, (end - start).days + 1)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from start to end inclusive"""
    for offset in range((end - start).days + 1):
        yield start + timedelta(days=offset)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """
    First and last day of a month.

    Args:
        year: Calendar year
        month: Month number 1-12

    Returns:
        Tuple of (month_start, month_end)
    """
    _, last_day = calendar.monthrange(year, month)
    return date(year, month, 1), date(year, month, last_day)


def shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    """Move (year, month) by offset months, month being 1-12"""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def trailing_months(today: date, count: int) -> List[Tuple[int, int]]:
    """The count calendar months ending with today's month, oldest first"""
    return [shift_month(today.year, today.month, -offset) for offset in range(count - 1, -1, -1)]


def months_between(start: date, end: date) -> List[Tuple[int, int]]:
    """Every (year, month) touched by the window, oldest first"""
    months = []
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        months.append((year, month))
        year, month = shift_month(year, month, 1)
    return months


def previous_window(start: date, end: date) -> Tuple[date, date]:
    """
    The window of identical length immediately preceding [start, end].

    prev_end = start - 1 day
    prev_start = prev_end - (end - start)
    """
    try:
        prev_end = start - timedelta(days=1)
        prev_start = prev_end - (end - start)
    except OverflowError:
        raise ValueError(f"No previous window before {start}")
    return prev_start, prev_end


def validate_window(start: date, end: date, max_days: int = MAX_WINDOW_DAYS) -> None:
    """
    Raise ValueError for a window the analytics cannot serve.

    A window is rejected when it is reversed, when end - start exceeds
    max_days, or when its previous window would begin before date.min.
    """
    if start > end:
        raise ValueError(f"from_date {start} is after to_date {end}")
    span = (end - start).days
    if span > max_days:
        raise ValueError(f"Window is limited to {max_days} days, got {span}")
    if (start - date.min).days <= span:
        raise ValueError(f"from_date {start} is too early to compare against a previous period")


def default_window(
    start: Optional[date] = None,
    end: Optional[date] = None,
    days: int = DEFAULT_WINDOW_DAYS,
    today: Optional[date] = None
) -> Tuple[date, date]:
    """
    Fill in missing window bounds.

    A missing end defaults to today; a missing start defaults to `days`
    days before the end.
    """
    if end is None:
        end = today or date.today()
    if start is None:
        start = end - timedelta(days=days)
    return start, end


def in_window(day: date, start: Optional[date], end: Optional[date]) -> bool:
    """True when day lies in [start, end]; an open window contains every day"""
    if start is None or end is None:
        return True
    return start <= day <= end


def sunday_first_weekday(day: date) -> int:
    """Weekday index with Sunday = 0 ... Saturday = 6"""
    return (day.weekday() + 1) % 7
