"""Period and rounding utility tests."""
from datetime import date

import pytest

from utils import (
    days_in_window,
    format_currency,
    format_number,
    iter_days,
    month_bounds,
    months_between,
    overlap_nights,
    percent_change,
    previous_window,
    round_half_up,
    shift_month,
    sunday_first_weekday,
    to_date,
    trailing_months,
    validate_window,
)


def test_overlap_nights_inside_window():
    assert overlap_nights(date(2026, 3, 5), date(2026, 3, 8), date(2026, 3, 1), date(2026, 3, 31)) == 3


def test_overlap_nights_clipped_by_window_edges():
    # Stay crosses into April: only the night of Mar 30 counts against March
    assert overlap_nights(date(2026, 3, 30), date(2026, 4, 3), date(2026, 3, 1), date(2026, 3, 31)) == 1
    # Stay started in February
    assert overlap_nights(date(2026, 2, 26), date(2026, 3, 3), date(2026, 3, 1), date(2026, 3, 31)) == 2


@pytest.mark.parametrize("check_in,check_out", [
    (date(2026, 1, 1), date(2026, 1, 5)),
    (date(2026, 4, 2), date(2026, 4, 9)),
    (date(2026, 4, 1), date(2026, 4, 1)),
])
def test_overlap_nights_zero_without_intersection(check_in, check_out):
    assert overlap_nights(check_in, check_out, date(2026, 3, 1), date(2026, 3, 31)) == 0


def test_days_in_window_is_inclusive():
    assert days_in_window(date(2026, 3, 1), date(2026, 3, 30)) == 30
    assert days_in_window(date(2026, 3, 1), date(2026, 3, 1)) == 1


def test_previous_window_has_same_length():
    prev_start, prev_end = previous_window(date(2026, 3, 1), date(2026, 3, 31))
    assert prev_end == date(2026, 2, 28)
    assert prev_start == date(2026, 1, 29)
    assert (prev_end - prev_start) == (date(2026, 3, 31) - date(2026, 3, 1))


def test_previous_window_before_first_date():
    with pytest.raises(ValueError):
        previous_window(date.min, date(1, 1, 5))


def test_validate_window_bounds():
    validate_window(date(2024, 3, 31), date(2026, 3, 31))
    validate_window(date(1, 1, 3), date(1, 1, 4))

    with pytest.raises(ValueError):
        validate_window(date(2026, 3, 31), date(2026, 3, 1))
    with pytest.raises(ValueError):
        validate_window(date(2000, 1, 1), date(2026, 3, 31))
    with pytest.raises(ValueError):
        validate_window(date(1, 1, 2), date(1, 1, 4))
    with pytest.raises(ValueError):
        validate_window(date(2026, 3, 1), date(2026, 3, 31), max_days=7)


def test_iter_days_reaches_last_date():
    assert list(iter_days(date(9999, 12, 30), date.max)) == [date(9999, 12, 30), date.max]
    assert list(iter_days(date(2026, 3, 2), date(2026, 3, 1))) == []


def test_month_helpers():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert shift_month(2026, 1, -1) == (2025, 12)
    assert shift_month(2026, 11, 3) == (2027, 2)
    assert trailing_months(date(2026, 2, 15), 3) == [(2025, 12), (2026, 1), (2026, 2)]
    assert months_between(date(2025, 11, 20), date(2026, 1, 3)) == [(2025, 11), (2025, 12), (2026, 1)]


def test_to_date_accepts_timestamps():
    assert to_date("2026-03-05T22:10:00Z") == date(2026, 3, 5)
    assert to_date("2026-03-05") == date(2026, 3, 5)


def test_sunday_first_weekday():
    assert sunday_first_weekday(date(2026, 3, 1)) == 0   # Sunday
    assert sunday_first_weekday(date(2026, 3, 7)) == 6   # Saturday


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(12.25, 1) == 12.3
    assert round_half_up(1.005, 2) in (1.0, 1.01)


@pytest.mark.parametrize("value", [1, 250.5, 100000, -40])
def test_percent_change_of_equal_values_is_zero(value):
    assert percent_change(value, value) == 0


def test_percent_change_zero_handling():
    assert percent_change(0, 0) == 0
    assert percent_change(5, 0) == 100
    assert percent_change(0.01, 0) == 100


def test_percent_change_rounds_to_one_decimal():
    assert percent_change(80000, 100000) == -20.0
    assert percent_change(4, 3) == 33.3
    assert percent_change(0, 10) == -100.0


def test_formatting():
    assert format_number(20.0) == "20"
    assert format_number(-12.5) == "-12.5"
    assert format_currency(1234567.5) == "₱1,234,567.50"
    assert format_currency(0) == "₱0"
