"""
Backend utilities module.
"""
from .periods import (
    MONTH_NAMES,
    DAY_NAMES,
    to_date,
    overlap_nights,
    stay_nights,
    days_in_window,
    iter_days,
    month_bounds,
    shift_month,
    trailing_months,
    months_between,
    previous_window,
    MAX_WINDOW_DAYS,
    validate_window,
    default_window,
    in_window,
    sunday_first_weekday,
)
from .numbers import (
    round_half_up,
    round_int,
    percent_change,
    format_number,
    format_currency,
)

__all__ = [
    'MONTH_NAMES',
    'DAY_NAMES',
    'to_date',
    'overlap_nights',
    'stay_nights',
    'days_in_window',
    'iter_days',
    'month_bounds',
    'shift_month',
    'trailing_months',
    'months_between',
    'previous_window',
    'MAX_WINDOW_DAYS',
    'validate_window',
    'default_window',
    'in_window',
    'sunday_first_weekday',
    'round_half_up',
    'round_int',
    'percent_change',
    'format_number',
    'format_currency',
]
