"""
Rounding and display formatting for metric values.

Dashboard figures round half up (2.5 -> 3, -2.5 -> -2), not to even,
so every rounding in the analytics layer goes through round_half_up.
"""
import math

CURRENCY_SYMBOL = "₱"


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to `digits` decimals, halves rounding toward +infinity"""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    """Round half up to an integer"""
    return int(math.floor(value + 0.5))


def percent_change(current: float, previous: float) -> float:
    """
    Percentage change from previous to current, one decimal.

    Zero handling is deliberately bounded:
    - 0 -> 0 reports 0
    - 0 -> any positive value reports a flat +100
    Alert thresholds rely on the result never being infinite.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round_half_up((current - previous) / previous * 100, 1)


def format_number(value: float) -> str:
    """Plain number without a trailing .0 (20.0 -> '20', -12.5 -> '-12.5')"""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.10f}".rstrip("0").rstrip(".")


def format_currency(amount: float) -> str:
    """Peso amount with thousands separators and up to two decimals"""
    text = f"{amount:,.2f}"
    if text.endswith(".00"):
        text = text[:-3]
    return f"{CURRENCY_SYMBOL}{text}"
