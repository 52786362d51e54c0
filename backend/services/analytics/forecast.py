"""
Revenue / occupancy / bookings forecast
Trend + moving-average blend over six trailing months

For each of the three monthly series:
- Fit an ordinary least-squares line over the history (index 0..n-1)
- Take a trailing moving average of the last 3 months as a smoothing anchor
- Project month i ahead as 0.6 x trend(n + i - 1) + 0.4 x moving average

Six points is far too short for seasonal models, so the blend is kept
deliberately simple: the trend carries direction, the moving average
pulls the projection back toward recent actuals.

Confidence comes from the coefficient of variation of historical revenue
(population stddev / mean) and how many months actually had revenue.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from services.analytics.metrics import (
    bookings_booked_between,
    occupancy_percentage,
    occupied_nights,
    pos_revenue,
    room_revenue,
    sales_between,
)
from utils import MONTH_NAMES, month_bounds, round_half_up, round_int, shift_month, trailing_months

logger = logging.getLogger(__name__)

HISTORY_MONTHS = 6
MOVING_AVERAGE_WINDOW = 3
TREND_WEIGHT = 0.6
MOVING_AVERAGE_WEIGHT = 0.4

# Occupancy regression slope, percentage points per month
OCCUPANCY_TREND_THRESHOLD = 1.0

HIGH_CONFIDENCE_MAX_CV = 0.3
LOW_CONFIDENCE_MIN_CV = 0.6
HIGH_CONFIDENCE_MIN_ACTIVE_MONTHS = 4
LOW_CONFIDENCE_MAX_ACTIVE_MONTHS = 3   # fewer than this many active months -> low


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class MonthPoint:
    month: str          # Short month name, e.g. "Mar"
    year: int
    month_number: int   # 1-12
    revenue: float
    occupancy: float
    bookings: int
    is_projected: bool = False


@dataclass
class ForecastSummary:
    projected_revenue: float
    projected_occupancy: float
    projected_bookings: int
    revenue_growth_rate: float
    occupancy_trend: Trend
    confidence: Confidence


@dataclass
class Forecast:
    historical: List[MonthPoint] = field(default_factory=list)
    forecast: List[MonthPoint] = field(default_factory=list)
    summary: Optional[ForecastSummary] = None


@dataclass
class MonthlySeries:
    """Raw (unrounded) monthly history used to fit the projections"""
    months: List[Tuple[int, int]]
    revenue: List[float]
    occupancy: List[float]
    bookings: List[float]


def linear_regression(values: Sequence[float]) -> Tuple[float, float]:
    """
    Closed-form OLS fit of values against their index.

    Returns:
        Tuple of (slope, intercept). With fewer than two points, or a
        degenerate fit, the slope is 0 and the intercept is the last value.
    """
    n = len(values)
    if n < 2:
        return 0.0, float(values[-1]) if n else 0.0

    x = np.arange(n, dtype=float)
    y = np.asarray(values, dtype=float)

    sum_x = x.sum()
    sum_y = y.sum()
    denominator = n * (x * x).sum() - sum_x * sum_x
    if denominator == 0:
        return 0.0, float(y[-1])

    slope = (n * (x * y).sum() - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n

    if np.isnan(slope) or np.isnan(intercept):
        return 0.0, float(y[-1])

    return float(slope), float(intercept)


def moving_average(values: Sequence[float], window: int = MOVING_AVERAGE_WINDOW) -> float:
    """Mean of the last min(window, len) values, 0 for an empty series"""
    if not values:
        return 0.0
    return float(np.mean(values[-min(window, len(values)):]))


def project(values: Sequence[float], months_ahead: int) -> List[float]:
    """Blended projections for the next months_ahead points, unrounded"""
    slope, intercept = linear_regression(values)
    anchor = moving_average(values)
    n = len(values)

    projections = []
    for i in range(1, months_ahead + 1):
        trend_value = intercept + slope * (n + i - 1)
        projections.append(trend_value * TREND_WEIGHT + anchor * MOVING_AVERAGE_WEIGHT)
    return projections


def classify_confidence(revenue_history: Sequence[float]) -> Confidence:
    """
    Confidence from revenue volatility and data coverage.

    high: CV < 0.3 and at least 4 months with revenue
    low: CV > 0.6 or fewer than 3 months with revenue
    medium: everything else
    """
    values = np.asarray(revenue_history, dtype=float)
    active_months = int(np.count_nonzero(values))

    mean = float(values.mean()) if values.size else 0.0
    cv = float(values.std()) / mean if mean > 0 else 1.0

    if cv < HIGH_CONFIDENCE_MAX_CV and active_months >= HIGH_CONFIDENCE_MIN_ACTIVE_MONTHS:
        return Confidence.HIGH
    if cv > LOW_CONFIDENCE_MIN_CV or active_months < LOW_CONFIDENCE_MAX_ACTIVE_MONTHS:
        return Confidence.LOW
    return Confidence.MEDIUM


def classify_trend(slope: float) -> Trend:
    if slope > OCCUPANCY_TREND_THRESHOLD:
        return Trend.UP
    if slope < -OCCUPANCY_TREND_THRESHOLD:
        return Trend.DOWN
    return Trend.STABLE


def monthly_history(snapshot, today: date, months: int = HISTORY_MONTHS) -> MonthlySeries:
    """
    Trailing monthly revenue, occupancy and bookings ending with today's month.

    Revenue and bookings use the booking date; occupancy uses stay nights
    overlapping the month over rooms x days in month.
    """
    series = MonthlySeries(months=[], revenue=[], occupancy=[], bookings=[])

    for year, month in trailing_months(today, months):
        month_start, month_end = month_bounds(year, month)
        bookings = bookings_booked_between(snapshot.bookings, month_start, month_end)
        sales = sales_between(snapshot.pos_transactions, month_start, month_end)
        days = (month_end - month_start).days + 1

        series.months.append((year, month))
        series.revenue.append(room_revenue(bookings) + pos_revenue(sales))
        series.bookings.append(float(len(bookings)))
        series.occupancy.append(
            occupancy_percentage(
                occupied_nights(snapshot.bookings, month_start, month_end),
                snapshot.total_rooms,
                days,
            )
        )

    return series


def build_forecast(snapshot, months_ahead: int = 3, today: Optional[date] = None) -> Forecast:
    """
    Project revenue, occupancy and bookings for the months after today's month.

    Args:
        snapshot: Snapshot with rooms, bookings and pos_transactions loaded
        months_ahead: Number of months to project (>= 1)
        today: Reference day, defaults to date.today()

    Returns:
        Forecast with 6 historical points, months_ahead projected points and a summary
    """
    if months_ahead < 1:
        raise ValueError("months_ahead must be at least 1")

    today = today or date.today()
    history = monthly_history(snapshot, today)

    result = Forecast()
    for (year, month), revenue, occupancy, bookings in zip(
        history.months, history.revenue, history.occupancy, history.bookings
    ):
        result.historical.append(MonthPoint(
            month=MONTH_NAMES[month - 1],
            year=year,
            month_number=month,
            revenue=revenue,
            occupancy=round_half_up(occupancy, 1),
            bookings=int(bookings),
        ))

    revenue_projection = project(history.revenue, months_ahead)
    occupancy_projection = project(history.occupancy, months_ahead)
    bookings_projection = project(history.bookings, months_ahead)

    for i in range(months_ahead):
        year, month = shift_month(today.year, today.month, i + 1)
        result.forecast.append(MonthPoint(
            month=MONTH_NAMES[month - 1],
            year=year,
            month_number=month,
            revenue=float(round_int(max(0.0, revenue_projection[i]))),
            occupancy=round_half_up(min(100.0, max(0.0, occupancy_projection[i])), 1),
            bookings=max(0, round_int(bookings_projection[i])),
            is_projected=True,
        ))

    projected_revenue = sum(point.revenue for point in result.forecast)
    projected_occupancy = round_half_up(
        sum(point.occupancy for point in result.forecast) / months_ahead, 1
    )
    projected_bookings = sum(point.bookings for point in result.forecast)

    last_revenue = history.revenue[-1] or 1
    average_projected_revenue = projected_revenue / months_ahead
    growth_rate = round_half_up((average_projected_revenue - last_revenue) / last_revenue * 100, 1)

    occupancy_slope, _ = linear_regression(history.occupancy)

    result.summary = ForecastSummary(
        projected_revenue=projected_revenue,
        projected_occupancy=projected_occupancy,
        projected_bookings=projected_bookings,
        revenue_growth_rate=growth_rate,
        occupancy_trend=classify_trend(occupancy_slope),
        confidence=classify_confidence(history.revenue),
    )

    logger.info(
        f"Forecast {months_ahead} months from {today}: revenue={projected_revenue:.0f}, "
        f"occupancy={projected_occupancy}%, confidence={result.summary.confidence.value}"
    )
    return result
