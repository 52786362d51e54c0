"""
Period comparison engine

Compares a calendar window against the immediately preceding window of the
same length. Each window is measured independently; changes are the
percentage moves from previous to current, with the bounded zero handling
of percent_change so alert thresholds never see an infinite value.
"""
from dataclasses import dataclass
from datetime import date

from services.analytics.metrics import (
    average_daily_rate,
    bookings_booked_between,
    occupancy_rate,
    occupied_room_days,
    pos_revenue,
    revenue_per_available_room,
    room_revenue,
    sales_between,
)
from utils import days_in_window, percent_change, previous_window


@dataclass
class PeriodMetrics:
    revenue: float
    room_revenue: float
    pos_revenue: float
    bookings: int
    occupancy_rate: float
    adr: float
    revpar: float


@dataclass
class PeriodChanges:
    revenue: float
    room_revenue: float
    pos_revenue: float
    bookings: float
    occupancy_rate: float
    adr: float
    revpar: float


@dataclass
class PeriodComparison:
    current_start: date
    current_end: date
    previous_start: date
    previous_end: date
    current: PeriodMetrics
    previous: PeriodMetrics
    changes: PeriodChanges


@dataclass
class KpiSummary:
    occupancy_rate: float
    occupancy_change: float
    adr: float
    adr_change: float
    revpar: float
    revpar_change: float
    total_revenue: float
    revenue_change: float


def period_metrics(snapshot, start: date, end: date) -> PeriodMetrics:
    """
    Measure one [start, end] window.

    Occupancy uses the per-day scan (a stay covers check-in through
    check-out inclusive) over total rooms x inclusive days.
    """
    bookings = bookings_booked_between(snapshot.bookings, start, end)
    sales = sales_between(snapshot.pos_transactions, start, end)
    days = days_in_window(start, end)

    rooms_total = room_revenue(bookings)
    pos_total = pos_revenue(sales)
    occupied = occupied_room_days(snapshot.bookings, start, end)

    return PeriodMetrics(
        revenue=rooms_total + pos_total,
        room_revenue=rooms_total,
        pos_revenue=pos_total,
        bookings=len(bookings),
        occupancy_rate=occupancy_rate(occupied, snapshot.total_rooms, days),
        adr=average_daily_rate(rooms_total, len(bookings)),
        revpar=revenue_per_available_room(rooms_total, snapshot.total_rooms, days),
    )


def compare_periods(snapshot, start: date, end: date) -> PeriodComparison:
    """
    Compare [start, end] with the preceding window of equal length.

    Args:
        snapshot: Snapshot with rooms, bookings and pos_transactions loaded
        start: First day of the current window
        end: Last day of the current window (inclusive)

    Returns:
        PeriodComparison with both windows' metrics and percentage changes

    Raises:
        ValueError: start is after end
    """
    if start > end:
        raise ValueError(f"Window start {start} is after end {end}")

    prev_start, prev_end = previous_window(start, end)
    current = period_metrics(snapshot, start, end)
    previous = period_metrics(snapshot, prev_start, prev_end)

    changes = PeriodChanges(
        revenue=percent_change(current.revenue, previous.revenue),
        room_revenue=percent_change(current.room_revenue, previous.room_revenue),
        pos_revenue=percent_change(current.pos_revenue, previous.pos_revenue),
        bookings=percent_change(current.bookings, previous.bookings),
        occupancy_rate=percent_change(current.occupancy_rate, previous.occupancy_rate),
        adr=percent_change(current.adr, previous.adr),
        revpar=percent_change(current.revpar, previous.revpar),
    )

    return PeriodComparison(
        current_start=start,
        current_end=end,
        previous_start=prev_start,
        previous_end=prev_end,
        current=current,
        previous=previous,
        changes=changes,
    )


def kpi_summary(comparison: PeriodComparison) -> KpiSummary:
    """Headline KPI cards with their change against the previous window"""
    return KpiSummary(
        occupancy_rate=comparison.current.occupancy_rate,
        occupancy_change=comparison.changes.occupancy_rate,
        adr=comparison.current.adr,
        adr_change=comparison.changes.adr,
        revpar=comparison.current.revpar,
        revpar_change=comparison.changes.revpar,
        total_revenue=comparison.current.revenue,
        revenue_change=comparison.changes.revenue,
    )
