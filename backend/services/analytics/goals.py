"""
Goal progress engine

A goal's window is derived from its period and anchor month:
- monthly: the anchor month
- quarterly: the 3-month block containing the anchor month
- yearly: January 1 to December 31 of the anchor year

Status uses a linear pacing model. With expected = days passed / days in
period, a goal is on-track at >= 90% of expected x 100, at-risk at >= 70%
of it, and behind below that. Early in a period the expected value is
tiny, so almost any progress reads as on-track.
"""
import math
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from services.analytics.metrics import (
    bookings_booked_between,
    occupancy_rate,
    occupied_nights,
    pos_revenue,
    room_revenue,
    sales_between,
)
from services.records import Goal, GoalPeriod, GoalType
from utils import month_bounds, round_int

ON_TRACK_RATIO = 0.9
AT_RISK_RATIO = 0.7


class GoalStatus(str, Enum):
    ACHIEVED = "achieved"
    ON_TRACK = "on-track"
    AT_RISK = "at-risk"
    BEHIND = "behind"


@dataclass
class GoalProgress:
    goal: Goal
    period_start: date
    period_end: date
    current: float
    percentage: int       # Capped at 100 for display
    remaining: float
    status: GoalStatus
    days_remaining: int


def goal_period(goal: Goal) -> Tuple[date, date]:
    """Resolve the [start, end] calendar window a goal measures"""
    if goal.period == GoalPeriod.MONTHLY:
        return month_bounds(goal.year, goal.month + 1)

    if goal.period == GoalPeriod.QUARTERLY:
        first_month = (goal.month // 3) * 3 + 1
        period_start, _ = month_bounds(goal.year, first_month)
        _, period_end = month_bounds(goal.year, first_month + 2)
        return period_start, period_end

    return date(goal.year, 1, 1), date(goal.year, 12, 31)


def goal_current_value(goal: Goal, snapshot, period_start: date, period_end: date) -> float:
    """Measure a goal's metric over its window"""
    if goal.type == GoalType.REVENUE:
        bookings = bookings_booked_between(snapshot.bookings, period_start, period_end)
        sales = sales_between(snapshot.pos_transactions, period_start, period_end)
        return room_revenue(bookings) + pos_revenue(sales)

    if goal.type == GoalType.BOOKINGS:
        return float(len(bookings_booked_between(snapshot.bookings, period_start, period_end)))

    days = (period_end - period_start).days
    return occupancy_rate(
        occupied_nights(snapshot.bookings, period_start, period_end),
        snapshot.total_rooms,
        days,
    )


def classify_status(percentage: float, expected_progress: float) -> GoalStatus:
    """
    Classify a goal against its pacing.

    Args:
        percentage: Uncapped progress percentage
        expected_progress: Elapsed fraction of the period (0..1)
    """
    if percentage >= 100:
        return GoalStatus.ACHIEVED

    expected_percentage = expected_progress * 100
    if percentage >= expected_percentage * ON_TRACK_RATIO:
        return GoalStatus.ON_TRACK
    if percentage >= expected_percentage * AT_RISK_RATIO:
        return GoalStatus.AT_RISK
    return GoalStatus.BEHIND


def goal_progress(goal: Goal, snapshot, now: Optional[datetime] = None) -> GoalProgress:
    """
    Compute progress for one goal.

    Day counting works from midnight of the period's last day:
    days_in_period = (period_end - period_start) in days and
    days_remaining = ceil((period_end 00:00 - now) / 1 day), floored at 0.

    Args:
        goal: Goal to evaluate
        snapshot: Snapshot with rooms, bookings and pos_transactions loaded
        now: Reference instant, defaults to datetime.now()
    """
    now = now or datetime.now()
    period_start, period_end = goal_period(goal)

    current = goal_current_value(goal, snapshot, period_start, period_end)
    percentage = round_int(current / goal.target * 100) if goal.target > 0 else 0
    remaining = max(0.0, goal.target - current)

    end_instant = datetime.combine(period_end, time.min, tzinfo=now.tzinfo)
    seconds_left = (end_instant - now).total_seconds()
    days_remaining = max(0, math.ceil(seconds_left / 86400))

    days_in_period = (period_end - period_start).days
    days_passed = days_in_period - days_remaining
    expected_progress = days_passed / days_in_period if days_in_period > 0 else 1.0

    return GoalProgress(
        goal=goal,
        period_start=period_start,
        period_end=period_end,
        current=current,
        percentage=min(percentage, 100),
        remaining=remaining,
        status=classify_status(percentage, expected_progress),
        days_remaining=days_remaining,
    )


def evaluate_goals(goals: Iterable[Goal], snapshot, now: Optional[datetime] = None) -> List[GoalProgress]:
    """Progress for every goal against one snapshot and one reference instant"""
    now = now or datetime.now()
    return [goal_progress(goal, snapshot, now) for goal in goals]
