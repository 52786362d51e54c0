"""
Guest and booking-pattern analytics.

Both views work on revenue-recognized bookings booked inside the window
(all recognized bookings when no window is given).
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from services.analytics.metrics import bookings_booked_between
from utils import DAY_NAMES, MONTH_NAMES, round_half_up, round_int, sunday_first_weekday

TOP_GUEST_LIMIT = 5
GUESTS_BY_MONTH_LIMIT = 6

STAY_BUCKETS = [
    ("1 night", 1, 1),
    ("2 nights", 2, 2),
    ("3-4 nights", 3, 4),
    ("5-7 nights", 5, 7),
    ("8+ nights", 8, None),
]

WEEKDAYS = (1, 2, 3, 4, 5)      # Monday-Friday, Sunday-first indexing
WEEKEND_DAYS = (0, 6)


@dataclass
class TopGuest:
    name: str
    email: str
    bookings: int
    total_spent: float


@dataclass
class MonthlyChannelCount:
    month: str      # "Mar 2026"
    online: int
    walk_in: int


@dataclass
class StayBucket:
    range: str
    count: int


@dataclass
class GuestAnalytics:
    total_guests: int
    registered_guests: int
    online_bookings: int
    walk_in_bookings: int
    online_percentage: int
    walk_in_percentage: int
    repeat_guests: int
    repeat_guest_percentage: int
    new_guests: int
    average_stay_duration: float
    guests_by_month: List[MonthlyChannelCount] = field(default_factory=list)
    top_guests: List[TopGuest] = field(default_factory=list)
    stay_duration_distribution: List[StayBucket] = field(default_factory=list)


def _share(part: int, whole: int) -> int:
    return round_int(part / whole * 100) if whole > 0 else 0


def guest_analytics(snapshot, start: Optional[date] = None, end: Optional[date] = None) -> GuestAnalytics:
    """
    Guest mix, loyalty and stay-length figures for a window.

    Guests are identified by guest id, falling back to email then name.
    Stays of zero nights are left out of the stay statistics.
    """
    bookings = bookings_booked_between(snapshot.bookings, start, end)

    walk_in = sum(1 for b in bookings if b.is_walk_in)
    online = len(bookings) - walk_in

    stays = [b.nights for b in bookings if b.nights > 0]
    average_stay = sum(stays) / len(stays) if stays else 0.0

    distribution = []
    for label, low, high in STAY_BUCKETS:
        count = sum(1 for nights in stays if nights >= low and (high is None or nights <= high))
        distribution.append(StayBucket(range=label, count=count))

    per_guest: Dict[str, TopGuest] = {}
    for b in bookings:
        entry = per_guest.setdefault(
            b.guest_key,
            TopGuest(name=b.guest_name, email=b.guest_email, bookings=0, total_spent=0.0),
        )
        entry.bookings += 1
        entry.total_spent += b.total_price

    unique_guests = len(per_guest)
    repeat_guests = sum(1 for g in per_guest.values() if g.bookings > 1)
    top_guests = sorted(per_guest.values(), key=lambda g: g.total_spent, reverse=True)[:TOP_GUEST_LIMIT]

    by_month: Dict[str, MonthlyChannelCount] = {}
    for b in sorted(bookings, key=lambda b: b.booked_on):
        key = f"{MONTH_NAMES[b.booked_on.month - 1]} {b.booked_on.year}"
        entry = by_month.setdefault(key, MonthlyChannelCount(month=key, online=0, walk_in=0))
        if b.is_walk_in:
            entry.walk_in += 1
        else:
            entry.online += 1

    return GuestAnalytics(
        total_guests=unique_guests,
        registered_guests=len(snapshot.guests),
        online_bookings=online,
        walk_in_bookings=walk_in,
        online_percentage=_share(online, len(bookings)),
        walk_in_percentage=_share(walk_in, len(bookings)),
        repeat_guests=repeat_guests,
        repeat_guest_percentage=_share(repeat_guests, unique_guests),
        new_guests=unique_guests - repeat_guests,
        average_stay_duration=round_half_up(average_stay, 1),
        guests_by_month=list(by_month.values())[-GUESTS_BY_MONTH_LIMIT:],
        top_guests=top_guests,
        stay_duration_distribution=distribution,
    )


@dataclass
class HourCount:
    hour: str       # "09:00"
    count: int


@dataclass
class PeriodVolume:
    label: str
    count: int
    revenue: float


@dataclass
class WeekdayWeekend:
    weekday: int
    weekend: int
    weekday_revenue: float
    weekend_revenue: float


@dataclass
class PeakAnalysis:
    bookings_by_hour: List[HourCount]
    bookings_by_day_of_week: List[PeriodVolume]
    bookings_by_month: List[PeriodVolume]
    peak_hour: str
    peak_day: str
    peak_month: str
    slowest_day: str
    weekday_vs_weekend: WeekdayWeekend


def _first_max(entries, key):
    # Earliest entry wins ties
    best = entries[0]
    for entry in entries[1:]:
        if key(entry) > key(best):
            best = entry
    return best


def _first_min(entries, key):
    best = entries[0]
    for entry in entries[1:]:
        if key(entry) < key(best):
            best = entry
    return best


def peak_analysis(snapshot, start: Optional[date] = None, end: Optional[date] = None) -> PeakAnalysis:
    """
    When bookings are made and when guests arrive.

    Hours come from the booking creation timestamp (bookings without one are
    left out of the hourly buckets); weekday and month come from check-in.
    """
    bookings = bookings_booked_between(snapshot.bookings, start, end)

    hours = [HourCount(hour=f"{h:02d}:00", count=0) for h in range(24)]
    days = [PeriodVolume(label=name, count=0, revenue=0.0) for name in DAY_NAMES]
    months = [PeriodVolume(label=name, count=0, revenue=0.0) for name in MONTH_NAMES]

    for b in bookings:
        if b.created_at is not None:
            hours[b.created_at.hour].count += 1
        day = days[sunday_first_weekday(b.check_in)]
        day.count += 1
        day.revenue += b.total_price
        month = months[b.check_in.month - 1]
        month.count += 1
        month.revenue += b.total_price

    weekday_vs_weekend = WeekdayWeekend(
        weekday=sum(days[i].count for i in WEEKDAYS),
        weekend=sum(days[i].count for i in WEEKEND_DAYS),
        weekday_revenue=sum(days[i].revenue for i in WEEKDAYS),
        weekend_revenue=sum(days[i].revenue for i in WEEKEND_DAYS),
    )

    return PeakAnalysis(
        bookings_by_hour=hours,
        bookings_by_day_of_week=days,
        bookings_by_month=months,
        peak_hour=_first_max(hours, lambda h: h.count).hour,
        peak_day=_first_max(days, lambda d: d.count).label,
        peak_month=_first_max(months, lambda m: m.count).label,
        slowest_day=_first_min(days, lambda d: d.count).label,
        weekday_vs_weekend=weekday_vs_weekend,
    )
