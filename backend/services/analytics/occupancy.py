"""
Room inventory, booking list and occupancy views.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from services.analytics.metrics import (
    bookings_booked_between,
    is_occupancy_recognized,
    occupancy_rate,
    occupied_nights,
    room_revenue,
)
from utils import MONTH_NAMES, iter_days, month_bounds, months_between

RECENT_BOOKINGS_LIMIT = 10


@dataclass
class RoomTypeStatus:
    type: str
    occupied: int
    total: int
    rate: float
    capacity: int
    amenities: List[str] = field(default_factory=list)


@dataclass
class BookingRow:
    id: str             # Short display reference
    guest: str
    room: str
    check_in: date
    check_out: date
    status: str
    total_price: float
    is_walk_in: bool
    guest_email: str
    guest_phone: str


@dataclass
class BookingStats:
    total: int
    walk_in: int
    online: int
    total_revenue: float


@dataclass
class DailyOccupancy:
    date: date
    label: str          # "Mar 5"
    occupied: int
    available: int
    rate: float


@dataclass
class MonthlyOccupancy:
    month: str
    year: int
    rate: float


def _occupied_on(bookings, day: date):
    return [b for b in bookings if is_occupancy_recognized(b) and b.check_in <= day <= b.check_out]


def room_types(snapshot, on_date: Optional[date] = None) -> List[RoomTypeStatus]:
    """
    Room inventory grouped by type with rooms occupied on a given day.

    The rate and amenities come from the first room of each type; capacity
    is the largest capacity of the type. A booking occupies its room type
    from check-in through check-out day inclusive.
    """
    on_date = on_date or date.today()
    grouped: Dict[str, RoomTypeStatus] = {}

    for room in snapshot.rooms:
        status = grouped.get(room.type)
        if status is None:
            status = grouped[room.type] = RoomTypeStatus(
                type=room.type,
                occupied=0,
                total=0,
                rate=room.rate,
                capacity=room.capacity,
                amenities=list(room.amenities),
            )
        status.total += 1
        status.capacity = max(status.capacity, room.capacity)

    for booking in _occupied_on(snapshot.bookings, on_date):
        if booking.room_type in grouped:
            grouped[booking.room_type].occupied += 1

    return list(grouped.values())


def _overlaps(booking, start: date, end: date) -> bool:
    return (
        start <= booking.check_in <= end
        or start <= booking.check_out <= end
        or (booking.check_in <= start and booking.check_out >= end)
    )


def booking_list(
    snapshot,
    start: Optional[date] = None,
    end: Optional[date] = None,
    limit: int = RECENT_BOOKINGS_LIMIT
) -> List[BookingRow]:
    """
    Most recent bookings touching the window, newest check-in first.

    Every status is listed. The display id is the last six characters of
    the record key, upper-cased.
    """
    bookings = snapshot.bookings
    if start is not None and end is not None:
        bookings = [b for b in bookings if _overlaps(b, start, end)]

    ordered = sorted(bookings, key=lambda b: b.check_in, reverse=True)[:limit]
    return [
        BookingRow(
            id=b.id[-6:].upper(),
            guest=b.guest_name,
            room=b.room_type,
            check_in=b.check_in,
            check_out=b.check_out,
            status=b.status,
            total_price=b.total_price,
            is_walk_in=b.is_walk_in,
            guest_email=b.guest_email,
            guest_phone=b.guest_phone,
        )
        for b in ordered
    ]


def booking_stats(snapshot, start: Optional[date] = None, end: Optional[date] = None) -> BookingStats:
    """Channel split and revenue of recognized bookings booked in the window"""
    bookings = bookings_booked_between(snapshot.bookings, start, end)
    walk_in = sum(1 for b in bookings if b.is_walk_in)
    return BookingStats(
        total=len(bookings),
        walk_in=walk_in,
        online=len(bookings) - walk_in,
        total_revenue=room_revenue(bookings),
    )


def daily_occupancy(snapshot, start: date, end: date) -> List[DailyOccupancy]:
    """Rooms occupied per day, counting check-out day as occupied"""
    total_rooms = snapshot.total_rooms
    days = []
    for day in iter_days(start, end):
        occupied = len(_occupied_on(snapshot.bookings, day))
        days.append(DailyOccupancy(
            date=day,
            label=f"{MONTH_NAMES[day.month - 1]} {day.day}",
            occupied=occupied,
            available=max(0, total_rooms - occupied),
            rate=occupancy_rate(occupied, total_rooms, 1),
        ))
    return days


def monthly_occupancy(snapshot, start: date, end: date) -> List[MonthlyOccupancy]:
    """Overlap-night occupancy for every calendar month the window touches"""
    months = []
    for year, month in months_between(start, end):
        month_start, month_end = month_bounds(year, month)
        days = (month_end - month_start).days + 1
        months.append(MonthlyOccupancy(
            month=MONTH_NAMES[month - 1],
            year=year,
            rate=occupancy_rate(
                occupied_nights(snapshot.bookings, month_start, month_end),
                snapshot.total_rooms,
                days,
            ),
        ))
    return months
