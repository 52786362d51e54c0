"""
Metric primitives shared by every analytics view.

Room revenue and booking counts follow the booking-date convention: a
booking belongs to the period its createdAt falls in (check-in when
createdAt is missing). Occupancy follows the stay-date convention: a
booking contributes the nights of its stay that overlap the window.
"""
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional

from services.records import (
    Booking, PosTransaction,
    REVENUE_RECOGNIZED_STATUSES, OCCUPANCY_RECOGNIZED_STATUSES, POS_COMPLETED_STATUS,
)
from utils import in_window, iter_days, overlap_nights, round_half_up

FOOD_CATEGORY_ID = "foods"


def is_revenue_recognized(booking: Booking) -> bool:
    return booking.status in REVENUE_RECOGNIZED_STATUSES


def is_occupancy_recognized(booking: Booking) -> bool:
    return booking.status in OCCUPANCY_RECOGNIZED_STATUSES


def is_completed_sale(transaction: PosTransaction) -> bool:
    return transaction.status == POS_COMPLETED_STATUS


def bookings_booked_between(
    bookings: Iterable[Booking],
    start: Optional[date] = None,
    end: Optional[date] = None
) -> List[Booking]:
    """Revenue-recognized bookings booked in [start, end] (all when unbounded)"""
    return [
        b for b in bookings
        if is_revenue_recognized(b) and in_window(b.booked_on, start, end)
    ]


def sales_between(
    transactions: Iterable[PosTransaction],
    start: Optional[date] = None,
    end: Optional[date] = None
) -> List[PosTransaction]:
    """Completed POS transactions created in [start, end] (all when unbounded)"""
    return [
        t for t in transactions
        if is_completed_sale(t) and in_window(t.created_on, start, end)
    ]


def room_revenue(bookings: Iterable[Booking]) -> float:
    return sum(b.total_price for b in bookings)


def pos_revenue(transactions: Iterable[PosTransaction]) -> float:
    return sum(t.total for t in transactions)


def occupied_nights(bookings: Iterable[Booking], start: date, end: date) -> int:
    """Room-nights of occupancy-recognized stays overlapping [start, end]"""
    return sum(
        overlap_nights(b.check_in, b.check_out, start, end)
        for b in bookings
        if is_occupancy_recognized(b)
    )


def occupied_room_days(bookings: Iterable[Booking], start: date, end: date) -> int:
    """
    Per-day scan: for each day d in [start, end], the number of stays with
    check_in <= d <= check_out.

    This counts the departure day as occupied, which the period comparison
    and its alerts have always been calibrated against.
    """
    stays = [b for b in bookings if is_occupancy_recognized(b)]
    return sum(
        1
        for day in iter_days(start, end)
        for b in stays
        if b.check_in <= day <= b.check_out
    )


def occupancy_percentage(occupied: float, total_rooms: int, days: int) -> float:
    """Unrounded occupancy, clamped to [0, 100]; 0 when there is no capacity"""
    capacity = total_rooms * days
    if capacity <= 0:
        return 0.0
    return min(100.0, max(0.0, occupied / capacity * 100))


def occupancy_rate(occupied: float, total_rooms: int, days: int) -> float:
    """Occupancy percentage rounded to one decimal"""
    return round_half_up(occupancy_percentage(occupied, total_rooms, days), 1)


def average_daily_rate(revenue: float, booking_count: int) -> float:
    """Room revenue per booking, two decimals"""
    if booking_count <= 0:
        return 0.0
    return round_half_up(revenue / booking_count, 2)


def revenue_per_available_room(revenue: float, total_rooms: int, days: int) -> float:
    """Room revenue per available room-day, two decimals"""
    capacity = total_rooms * days
    if capacity <= 0:
        return 0.0
    return round_half_up(revenue / capacity, 2)


@dataclass
class CategoryRevenue:
    name: str
    value: float


@dataclass
class RevenueBreakdown:
    rooms: float = 0.0
    foods: float = 0.0
    services: float = 0.0
    other: float = 0.0

    @property
    def total(self) -> float:
        return self.rooms + self.foods + self.services + self.other

    def categories(self) -> List[CategoryRevenue]:
        """Non-empty categories in display order"""
        named = [
            ("Rooms", self.rooms),
            ("Foods", self.foods),
            ("Services", self.services),
            ("Other", self.other),
        ]
        return [CategoryRevenue(name=name, value=value) for name, value in named if value > 0]


def split_pos_revenue(snapshot, transactions: Iterable[PosTransaction]) -> Dict[str, float]:
    """
    Split POS revenue into food and services.

    Line items whose product sits in the food category count as food, every
    other line item counts as services. A transaction without line items
    counts its subtotal as services.
    """
    products = snapshot.products_by_id()
    items_by_transaction = snapshot.items_by_transaction()
    split = {"foods": 0.0, "services": 0.0}

    for transaction in transactions:
        items = items_by_transaction.get(transaction.id, [])
        if not items:
            split["services"] += transaction.subtotal
            continue
        for item in items:
            product = products.get(item.product_id) if item.product_id else None
            if product is not None and product.category_id == FOOD_CATEGORY_ID:
                split["foods"] += item.total_price
            else:
                split["services"] += item.total_price

    return split


def revenue_breakdown(snapshot, start: Optional[date] = None, end: Optional[date] = None) -> RevenueBreakdown:
    """Revenue by source for bookings and sales in [start, end]"""
    bookings = bookings_booked_between(snapshot.bookings, start, end)
    sales = sales_between(snapshot.pos_transactions, start, end)
    split = split_pos_revenue(snapshot, sales)
    return RevenueBreakdown(
        rooms=room_revenue(bookings),
        foods=split["foods"],
        services=split["services"],
    )
