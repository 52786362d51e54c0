"""Metric primitive tests."""
from datetime import date, datetime, timedelta

from services.analytics.metrics import (
    average_daily_rate,
    bookings_booked_between,
    occupancy_rate,
    occupied_nights,
    occupied_room_days,
    revenue_breakdown,
    revenue_per_available_room,
)

from factories import make_booking, make_item, make_rooms, make_sale, make_snapshot, pos_catalog

MARCH_START = date(2026, 3, 1)
MARCH_30 = date(2026, 3, 30)


def test_half_occupied_window():
    # 15 ten-night stays = 150 room-nights
    bookings = [
        make_booking(MARCH_START + timedelta(days=(i % 3) * 10), MARCH_START + timedelta(days=(i % 3) * 10 + 10))
        for i in range(15)
    ]
    occupied = occupied_nights(bookings, MARCH_START, date(2026, 3, 31))

    assert occupied == 150
    # 10 rooms over a 30-day window
    assert occupancy_rate(occupied, 10, 30) == 50.0


def test_overlap_stops_at_window_end():
    stay = make_booking(date(2026, 3, 25), date(2026, 4, 3))
    assert occupied_nights([stay], MARCH_START, MARCH_30) == 5


def test_pending_and_cancelled_bookings_never_count():
    bookings = [
        make_booking(date(2026, 3, 2), date(2026, 3, 4), status="pending"),
        make_booking(date(2026, 3, 2), date(2026, 3, 4), status="cancelled"),
        make_booking(date(2026, 3, 2), date(2026, 3, 4), status="checked-in"),
    ]
    assert occupied_nights(bookings, MARCH_START, MARCH_30) == 2
    assert len(bookings_booked_between(bookings, MARCH_START, MARCH_30)) == 1


def test_occupancy_rate_is_clamped():
    # Duplicate bookings for the same nights can exceed capacity
    assert occupancy_rate(45, 1, 30) == 100.0
    assert occupancy_rate(0, 10, 30) == 0.0


def test_zero_capacity_guards():
    assert occupancy_rate(10, 0, 30) == 0.0
    assert revenue_per_available_room(5000, 0, 30) == 0.0
    assert average_daily_rate(5000, 0) == 0.0


def test_adr_divides_by_bookings_not_nights():
    assert average_daily_rate(10000, 3) == 3333.33
    assert revenue_per_available_room(10000, 4, 30) == 83.33


def test_per_day_scan_counts_check_out_day():
    stay = make_booking(date(2026, 3, 10), date(2026, 3, 12))
    assert occupied_room_days([stay], MARCH_START, MARCH_30) == 3
    assert occupied_nights([stay], MARCH_START, MARCH_30) == 2


def test_booking_window_uses_creation_day():
    booked_in_feb = make_booking(date(2026, 3, 10), date(2026, 3, 12), created_at=datetime(2026, 2, 25, 14, 0))
    no_timestamp = make_booking(date(2026, 3, 10), date(2026, 3, 12))

    in_march = bookings_booked_between([booked_in_feb, no_timestamp], MARCH_START, date(2026, 3, 31))
    assert in_march == [no_timestamp]


def test_revenue_breakdown_splits_pos_by_category():
    products, categories = pos_catalog()
    lunch = make_sale(datetime(2026, 3, 3, 12, 0), 1550, id="t-lunch")
    walk_up = make_sale(datetime(2026, 3, 4, 9, 0), 800, id="t-walkup", subtotal=700)
    voided = make_sale(datetime(2026, 3, 4, 10, 0), 999, id="t-void", status="pending")

    snapshot = make_snapshot(
        rooms=make_rooms(2),
        bookings=[make_booking(date(2026, 3, 5), date(2026, 3, 7), total_price=5000)],
        pos_transactions=[lunch, walk_up, voided],
        pos_transaction_items=[
            make_item("t-lunch", "adobo", 350),
            make_item("t-lunch", "massage", 1200),
            make_item("t-void", "adobo", 999),
        ],
        pos_products=products,
        pos_categories=categories,
    )

    breakdown = revenue_breakdown(snapshot, MARCH_START, date(2026, 3, 31))

    assert breakdown.rooms == 5000
    assert breakdown.foods == 350
    # Massage line item plus the item-less transaction's subtotal
    assert breakdown.services == 1200 + 700
    assert [c.name for c in breakdown.categories()] == ["Rooms", "Foods", "Services"]
