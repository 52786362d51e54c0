"""Report bundle tests."""
from datetime import date, datetime

from services.analytics.report_bundle import report_bundle, top_room_type
from services.records import ReportContent

from factories import make_booking, make_rooms, make_sale, make_snapshot

START = date(2026, 3, 1)
END = date(2026, 3, 31)


def _snapshot():
    return make_snapshot(
        rooms=make_rooms(4),
        bookings=[
            make_booking(date(2026, 3, 2), date(2026, 3, 5), total_price=9000,
                         created_at=datetime(2026, 3, 1, 9, 0), room_id="room1", room_type="Deluxe"),
            make_booking(date(2026, 3, 10), date(2026, 3, 11), total_price=4000,
                         created_at=datetime(2026, 3, 9, 9, 0), room_id="room2", room_type="Suite"),
            make_booking(date(2026, 3, 20), date(2026, 3, 22), total_price=6000,
                         created_at=datetime(2026, 3, 19, 9, 0), room_id="room2", room_type="Suite",
                         is_walk_in=True),
            make_booking(date(2026, 3, 25), date(2026, 3, 27), total_price=8000,
                         created_at=datetime(2026, 3, 24, 9, 0), status="cancelled"),
        ],
        pos_transactions=[make_sale(datetime(2026, 3, 12, 20, 0), 2500)],
    )


def test_full_bundle_totals():
    bundle = report_bundle(_snapshot(), START, END)

    assert bundle.report_content == ReportContent.FULL
    assert bundle.room_revenue == 19000
    assert bundle.pos_revenue == 2500
    assert bundle.total_revenue == 21500
    assert bundle.total_bookings == 3
    assert bundle.walk_in_bookings == 1
    assert bundle.online_bookings == 2
    # (3 + 1 + 2) nights / 3 bookings
    assert bundle.average_stay_duration == 2.0
    # Suite room2 earned 10000 against Deluxe room1's 9000
    assert bundle.top_room == "Suite"
    # 6 nights over 4 rooms x 31 days
    assert bundle.occupancy_rate == 4.8


def test_bundle_alerts_come_from_period_comparison():
    bundle = report_bundle(_snapshot(), START, END)
    ids = [alert.id for alert in bundle.alerts]

    # Nothing in the previous window, so revenue is up 100%
    assert "revenue-growth" in ids
    assert "critical-occupancy" in ids


def test_sections_follow_report_content():
    bundle = report_bundle(_snapshot(), START, END, ReportContent.POS_REVENUE)
    assert bundle.sections == ["pos_revenue", "alerts"]


def test_empty_window_bundle():
    bundle = report_bundle(make_snapshot(), START, END)

    assert bundle.total_revenue == 0
    assert bundle.average_stay_duration == 0
    assert bundle.top_room is None
    assert [alert.id for alert in bundle.alerts] == ["no-activity"]


def test_top_room_first_wins_ties():
    bookings = [
        make_booking(START, date(2026, 3, 2), total_price=5000, room_id="room1", room_type="Deluxe"),
        make_booking(START, date(2026, 3, 2), total_price=5000, room_id="room2", room_type="Suite"),
    ]
    assert top_room_type(bookings) == "Deluxe"
