"""
Metrics bundle for emailed reports.

The bundle is plain data. Rendering and delivery belong to the email
service, which uses `sections` to decide what to show for the requested
report content.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from services.analytics.alerts import Alert, derive_alerts
from services.analytics.comparison import compare_periods
from services.analytics.metrics import (
    bookings_booked_between,
    occupancy_rate,
    occupied_nights,
    pos_revenue,
    room_revenue,
    sales_between,
)
from services.records import ReportContent
from utils import days_in_window, round_half_up

REPORT_SECTIONS = {
    ReportContent.FULL: ["revenue", "room_revenue", "pos_revenue", "occupancy", "bookings", "top_room", "alerts"],
    ReportContent.POS_REVENUE: ["pos_revenue", "alerts"],
    ReportContent.ROOM_REVENUE: ["room_revenue", "top_room", "alerts"],
    ReportContent.OCCUPANCY: ["occupancy", "alerts"],
    ReportContent.BOOKINGS: ["bookings", "alerts"],
}


@dataclass
class ReportBundle:
    start_date: date
    end_date: date
    report_content: ReportContent
    sections: List[str]
    total_revenue: float
    room_revenue: float
    pos_revenue: float
    occupancy_rate: float
    total_bookings: int
    online_bookings: int
    walk_in_bookings: int
    average_stay_duration: float
    top_room: Optional[str]
    alerts: List[Alert] = field(default_factory=list)


def top_room_type(bookings) -> Optional[str]:
    """Room type of the room that earned the most; first room wins ties"""
    revenue_by_room: Dict[str, float] = {}
    room_types: Dict[str, str] = {}
    for b in bookings:
        room_id = b.room_id or b.room_type
        revenue_by_room[room_id] = revenue_by_room.get(room_id, 0.0) + b.total_price
        room_types.setdefault(room_id, b.room_type)

    if not revenue_by_room:
        return None

    best = None
    for room_id, amount in revenue_by_room.items():
        if best is None or amount > revenue_by_room[best]:
            best = room_id
    return room_types[best]


def report_bundle(
    snapshot,
    start: date,
    end: date,
    content: ReportContent = ReportContent.FULL
) -> ReportBundle:
    """
    Build the metrics bundle for one window.

    Args:
        snapshot: Snapshot with rooms, bookings and pos_transactions loaded
        start: First day of the window
        end: Last day of the window (inclusive)
        content: Which report the bundle is for

    Returns:
        ReportBundle whose alerts come from comparing the window with the
        preceding window of the same length
    """
    bookings = bookings_booked_between(snapshot.bookings, start, end)
    sales = sales_between(snapshot.pos_transactions, start, end)

    rooms_total = room_revenue(bookings)
    pos_total = pos_revenue(sales)
    walk_in = sum(1 for b in bookings if b.is_walk_in)
    average_stay = sum(b.nights for b in bookings) / len(bookings) if bookings else 0.0

    return ReportBundle(
        start_date=start,
        end_date=end,
        report_content=content,
        sections=list(REPORT_SECTIONS[content]),
        total_revenue=rooms_total + pos_total,
        room_revenue=rooms_total,
        pos_revenue=pos_total,
        occupancy_rate=occupancy_rate(
            occupied_nights(snapshot.bookings, start, end),
            snapshot.total_rooms,
            days_in_window(start, end),
        ),
        total_bookings=len(bookings),
        online_bookings=len(bookings) - walk_in,
        walk_in_bookings=walk_in,
        average_stay_duration=round_half_up(average_stay, 1),
        top_room=top_room_type(bookings),
        alerts=derive_alerts(compare_periods(snapshot, start, end)),
    )
