"""
Per-room performance ranking.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from services.analytics.metrics import bookings_booked_between
from utils import days_in_window, overlap_nights, round_half_up, round_int


@dataclass
class RoomPerformance:
    room_id: str
    room_type: str
    total_bookings: int = 0
    total_revenue: float = 0.0
    average_revenue: int = 0
    occupancy_rate: int = 0
    average_stay: float = 0.0
    rank: int = 0


@dataclass
class RoomPerformanceReport:
    rooms: List[RoomPerformance] = field(default_factory=list)
    top_performer: Optional[RoomPerformance] = None
    lowest_performer: Optional[RoomPerformance] = None
    total_room_revenue: float = 0.0
    average_occupancy: int = 0


def room_performance(snapshot, start: date, end: date) -> RoomPerformanceReport:
    """
    Rank rooms by revenue for bookings booked in [start, end].

    Every room in inventory is listed, including rooms with no bookings.
    Bookings for rooms missing from inventory get their own row under the
    booked room type. A room's occupancy is its overlap nights with the
    window over the window's days, as a whole percentage capped at 100.
    """
    bookings = bookings_booked_between(snapshot.bookings, start, end)
    days = days_in_window(start, end)

    performance: Dict[str, RoomPerformance] = {
        room.id: RoomPerformance(room_id=room.id, room_type=room.type)
        for room in snapshot.rooms
    }
    stays: Dict[str, List[int]] = {}
    nights: Dict[str, int] = {}

    for b in bookings:
        room_id = b.room_id or b.room_type
        row = performance.setdefault(room_id, RoomPerformance(room_id=room_id, room_type=b.room_type))
        row.total_bookings += 1
        row.total_revenue += b.total_price
        stays.setdefault(room_id, []).append(b.nights)
        nights[room_id] = nights.get(room_id, 0) + overlap_nights(b.check_in, b.check_out, start, end)

    for room_id, row in performance.items():
        if row.total_bookings:
            row.average_revenue = round_int(row.total_revenue / row.total_bookings)
        room_stays = stays.get(room_id)
        if room_stays:
            row.average_stay = round_half_up(sum(room_stays) / len(room_stays), 1)
        if days > 0:
            row.occupancy_rate = min(100, round_int(nights.get(room_id, 0) / days * 100))

    ranked = sorted(performance.values(), key=lambda r: r.total_revenue, reverse=True)
    for index, row in enumerate(ranked):
        row.rank = index + 1

    report = RoomPerformanceReport(rooms=ranked)
    if ranked:
        report.top_performer = ranked[0]
        report.lowest_performer = ranked[-1]
        report.total_room_revenue = sum(r.total_revenue for r in ranked)
        report.average_occupancy = round_int(sum(r.occupancy_rate for r in ranked) / len(ranked))

    return report
