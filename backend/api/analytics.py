"""
Guest, booking pattern and room performance API endpoints
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from database import get_db
from auth import get_current_user
from api.common import cached_view, resolve_window
from services.analytics.guests import guest_analytics, peak_analysis
from services.analytics.rooms import room_performance
from services.snapshot import BOOKINGS, GUESTS, ROOMS

router = APIRouter()


def _optional_window(from_date: Optional[date], to_date: Optional[date]):
    # No dates means all recognized bookings
    if from_date is None and to_date is None:
        return None, None
    return resolve_window(from_date, to_date)


@router.get("/guests")
async def get_guest_analytics(
    from_date: Optional[date] = Query(None, description="Omit both dates for all time"),
    to_date: Optional[date] = Query(None),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Guest mix (online / walk-in), repeat guests, stay lengths and top guests by spend.
    """
    start, end = _optional_window(from_date, to_date)
    return await cached_view(
        "guest_analytics", {"from": start, "to": end}, db, (BOOKINGS, GUESTS),
        lambda s: guest_analytics(s, start, end),
    )


@router.get("/peaks")
async def get_peak_analysis(
    from_date: Optional[date] = Query(None, description="Omit both dates for all time"),
    to_date: Optional[date] = Query(None),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Booking volume by hour made, check-in weekday and check-in month.
    """
    start, end = _optional_window(from_date, to_date)
    return await cached_view(
        "peak_analysis", {"from": start, "to": end}, db, (BOOKINGS,),
        lambda s: peak_analysis(s, start, end),
    )


@router.get("/rooms")
async def get_room_performance(
    from_date: Optional[date] = Query(None, description="Default: 30 days before to_date"),
    to_date: Optional[date] = Query(None, description="Default: today"),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    start, end = resolve_window(from_date, to_date)
    return await cached_view(
        "room_performance", {"from": start, "to": end}, db, (ROOMS, BOOKINGS),
        lambda s: room_performance(s, start, end),
    )
