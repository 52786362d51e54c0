"""
Reports API endpoints - occupancy, revenue, POS and period comparison
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from database import get_db
from auth import get_current_user
from api.common import cached_view, resolve_window
from services.analytics import occupancy, revenue
from services.analytics.alerts import derive_alerts
from services.analytics.comparison import compare_periods, kpi_summary
from services.snapshot import BOOKINGS, CORE_COLLECTIONS, POS_DETAIL_COLLECTIONS, POS_TRANSACTIONS, ROOMS
from utils import trailing_months

logger = logging.getLogger(__name__)

router = APIRouter()

POS_COLLECTIONS = (POS_TRANSACTIONS,) + POS_DETAIL_COLLECTIONS
REVENUE_COLLECTIONS = (BOOKINGS,) + POS_COLLECTIONS
DAILY_WINDOW_DAYS = 366


def _trailing_six_months(from_date: Optional[date], to_date: Optional[date]):
    if from_date is None and to_date is None:
        to_date = date.today()
        year, month = trailing_months(to_date, 6)[0]
        from_date = date(year, month, 1)
    return resolve_window(from_date, to_date)


# ============================================
# ROOMS & BOOKINGS
# ============================================

@router.get("/room-types")
async def get_room_types(
    on_date: Optional[date] = Query(None, description="Day to count occupied rooms for (default today)"),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Room inventory grouped by type with rooms occupied on the given day.
    """
    on_date = on_date or date.today()
    return await cached_view(
        "room_types", {"on_date": on_date}, db, (ROOMS, BOOKINGS),
        lambda s: occupancy.room_types(s, on_date),
    )


@router.get("/bookings")
async def get_recent_bookings(
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    limit: int = Query(10, ge=1, le=100),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Latest bookings (by check-in) touching the window, every status.
    """
    if from_date is not None or to_date is not None:
        from_date, to_date = resolve_window(from_date, to_date)
    return await cached_view(
        "booking_list", {"from": from_date, "to": to_date, "limit": limit}, db, (BOOKINGS,),
        lambda s: occupancy.booking_list(s, from_date, to_date, limit),
    )


@router.get("/booking-stats")
async def get_booking_stats(
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    start, end = resolve_window(from_date, to_date)
    return await cached_view(
        "booking_stats", {"from": start, "to": end}, db, (BOOKINGS,),
        lambda s: occupancy.booking_stats(s, start, end),
    )


# ============================================
# OCCUPANCY
# ============================================

@router.get("/occupancy/daily")
async def get_daily_occupancy(
    from_date: Optional[date] = Query(None, description="Default: 6 days before to_date"),
    to_date: Optional[date] = Query(None, description="Default: today"),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Rooms occupied, available and occupancy rate per day.
    """
    start, end = resolve_window(from_date, to_date, days=6, max_days=DAILY_WINDOW_DAYS)
    return await cached_view(
        "daily_occupancy", {"from": start, "to": end}, db, (ROOMS, BOOKINGS),
        lambda s: occupancy.daily_occupancy(s, start, end),
    )


@router.get("/occupancy/monthly")
async def get_monthly_occupancy(
    from_date: Optional[date] = Query(None, description="Default: start of the month five months ago"),
    to_date: Optional[date] = Query(None, description="Default: today"),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    start, end = _trailing_six_months(from_date, to_date)
    return await cached_view(
        "monthly_occupancy", {"from": start, "to": end}, db, (ROOMS, BOOKINGS),
        lambda s: occupancy.monthly_occupancy(s, start, end),
    )


# ============================================
# REVENUE
# ============================================

@router.get("/revenue/monthly")
async def get_monthly_revenue(
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Revenue per month split into rooms, restaurant (food POS), spa (other POS) and other.
    """
    start, end = _trailing_six_months(from_date, to_date)
    return await cached_view(
        "monthly_revenue", {"from": start, "to": end}, db, REVENUE_COLLECTIONS,
        lambda s: revenue.monthly_revenue(s, start, end),
    )


@router.get("/revenue/categories")
async def get_revenue_by_category(
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    start, end = resolve_window(from_date, to_date)
    return await cached_view(
        "revenue_by_category", {"from": start, "to": end}, db, REVENUE_COLLECTIONS,
        lambda s: revenue.revenue_by_category(s, start, end),
    )


@router.get("/revenue/summary")
async def get_revenue_summary(
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    start, end = resolve_window(from_date, to_date)
    return await cached_view(
        "revenue_summary", {"from": start, "to": end}, db, (BOOKINGS, POS_TRANSACTIONS),
        lambda s: revenue.revenue_summary(s, start, end),
    )


# ============================================
# POINT OF SALE
# ============================================

@router.get("/pos/categories")
async def get_pos_category_revenue(
    from_date: Optional[date] = Query(None, description="Omit both dates for all time"),
    to_date: Optional[date] = Query(None),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    if from_date is not None or to_date is not None:
        from_date, to_date = resolve_window(from_date, to_date)
    return await cached_view(
        "pos_categories", {"from": from_date, "to": to_date}, db, POS_COLLECTIONS,
        lambda s: revenue.pos_category_revenue(s, from_date, to_date),
    )


@router.get("/pos/payment-methods")
async def get_payment_methods(
    from_date: Optional[date] = Query(None, description="Omit both dates for all time"),
    to_date: Optional[date] = Query(None),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    if from_date is not None or to_date is not None:
        from_date, to_date = resolve_window(from_date, to_date)
    return await cached_view(
        "payment_methods", {"from": from_date, "to": to_date}, db, (POS_TRANSACTIONS,),
        lambda s: revenue.payment_method_breakdown(s, from_date, to_date),
    )


@router.get("/pos/top-products")
async def get_top_products(
    limit: int = Query(10, ge=1, le=100),
    from_date: Optional[date] = Query(None, description="Omit both dates for all time"),
    to_date: Optional[date] = Query(None),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    if from_date is not None or to_date is not None:
        from_date, to_date = resolve_window(from_date, to_date)
    return await cached_view(
        "top_products", {"from": from_date, "to": to_date, "limit": limit}, db, POS_COLLECTIONS,
        lambda s: revenue.top_products(s, limit, from_date, to_date),
    )


# ============================================
# PERIOD COMPARISON
# ============================================

@router.get("/comparison")
async def get_period_comparison(
    from_date: Optional[date] = Query(None, description="Default: 30 days before to_date"),
    to_date: Optional[date] = Query(None, description="Default: today"),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Current window vs the preceding window of equal length.

    Returns current and previous metrics (revenue, room/POS revenue, bookings,
    occupancy, ADR, RevPAR) plus percentage changes.
    """
    start, end = resolve_window(from_date, to_date)
    return await cached_view(
        "comparison", {"from": start, "to": end}, db, CORE_COLLECTIONS,
        lambda s: compare_periods(s, start, end),
    )


@router.get("/alerts")
async def get_alerts(
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Advisories derived from the period comparison, most severe first.
    """
    start, end = resolve_window(from_date, to_date)
    return await cached_view(
        "alerts", {"from": start, "to": end}, db, CORE_COLLECTIONS,
        lambda s: derive_alerts(compare_periods(s, start, end)),
    )


@router.get("/kpis")
async def get_kpis(
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    start, end = resolve_window(from_date, to_date)
    return await cached_view(
        "kpis", {"from": start, "to": end}, db, CORE_COLLECTIONS,
        lambda s: kpi_summary(compare_periods(s, start, end)),
    )
