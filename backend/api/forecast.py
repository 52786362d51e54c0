"""
Forecast API endpoints
"""
import logging
from datetime import date

from fastapi import APIRouter, Depends, Query

from database import get_db
from auth import get_current_user
from api.common import cached_view
from services.analytics.forecast import build_forecast
from services.snapshot import CORE_COLLECTIONS

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def get_forecast(
    months: int = Query(3, ge=1, le=12, description="Months to project after the current month"),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Revenue, occupancy and bookings projection.

    Returns the six trailing months (current month last), the projected
    months and a summary with growth rate, occupancy trend and confidence.
    """
    today = date.today()
    return await cached_view(
        "forecast", {"months": months, "today": today}, db, CORE_COLLECTIONS,
        lambda s: build_forecast(s, months, today),
    )
