"""
Export API endpoints for Excel/CSV downloads
"""
import io
from datetime import date
from typing import Optional

import pandas as pd
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from database import get_db
from auth import get_current_user
from api.common import resolve_window
from services.analytics.comparison import compare_periods
from services.analytics.occupancy import daily_occupancy
from services.analytics.revenue import monthly_revenue
from services.snapshot import CORE_COLLECTIONS, POS_DETAIL_COLLECTIONS, load_snapshot

router = APIRouter()

KPI_LABELS = [
    ("revenue", "Total Revenue"),
    ("room_revenue", "Room Revenue"),
    ("pos_revenue", "POS Revenue"),
    ("bookings", "Bookings"),
    ("occupancy_rate", "Occupancy Rate (%)"),
    ("adr", "ADR"),
    ("revpar", "RevPAR"),
]


def kpi_frame(comparison) -> pd.DataFrame:
    """One row per KPI: current, previous and change %"""
    return pd.DataFrame([
        {
            "Metric": label,
            "Current": getattr(comparison.current, key),
            "Previous": getattr(comparison.previous, key),
            "Change %": getattr(comparison.changes, key),
        }
        for key, label in KPI_LABELS
    ])


def monthly_revenue_frame(months) -> pd.DataFrame:
    return pd.DataFrame([
        {
            "Month": f"{m.month} {m.year}",
            "Rooms": m.rooms,
            "Restaurant": m.restaurant,
            "Spa": m.spa,
            "Other": m.other,
            "Total": m.total,
        }
        for m in months
    ], columns=["Month", "Rooms", "Restaurant", "Spa", "Other", "Total"])


def daily_occupancy_frame(days) -> pd.DataFrame:
    return pd.DataFrame([
        {"Date": d.date, "Occupied": d.occupied, "Available": d.available, "Rate %": d.rate}
        for d in days
    ], columns=["Date", "Occupied", "Available", "Rate %"])


async def _load_export_data(db, start: date, end: date):
    snapshot = await load_snapshot(db, CORE_COLLECTIONS + POS_DETAIL_COLLECTIONS)
    return (
        compare_periods(snapshot, start, end),
        monthly_revenue(snapshot, start, end),
        daily_occupancy(snapshot, start, end),
    )


@router.get("/kpis.xlsx")
async def export_kpis_excel(
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Download Excel workbook with multiple sheets:
    - KPIs (current vs previous period)
    - Monthly Revenue
    - Daily Occupancy
    """
    start, end = resolve_window(from_date, to_date)
    comparison, months, days = await _load_export_data(db, start, end)

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        kpi_frame(comparison).to_excel(writer, sheet_name='KPIs', index=False)
        monthly_revenue_frame(months).to_excel(writer, sheet_name='Monthly Revenue', index=False)
        daily_occupancy_frame(days).to_excel(writer, sheet_name='Daily Occupancy', index=False)

    output.seek(0)
    filename = f"kpis_{start}_{end}.xlsx"

    return StreamingResponse(
        output,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/kpis.csv")
async def export_kpis_csv(
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Download the KPI comparison as CSV.
    """
    start, end = resolve_window(from_date, to_date)
    comparison, _, _ = await _load_export_data(db, start, end)

    output = io.StringIO()
    kpi_frame(comparison).to_csv(output, index=False)
    output.seek(0)

    filename = f"kpis_{start}_{end}.csv"
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )
