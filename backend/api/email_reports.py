"""
Email reports API endpoints - send-now and scheduled report configuration
"""
import logging
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from database import get_db
from auth import get_current_user
from api.common import to_response
from jobs.report_dispatch import SCHEDULED_REPORTS_COLLECTION
from services.audit_service import AuditCategory, log_action
from services.email_service import BrevoClient, EmailNotConfiguredError
from services.records import ReportContent, ReportFrequency, ScheduledReport, decode_collection
from services.report_service import ReportType, send_report

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_email_client():
    """Dependency yielding an open Brevo client"""
    async with BrevoClient() as client:
        yield client


class SendReportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    report_content: ReportContent = Field(ReportContent.FULL, alias="reportContent")
    report_type: ReportType = Field(ReportType.DAILY, alias="reportType")
    start_date: Optional[date] = Field(None, alias="startDate")
    end_date: Optional[date] = Field(None, alias="endDate")


class ScheduleCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    frequency: ReportFrequency
    day_of_week: Optional[int] = Field(None, alias="dayOfWeek", ge=0, le=6)
    day_of_month: Optional[int] = Field(None, alias="dayOfMonth", ge=1, le=31)
    hour: int = Field(8, ge=0, le=23)
    enabled: bool = True
    report_content: ReportContent = Field(ReportContent.FULL, alias="reportContent")

    @model_validator(mode="after")
    def _day_for_frequency(self):
        if self.frequency == ReportFrequency.WEEKLY and self.day_of_week is None:
            raise ValueError("weekly schedules need dayOfWeek")
        if self.frequency == ReportFrequency.MONTHLY and self.day_of_month is None:
            raise ValueError("monthly schedules need dayOfMonth")
        return self


class ScheduleUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = Field(None, min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    frequency: Optional[ReportFrequency] = None
    day_of_week: Optional[int] = Field(None, alias="dayOfWeek", ge=0, le=6)
    day_of_month: Optional[int] = Field(None, alias="dayOfMonth", ge=1, le=31)
    hour: Optional[int] = Field(None, ge=0, le=23)
    enabled: Optional[bool] = None
    report_content: Optional[ReportContent] = Field(None, alias="reportContent")


# ============================================
# SEND NOW
# ============================================

@router.post("/send")
async def send_report_now(
    request: SendReportRequest,
    db=Depends(get_db),
    email_client=Depends(get_email_client),
    current_user: dict = Depends(get_current_user)
):
    """
    Build and email a report immediately.

    The window defaults by report type (daily: last day, weekly: last 7
    days, monthly: last month) unless startDate/endDate are given.
    """
    if not email_client.configured:
        raise EmailNotConfiguredError("BREVO_API_KEY is not configured")

    try:
        message_id, bundle = await send_report(
            db,
            email_client,
            request.email,
            content=request.report_content,
            report_type=request.report_type,
            start=request.start_date,
            end=request.end_date,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    await log_action(
        db,
        "report_sent",
        AuditCategory.REPORT,
        f"Sent {request.report_type.value} {request.report_content.value} report to {request.email}",
        user=current_user,
        metadata={"messageId": message_id},
    )

    return {
        "status": "sent",
        "message_id": message_id,
        "report": to_response(bundle),
    }


# ============================================
# SCHEDULES
# ============================================

@router.get("/schedules")
async def list_schedules(
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    raw = await db.get_collection(SCHEDULED_REPORTS_COLLECTION)
    schedules, skipped = decode_collection(raw, ScheduledReport, SCHEDULED_REPORTS_COLLECTION)
    return {
        "data": to_response(schedules),
        "decode_errors": {SCHEDULED_REPORTS_COLLECTION: skipped} if skipped else {},
    }


@router.post("/schedules")
async def create_schedule(
    schedule: ScheduleCreate,
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    record = {
        **schedule.model_dump(mode="json", by_alias=True, exclude_none=True),
        "lastSent": None,
        "createdAt": datetime.now(timezone.utc).isoformat(),
        "createdBy": current_user.get("id"),
    }
    schedule_id = await db.push(SCHEDULED_REPORTS_COLLECTION, record)

    await log_action(
        db,
        "report_scheduled",
        AuditCategory.REPORT,
        f"Scheduled {schedule.frequency.value} report to {schedule.email}",
        user=current_user,
        metadata={"scheduleId": schedule_id},
    )
    return to_response(ScheduledReport.model_validate({**record, "id": schedule_id}))


@router.patch("/schedules/{schedule_id}")
async def update_schedule(
    schedule_id: str,
    changes: ScheduleUpdate,
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    path = f"{SCHEDULED_REPORTS_COLLECTION}/{schedule_id}"
    existing = await db.get_record(path)
    if existing is None:
        raise HTTPException(status_code=404, detail=f"Schedule {schedule_id} not found")

    values = changes.model_dump(mode="json", by_alias=True, exclude_none=True)
    try:
        updated = ScheduledReport.model_validate({**existing, **values, "id": schedule_id})
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    if values:
        await db.update(path, values)
    return to_response(updated)


@router.delete("/schedules/{schedule_id}")
async def delete_schedule(
    schedule_id: str,
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    path = f"{SCHEDULED_REPORTS_COLLECTION}/{schedule_id}"
    existing = await db.get_record(path)
    if existing is None:
        raise HTTPException(status_code=404, detail=f"Schedule {schedule_id} not found")

    await db.delete(path)
    await log_action(
        db,
        "report_unscheduled",
        AuditCategory.REPORT,
        f"Removed scheduled report {schedule_id}",
        user=current_user,
        metadata={"scheduleId": schedule_id},
    )
    return {"status": "deleted", "id": schedule_id}
