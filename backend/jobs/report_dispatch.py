"""
Scheduled report dispatch job
Runs hourly, sends every scheduled report due in the current hour

A schedule is due when:
- it is enabled and its hour matches the current hour
- weekly schedules: day of week matches (0 = Sunday)
- monthly schedules: day of month matches, clamped to the month's last day
  (a schedule for the 31st goes out on the 30th in a 30-day month)
- it has not already been sent in the current hour
"""
import os
import calendar
import logging
from datetime import date, datetime, timezone
from typing import List, Optional
from zoneinfo import ZoneInfo

from database import create_client
from services.email_service import BrevoClient, EmailDeliveryError
from services.firebase_client import FirebaseAPIError
from services.records import ReportFrequency, ScheduledReport, decode_collection
from services.report_service import ReportType, send_report
from utils import sunday_first_weekday

logger = logging.getLogger(__name__)

SCHEDULED_REPORTS_COLLECTION = "scheduled_reports"
REPORT_TIMEZONE = os.getenv("REPORT_TIMEZONE", "Asia/Manila")


def report_now() -> datetime:
    """Current time in the hotel's report timezone"""
    return datetime.now(ZoneInfo(REPORT_TIMEZONE))


def sent_this_hour(schedule: ScheduledReport, now: datetime) -> bool:
    if schedule.last_sent is None:
        return False
    last_sent = schedule.last_sent
    if last_sent.tzinfo is None:
        last_sent = last_sent.replace(tzinfo=timezone.utc)
    hour_start = now.replace(minute=0, second=0, microsecond=0)
    return last_sent >= hour_start


def is_report_due(schedule: ScheduledReport, now: datetime) -> bool:
    """Whether a schedule should be sent in the hour containing now"""
    if not schedule.enabled or schedule.hour != now.hour:
        return False

    if schedule.frequency == ReportFrequency.WEEKLY:
        if schedule.day_of_week is None or schedule.day_of_week != sunday_first_weekday(now.date()):
            return False
    elif schedule.frequency == ReportFrequency.MONTHLY:
        if schedule.day_of_month is None:
            return False
        last_day = calendar.monthrange(now.year, now.month)[1]
        if min(schedule.day_of_month, last_day) != now.day:
            return False

    return not sent_this_hour(schedule, now)


async def run_report_dispatch(now: Optional[datetime] = None, db=None, email_client=None) -> List[str]:
    """
    Send all due scheduled reports.

    One failing schedule is logged and skipped; the others still go out.

    Returns:
        Ids of the schedules sent
    """
    now = now or report_now()
    logger.info(f"Checking scheduled reports for {now.isoformat()}")

    if db is None:
        async with create_client() as client:
            return await run_report_dispatch(now, client, email_client)
    if email_client is None:
        async with BrevoClient() as brevo:
            return await run_report_dispatch(now, db, brevo)

    try:
        raw = await db.get_collection(SCHEDULED_REPORTS_COLLECTION)
    except FirebaseAPIError as e:
        logger.error(f"Report dispatch skipped, could not load schedules: {e}")
        return []

    schedules, _ = decode_collection(raw, ScheduledReport, SCHEDULED_REPORTS_COLLECTION)
    due = [s for s in schedules if is_report_due(s, now)]
    if not due:
        logger.info("No scheduled reports due")
        return []

    sent = []
    for schedule in due:
        try:
            await send_report(
                db,
                email_client,
                schedule.email,
                content=schedule.report_content,
                report_type=ReportType(schedule.frequency.value),
                end=now.date(),
            )
            await db.update(
                f"{SCHEDULED_REPORTS_COLLECTION}/{schedule.id}",
                {"lastSent": now.astimezone(timezone.utc).isoformat()}
            )
            sent.append(schedule.id)
        except (EmailDeliveryError, FirebaseAPIError, ValueError) as e:
            logger.error(f"Scheduled report {schedule.id} to {schedule.email} failed: {e}")

    logger.info(f"Scheduled report dispatch complete: {len(sent)}/{len(due)} sent")
    return sent
