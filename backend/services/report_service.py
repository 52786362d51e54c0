"""
Send-now report path shared by the email API and the dispatch job.
"""
import calendar
import logging
from datetime import date, timedelta
from enum import Enum
from typing import Optional, Tuple

from services.analytics.report_bundle import ReportBundle, report_bundle
from services.records import ReportContent
from services.snapshot import CORE_COLLECTIONS, load_snapshot
from utils import validate_window

logger = logging.getLogger(__name__)


class ReportType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def report_window(report_type: ReportType, today: Optional[date] = None) -> Tuple[date, date]:
    """
    Default window for a report type, ending today.

    daily: yesterday and today
    weekly: the last 7 days plus today
    monthly: the same day last month through today
    """
    today = today or date.today()
    if report_type == ReportType.DAILY:
        return today - timedelta(days=1), today
    if report_type == ReportType.WEEKLY:
        return today - timedelta(days=7), today

    year, month = (today.year, today.month - 1) if today.month > 1 else (today.year - 1, 12)
    day = min(today.day, calendar.monthrange(year, month)[1])
    return date(year, month, day), today


async def build_report(
    db,
    start: date,
    end: date,
    content: ReportContent = ReportContent.FULL
) -> ReportBundle:
    snapshot = await load_snapshot(db, CORE_COLLECTIONS)
    return report_bundle(snapshot, start, end, content)


async def send_report(
    db,
    email_client,
    email: str,
    content: ReportContent = ReportContent.FULL,
    report_type: ReportType = ReportType.DAILY,
    start: Optional[date] = None,
    end: Optional[date] = None
) -> Tuple[Optional[str], ReportBundle]:
    """
    Build a report bundle and hand it to the email client.

    Args:
        db: Store client
        email_client: Opened BrevoClient
        email: Recipient address
        content: Report content filter
        report_type: daily / weekly / monthly, picks the default window
        start, end: Explicit window overriding the default (a lone end
            anchors the default window)

    Returns:
        Tuple of (message id, bundle sent)
    """
    try:
        default_start, default_end = report_window(report_type, end)
    except (OverflowError, ValueError):
        raise ValueError(f"End date {end} is too early for a {ReportType(report_type).value} report")
    start = start or default_start
    end = end or default_end
    validate_window(start, end)

    bundle = await build_report(db, start, end, content)
    message_id = await email_client.send_report(email, bundle, ReportType(report_type).value)

    logger.info(f"Report {content.value} {start}..{end} sent to {email}")
    return message_id, bundle
