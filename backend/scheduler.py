"""
APScheduler configuration for scheduled jobs
"""
import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from jobs.data_refresh import run_data_refresh
from jobs.report_dispatch import REPORT_TIMEZONE, run_report_dispatch

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler(timezone=REPORT_TIMEZONE)


async def run_scheduled_report_dispatch():
    """Wrapper so the cron trigger calls the dispatch job with defaults"""
    await run_report_dispatch()


async def run_scheduled_data_refresh():
    """Wrapper so the cron trigger calls the refresh job with defaults"""
    await run_data_refresh()


def start_scheduler():
    """Initialize and start the scheduler"""
    logger.info("Starting scheduler...")

    # Scheduled report emails - hourly on the hour
    scheduler.add_job(
        run_scheduled_report_dispatch,
        CronTrigger(minute=0, timezone=REPORT_TIMEZONE),
        id="report_dispatch",
        name="Hourly Scheduled Report Dispatch",
        replace_existing=True
    )

    # Data refresh - checked every minute, runs when the configured interval has passed
    scheduler.add_job(
        run_scheduled_data_refresh,
        CronTrigger(minute="*", timezone=REPORT_TIMEZONE),
        id="data_refresh",
        name="Data Refresh Check (every minute)",
        replace_existing=True
    )

    scheduler.start()
    logger.info(f"Scheduler started with {len(scheduler.get_jobs())} jobs (timezone {REPORT_TIMEZONE})")


def shutdown_scheduler():
    """Shutdown the scheduler"""
    logger.info("Shutting down scheduler...")
    scheduler.shutdown()
