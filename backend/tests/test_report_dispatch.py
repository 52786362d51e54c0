"""Scheduled report dispatch tests."""
from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from jobs.report_dispatch import is_report_due, run_report_dispatch
from services.records import ScheduledReport
from services.report_service import ReportType, report_window

from factories import FakeEmailClient, FakeStore

pytestmark = pytest.mark.asyncio

MANILA = ZoneInfo("Asia/Manila")
# Monday 08:00
NOW = datetime(2026, 3, 2, 8, 0, tzinfo=MANILA)


def _schedule(**fields):
    data = {"email": "gm@example.com", "frequency": "daily", "hour": 8, "enabled": True}
    data.update(fields)
    return ScheduledReport.model_validate({"id": "s1", **data})


async def test_daily_schedule_due_at_its_hour():
    assert is_report_due(_schedule(), NOW)
    assert not is_report_due(_schedule(hour=9), NOW)
    assert not is_report_due(_schedule(enabled=False), NOW)


async def test_weekly_schedule_matches_sunday_first_weekday():
    assert is_report_due(_schedule(frequency="weekly", dayOfWeek=1), NOW)
    assert not is_report_due(_schedule(frequency="weekly", dayOfWeek=2), NOW)
    assert not is_report_due(_schedule(frequency="weekly"), NOW)


async def test_monthly_schedule_clamps_to_month_end():
    april_30 = datetime(2026, 4, 30, 8, 0, tzinfo=MANILA)
    assert is_report_due(_schedule(frequency="monthly", dayOfMonth=31), april_30)
    assert not is_report_due(_schedule(frequency="monthly", dayOfMonth=31), datetime(2026, 4, 29, 8, 0, tzinfo=MANILA))


async def test_already_sent_this_hour_is_skipped():
    # 08:05 Manila is 00:05 UTC
    assert not is_report_due(_schedule(lastSent="2026-03-02T00:05:00+00:00"), NOW)
    assert is_report_due(_schedule(lastSent="2026-03-01T00:05:00+00:00"), NOW)


async def test_report_windows():
    today = date(2026, 3, 31)
    assert report_window(ReportType.DAILY, today) == (date(2026, 3, 30), today)
    assert report_window(ReportType.WEEKLY, today) == (date(2026, 3, 24), today)
    assert report_window(ReportType.MONTHLY, today) == (date(2026, 2, 28), today)
    assert report_window(ReportType.MONTHLY, date(2026, 1, 15)) == (date(2025, 12, 15), date(2026, 1, 15))


async def test_dispatch_sends_due_reports_and_stamps_last_sent():
    store = FakeStore({
        "scheduled_reports": {
            "s-daily": {"email": "gm@example.com", "frequency": "daily", "hour": 8, "enabled": True,
                        "reportContent": "occupancy"},
            "s-weekly": {"email": "fin@example.com", "frequency": "weekly", "dayOfWeek": 1, "hour": 8,
                         "enabled": True},
            "s-later": {"email": "ops@example.com", "frequency": "daily", "hour": 17, "enabled": True},
        }
    })
    email = FakeEmailClient()

    sent = await run_report_dispatch(NOW, db=store, email_client=email)

    assert sorted(sent) == ["s-daily", "s-weekly"]
    recipients = {to: (bundle, report_type) for to, bundle, report_type in email.sent}
    assert recipients["gm@example.com"][1] == "daily"
    assert recipients["gm@example.com"][0].sections == ["occupancy", "alerts"]
    assert recipients["gm@example.com"][0].end_date == date(2026, 3, 2)
    assert recipients["fin@example.com"][0].start_date == date(2026, 2, 23)

    stamped = store.data["scheduled_reports"]["s-daily"]["lastSent"]
    assert stamped == "2026-03-02T00:00:00+00:00"
    assert "lastSent" not in store.data["scheduled_reports"]["s-later"]


async def test_dispatch_is_idempotent_within_the_hour():
    store = FakeStore({
        "scheduled_reports": {
            "s-daily": {"email": "gm@example.com", "frequency": "daily", "hour": 8, "enabled": True},
        }
    })
    email = FakeEmailClient()

    await run_report_dispatch(NOW, db=store, email_client=email)
    second = await run_report_dispatch(NOW.replace(minute=30), db=store, email_client=email)

    assert second == []
    assert len(email.sent) == 1


async def test_one_failure_does_not_block_other_schedules():
    store = FakeStore({
        "scheduled_reports": {
            "s-bad": {"email": "bounce@example.com", "frequency": "daily", "hour": 8, "enabled": True},
            "s-good": {"email": "gm@example.com", "frequency": "daily", "hour": 8, "enabled": True},
        }
    })
    email = FakeEmailClient(fail_for={"bounce@example.com"})

    sent = await run_report_dispatch(NOW, db=store, email_client=email)

    assert sent == ["s-good"]
    assert "lastSent" not in store.data["scheduled_reports"]["s-bad"]


async def test_unreachable_store_skips_the_run():
    store = FakeStore()
    store.fail = True

    assert await run_report_dispatch(NOW, db=store, email_client=FakeEmailClient()) == []
