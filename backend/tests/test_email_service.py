"""Brevo email delivery tests."""
import json
from datetime import date

import httpx
import pytest

from services.analytics.alerts import Alert, AlertSeverity
from services.analytics.report_bundle import REPORT_SECTIONS, ReportBundle
from services.email_service import (
    BREVO_API_URL,
    BrevoClient,
    EmailDeliveryError,
    EmailNotConfiguredError,
    render_report_html,
)
from services.records import ReportContent

pytestmark = pytest.mark.asyncio


def _bundle(content=ReportContent.FULL):
    return ReportBundle(
        start_date=date(2026, 3, 1),
        end_date=date(2026, 3, 31),
        report_content=content,
        sections=list(REPORT_SECTIONS[content]),
        total_revenue=125000.5,
        room_revenue=100000,
        pos_revenue=25000.5,
        occupancy_rate=62.5,
        total_bookings=12,
        online_bookings=9,
        walk_in_bookings=3,
        average_stay_duration=2.0,
        top_room="Deluxe <Garden>",
        alerts=[Alert(id="revenue-decline", severity=AlertSeverity.WARNING,
                      title="Revenue Decline", message="Revenue decreased by 21%.")],
    )


async def test_full_report_html():
    body = render_report_html(_bundle(), "monthly", "Minima Hotel")

    assert "Monthly Report: 2026-03-01 - 2026-03-31" in body
    assert "₱125,000.50" in body
    assert "62.5%" in body
    assert "2 nights" in body
    assert "Deluxe &lt;Garden&gt;" in body
    assert "Revenue Decline" in body


async def test_sections_limit_rendered_rows():
    body = render_report_html(_bundle(ReportContent.OCCUPANCY), "daily", "Minima Hotel")

    assert "Occupancy Rate" in body
    assert "Room Revenue" not in body
    assert "Total Bookings" not in body


async def test_send_posts_to_brevo():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["headers"] = request.headers
        captured["payload"] = json.loads(request.content)
        return httpx.Response(201, json={"messageId": "<abc@smtp-relay>"})

    async with BrevoClient(api_key="test-key", sender_email="reports@example.com",
                           hotel_name="Minima Hotel", transport=httpx.MockTransport(handler)) as brevo:
        message_id = await brevo.send_report("gm@example.com", _bundle(), "weekly")

    assert message_id == "<abc@smtp-relay>"
    assert captured["url"] == BREVO_API_URL
    assert captured["headers"]["api-key"] == "test-key"
    assert captured["payload"]["to"] == [{"email": "gm@example.com"}]
    assert captured["payload"]["sender"]["email"] == "reports@example.com"
    assert captured["payload"]["subject"] == "Minima Hotel - Weekly Report (2026-03-01 to 2026-03-31)"


async def test_rejected_send_raises():
    transport = httpx.MockTransport(lambda request: httpx.Response(400, json={"code": "invalid_parameter"}))

    async with BrevoClient(api_key="test-key", transport=transport) as brevo:
        with pytest.raises(EmailDeliveryError):
            await brevo.send_report("gm@example.com", _bundle(), "daily")


async def test_unreachable_brevo_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with BrevoClient(api_key="test-key", transport=httpx.MockTransport(handler)) as brevo:
        with pytest.raises(EmailDeliveryError):
            await brevo.send_report("gm@example.com", _bundle(), "daily")


async def test_missing_api_key():
    async with BrevoClient(api_key="", transport=httpx.MockTransport(lambda r: httpx.Response(201))) as brevo:
        brevo.api_key = None
        assert not brevo.configured
        with pytest.raises(EmailNotConfiguredError):
            await brevo.send_report("gm@example.com", _bundle(), "daily")
