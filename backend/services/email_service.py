"""
Report email delivery via the Brevo transactional email API.

Renders a report bundle into a small HTML summary and posts it to Brevo.
Only the sections listed in the bundle are rendered.
"""
import os
import html
import httpx
import logging
from typing import List, Optional

from services.analytics.report_bundle import ReportBundle
from utils import format_currency, format_number

logger = logging.getLogger(__name__)

BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"
BREVO_API_KEY = os.getenv("BREVO_API_KEY")
BREVO_SENDER_EMAIL = os.getenv("BREVO_SENDER_EMAIL", "noreply@minimahotel.com")
HOTEL_NAME = os.getenv("HOTEL_NAME", "Minima Hotel")


class EmailDeliveryError(Exception):
    """Raised when Brevo rejects a send or cannot be reached"""
    pass


class EmailNotConfiguredError(EmailDeliveryError):
    """Raised when no Brevo API key is configured"""
    pass


def report_title(report_type: str) -> str:
    return f"{report_type.capitalize()} Report"


def _row(label: str, value: str, bold: bool = False) -> str:
    weight = "font-weight: bold;" if bold else ""
    return (
        f'<tr><td style="padding: 10px; border: 1px solid #D1D1D1;">{html.escape(label)}</td>'
        f'<td style="padding: 10px; border: 1px solid #D1D1D1; text-align: right; {weight}">{html.escape(value)}</td></tr>'
    )


def render_report_html(bundle: ReportBundle, report_type: str, hotel_name: str = None) -> str:
    """Render the sections of a bundle as an HTML email body"""
    hotel_name = hotel_name or HOTEL_NAME
    sections = set(bundle.sections)
    rows: List[str] = []

    if "revenue" in sections:
        rows.append(_row("Total Revenue", format_currency(bundle.total_revenue), bold=True))
    if "room_revenue" in sections:
        rows.append(_row("Room Revenue", format_currency(bundle.room_revenue)))
    if "pos_revenue" in sections:
        rows.append(_row("POS Revenue", format_currency(bundle.pos_revenue)))
    if "occupancy" in sections:
        rows.append(_row("Occupancy Rate", f"{format_number(bundle.occupancy_rate)}%"))
    if "bookings" in sections:
        rows.append(_row("Total Bookings", str(bundle.total_bookings)))
        rows.append(_row("Online Bookings", str(bundle.online_bookings)))
        rows.append(_row("Walk-in Bookings", str(bundle.walk_in_bookings)))
        rows.append(_row("Average Stay", f"{format_number(bundle.average_stay_duration)} nights"))
    if "top_room" in sections and bundle.top_room:
        rows.append(_row("Top Room", bundle.top_room))

    alerts_html = ""
    if "alerts" in sections and bundle.alerts:
        items = "".join(
            f"<li><strong>{html.escape(alert.title)}</strong>: {html.escape(alert.message)}</li>"
            for alert in bundle.alerts
        )
        alerts_html = f'<h3 style="color: #92400E;">Alerts</h3><ul>{items}</ul>'

    return (
        '<!DOCTYPE html><html><head><meta charset="utf-8"></head>'
        '<body style="font-family: sans-serif; max-width: 600px; margin: 0 auto;">'
        f'<h1>{html.escape(hotel_name)}</h1>'
        f'<p>{html.escape(report_title(report_type))}: '
        f'{bundle.start_date.isoformat()} - {bundle.end_date.isoformat()}</p>'
        f'<table style="width: 100%; border-collapse: collapse;">{"".join(rows)}</table>'
        f'{alerts_html}'
        '</body></html>'
    )


class BrevoClient:
    """
    Async client for the Brevo transactional email endpoint

    Usage:
        async with BrevoClient() as brevo:
            message_id = await brevo.send_report(to, bundle, "daily")
    """

    def __init__(
        self,
        api_key: str = None,
        sender_email: str = None,
        hotel_name: str = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key or BREVO_API_KEY
        self.sender_email = sender_email or BREVO_SENDER_EMAIL
        self.hotel_name = hotel_name or HOTEL_NAME
        self._transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def __aenter__(self):
        self.client = httpx.AsyncClient(timeout=30.0, transport=self._transport)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.client.aclose()

    async def send_report(self, to: str, bundle: ReportBundle, report_type: str) -> Optional[str]:
        """
        Send a rendered report.

        Returns:
            Brevo message id

        Raises:
            EmailNotConfiguredError: No API key
            EmailDeliveryError: Brevo rejected the request or was unreachable
        """
        if not self.configured:
            raise EmailNotConfiguredError("BREVO_API_KEY is not configured")

        payload = {
            "sender": {"name": self.hotel_name, "email": self.sender_email},
            "to": [{"email": to}],
            "subject": (
                f"{self.hotel_name} - {report_title(report_type)} "
                f"({bundle.start_date.isoformat()} to {bundle.end_date.isoformat()})"
            ),
            "htmlContent": render_report_html(bundle, report_type, self.hotel_name),
        }

        try:
            response = await self.client.post(
                BREVO_API_URL,
                json=payload,
                headers={"api-key": self.api_key, "accept": "application/json"}
            )
        except httpx.HTTPError as e:
            logger.error(f"Brevo send to {to} failed: {e}")
            raise EmailDeliveryError(f"Email delivery failed: {e}") from e

        if response.status_code not in (200, 201, 202):
            logger.error(f"Brevo API error {response.status_code}: {response.text}")
            raise EmailDeliveryError(f"Brevo returned {response.status_code}")

        message_id = response.json().get("messageId")
        logger.info(f"Sent {report_type} report to {to} (message {message_id})")
        return message_id
