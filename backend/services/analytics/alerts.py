"""
Alert derivation over a period comparison.

Rules run in a fixed order and each carries a stable id so the dashboard
can re-render without duplicating banners. A window with no revenue and no
bookings yields only the no-activity alert.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from services.analytics.comparison import PeriodComparison
from utils import format_currency, format_number


class AlertSeverity(str, Enum):
    DANGER = "danger"
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"


SEVERITY_RANK = {
    AlertSeverity.DANGER: 0,
    AlertSeverity.WARNING: 1,
    AlertSeverity.INFO: 2,
    AlertSeverity.SUCCESS: 3,
}

# Occupancy thresholds are percentages; change thresholds are percent changes
THRESHOLDS = {
    "occupancy_critical": 15,
    "occupancy_low": 30,
    "occupancy_high": 90,
    "revenue_decline_critical": -40,
    "revenue_decline": -20,
    "revenue_growth": 20,
    "bookings_low": 2,
    "adr_decline": -15,
    "revpar_decline": -25,
}


@dataclass
class Alert:
    id: str
    severity: AlertSeverity
    title: str
    message: str
    metric: Optional[str] = None
    threshold: Optional[str] = None


def _pct(value: float) -> str:
    return f"{format_number(value)}%"


def _signed_pct(value: float) -> str:
    return f"+{format_number(value)}%" if value > 0 else _pct(value)


def derive_alerts(comparison: PeriodComparison) -> List[Alert]:
    """
    Evaluate alert rules for a comparison.

    Returns:
        Alerts sorted by severity (danger first); ties keep rule order
    """
    current = comparison.current
    changes = comparison.changes

    if current.revenue == 0 and current.bookings == 0:
        return [Alert(
            id="no-activity",
            severity=AlertSeverity.DANGER,
            title="No Activity Detected",
            message="No revenue or bookings recorded for this period. Check data entry or booking systems.",
            metric=f"{format_currency(0)} revenue",
            threshold=f"Expected: > {format_currency(0)}",
        )]

    alerts = []

    occupancy = current.occupancy_rate
    if occupancy < THRESHOLDS["occupancy_critical"]:
        alerts.append(Alert(
            id="critical-occupancy",
            severity=AlertSeverity.DANGER,
            title="Critical: Very Low Occupancy",
            message=f"Occupancy is at {_pct(occupancy)}, well below the {THRESHOLDS['occupancy_critical']}% critical threshold.",
            metric=_pct(occupancy),
            threshold=f"< {THRESHOLDS['occupancy_critical']}%",
        ))
    elif occupancy < THRESHOLDS["occupancy_low"]:
        alerts.append(Alert(
            id="low-occupancy",
            severity=AlertSeverity.WARNING,
            title="Low Occupancy Warning",
            message=f"Occupancy is at {_pct(occupancy)}. Consider promotions or rate adjustments.",
            metric=_pct(occupancy),
            threshold=f"< {THRESHOLDS['occupancy_low']}%",
        ))
    elif occupancy >= THRESHOLDS["occupancy_high"]:
        alerts.append(Alert(
            id="high-occupancy",
            severity=AlertSeverity.SUCCESS,
            title="Excellent Occupancy",
            message=f"Occupancy is at {_pct(occupancy)}. Consider optimizing rates for maximum revenue.",
            metric=_pct(occupancy),
            threshold=f">= {THRESHOLDS['occupancy_high']}%",
        ))

    revenue_change = changes.revenue
    if revenue_change < THRESHOLDS["revenue_decline_critical"]:
        alerts.append(Alert(
            id="critical-revenue-decline",
            severity=AlertSeverity.DANGER,
            title="Critical: Major Revenue Decline",
            message=f"Revenue dropped {_pct(abs(revenue_change))} compared to the previous period.",
            metric=_pct(revenue_change),
            threshold=f"< {THRESHOLDS['revenue_decline_critical']}%",
        ))
    elif revenue_change < THRESHOLDS["revenue_decline"]:
        alerts.append(Alert(
            id="revenue-decline",
            severity=AlertSeverity.WARNING,
            title="Revenue Decline",
            message=f"Revenue decreased by {_pct(abs(revenue_change))} from the previous period.",
            metric=_pct(revenue_change),
            threshold=f"< {THRESHOLDS['revenue_decline']}%",
        ))
    elif revenue_change >= THRESHOLDS["revenue_growth"]:
        alerts.append(Alert(
            id="revenue-growth",
            severity=AlertSeverity.SUCCESS,
            title="Strong Revenue Growth",
            message=f"Revenue increased by {_pct(revenue_change)} compared to the previous period.",
            metric=_signed_pct(revenue_change),
            threshold=f">= +{THRESHOLDS['revenue_growth']}%",
        ))

    if current.bookings == 0:
        alerts.append(Alert(
            id="no-bookings",
            severity=AlertSeverity.DANGER,
            title="No Bookings",
            message="No bookings recorded for this period.",
            metric="0 bookings",
        ))
    elif current.bookings <= THRESHOLDS["bookings_low"]:
        alerts.append(Alert(
            id="low-bookings",
            severity=AlertSeverity.WARNING,
            title="Low Booking Volume",
            message=f"Only {current.bookings} booking(s) recorded for this period.",
            metric=f"{current.bookings} bookings",
            threshold=f"<= {THRESHOLDS['bookings_low']}",
        ))

    if changes.adr < THRESHOLDS["adr_decline"]:
        alerts.append(Alert(
            id="adr-decline",
            severity=AlertSeverity.WARNING,
            title="Average Daily Rate Declining",
            message=f"ADR decreased by {_pct(abs(changes.adr))}. Review pricing strategy.",
            metric=_pct(changes.adr),
            threshold=f"< {THRESHOLDS['adr_decline']}%",
        ))

    if changes.revpar < THRESHOLDS["revpar_decline"]:
        alerts.append(Alert(
            id="revpar-decline",
            severity=AlertSeverity.WARNING,
            title="RevPAR Declining",
            message=f"Revenue per available room decreased by {_pct(abs(changes.revpar))}.",
            metric=_pct(changes.revpar),
            threshold=f"< {THRESHOLDS['revpar_decline']}%",
        ))

    return sorted(alerts, key=lambda alert: SEVERITY_RANK[alert.severity])
