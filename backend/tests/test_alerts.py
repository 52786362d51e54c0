"""Alert rule tests."""
from datetime import date

from services.analytics.alerts import AlertSeverity, derive_alerts
from services.analytics.comparison import PeriodChanges, PeriodComparison, PeriodMetrics


def _metrics(revenue=50000.0, bookings=10, occupancy=50.0, adr=5000.0, revpar=160.0):
    return PeriodMetrics(
        revenue=revenue,
        room_revenue=revenue,
        pos_revenue=0.0,
        bookings=bookings,
        occupancy_rate=occupancy,
        adr=adr,
        revpar=revpar,
    )


def _changes(revenue=0.0, adr=0.0, revpar=0.0):
    return PeriodChanges(
        revenue=revenue, room_revenue=revenue, pos_revenue=0.0,
        bookings=0.0, occupancy_rate=0.0, adr=adr, revpar=revpar,
    )


def _comparison(current, changes):
    return PeriodComparison(
        current_start=date(2026, 3, 1),
        current_end=date(2026, 3, 31),
        previous_start=date(2026, 1, 29),
        previous_end=date(2026, 2, 28),
        current=current,
        previous=_metrics(),
        changes=changes,
    )


def _ids(alerts):
    return [alert.id for alert in alerts]


def test_quiet_period_raises_nothing():
    assert derive_alerts(_comparison(_metrics(), _changes())) == []


def test_no_activity_suppresses_everything_else():
    alerts = derive_alerts(_comparison(
        _metrics(revenue=0.0, bookings=0, occupancy=0.0, adr=0.0, revpar=0.0),
        _changes(revenue=-100.0, adr=-100.0, revpar=-100.0),
    ))

    assert _ids(alerts) == ["no-activity"]
    assert alerts[0].severity == AlertSeverity.DANGER
    assert alerts[0].threshold == "Expected: > ₱0"


def test_revenue_decline_of_twenty_one_percent():
    alerts = derive_alerts(_comparison(_metrics(), _changes(revenue=-21.0)))

    assert _ids(alerts) == ["revenue-decline"]
    assert alerts[0].severity == AlertSeverity.WARNING
    assert alerts[0].metric == "-21%"


def test_exactly_minus_twenty_is_not_a_decline():
    assert derive_alerts(_comparison(_metrics(), _changes(revenue=-20.0))) == []


def test_occupancy_tiers():
    assert _ids(derive_alerts(_comparison(_metrics(occupancy=12.5), _changes()))) == ["critical-occupancy"]
    assert _ids(derive_alerts(_comparison(_metrics(occupancy=25.0), _changes()))) == ["low-occupancy"]
    assert _ids(derive_alerts(_comparison(_metrics(occupancy=90.0), _changes()))) == ["high-occupancy"]


def test_revenue_growth_is_signed():
    alerts = derive_alerts(_comparison(_metrics(), _changes(revenue=35.5)))
    assert _ids(alerts) == ["revenue-growth"]
    assert alerts[0].metric == "+35.5%"


def test_alerts_sorted_by_severity_then_rule_order():
    alerts = derive_alerts(_comparison(
        _metrics(occupancy=95.0, bookings=1),
        _changes(revenue=-45.0, adr=-16.0, revpar=-30.0),
    ))

    assert _ids(alerts) == [
        "critical-revenue-decline",
        "low-bookings",
        "adr-decline",
        "revpar-decline",
        "high-occupancy",
    ]


def test_zero_bookings_with_pos_revenue():
    alerts = derive_alerts(_comparison(_metrics(bookings=0), _changes()))
    assert _ids(alerts) == ["no-bookings"]
