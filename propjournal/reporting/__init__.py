"""Derived reporting over a database snapshot."""

from propjournal.reporting.aggregate import (
    METRICS,
    OVERLAYS,
    FirmTotals,
    Series,
    SeriesPoint,
    SeriesResult,
    Totals,
    aggregate,
    build_series,
)
from propjournal.reporting.alerts import (
    LOW_DRAWDOWN_THRESHOLD,
    DrawdownAlert,
    has_low_drawdown_warning,
    low_drawdown_alerts,
)
from propjournal.reporting.dashboard import DashboardSummary, dashboard_summary
from propjournal.reporting.ledger import AccountLedger, LedgerIndex
from propjournal.reporting.parsing import format_fixed2, format_money, parse_number
from propjournal.reporting.snapshot import (
    AccountReportRow,
    AccountSnapshot,
    account_report,
    account_snapshot,
    snapshot_for,
)

__all__ = [
    "AccountLedger",
    "LedgerIndex",
    "AccountSnapshot",
    "AccountReportRow",
    "account_snapshot",
    "account_report",
    "snapshot_for",
    "FirmTotals",
    "Totals",
    "Series",
    "SeriesPoint",
    "SeriesResult",
    "METRICS",
    "OVERLAYS",
    "aggregate",
    "build_series",
    "DrawdownAlert",
    "LOW_DRAWDOWN_THRESHOLD",
    "has_low_drawdown_warning",
    "low_drawdown_alerts",
    "DashboardSummary",
    "dashboard_summary",
    "parse_number",
    "format_fixed2",
    "format_money",
]
