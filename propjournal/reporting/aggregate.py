"""Per-firm and global totals, plus chart series over a shared date axis."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from propjournal.models import Account, Database
from propjournal.reporting.ledger import LedgerIndex
from propjournal.reporting.snapshot import account_snapshot, initial_balance_for

Metric = Literal["balance", "profitInclWithdrawals", "withdrawals"]
Overlay = Literal["global", "firms", "accounts"]

METRICS: tuple[str, ...] = ("balance", "profitInclWithdrawals", "withdrawals")
OVERLAYS: tuple[str, ...] = ("global", "firms", "accounts")

METRIC_TITLES = {
    "balance": "Total Balance Over Time",
    "withdrawals": "Total Withdrawals Over Time",
    "profitInclWithdrawals": "Profit (Incl Withdrawals) Over Time",
}

# Line caps for the per-account overlay
MAX_ACCOUNT_LINES = 6
MAX_ACCOUNT_LINES_FOR_FIRM = 12


class FirmTotals(BaseModel):
    """Summed unconditional snapshots for a group of accounts."""

    firm_id: Optional[str] = Field(default=None, description="Firm ID (None for a global row)")
    firm_name: str = Field(default="")
    accounts: int = Field(default=0, ge=0)
    current_balance: float = Field(default=0.0)
    total_withdrawals: float = Field(default=0.0)
    initial_balance: float = Field(default=0.0)
    profit_incl_withdrawals: float = Field(default=0.0)

    model_config = {"frozen": True}


class Totals(BaseModel):
    """Per-firm rows and their global sum."""

    per_firm: tuple[FirmTotals, ...] = Field(default=())
    global_totals: FirmTotals = Field(default_factory=FirmTotals)

    model_config = {"frozen": True}


class SeriesPoint(BaseModel):
    date: str
    value: float

    model_config = {"frozen": True}


class Series(BaseModel):
    """One chart line."""

    key: str
    label: str
    points: tuple[SeriesPoint, ...] = Field(default=())

    model_config = {"frozen": True}


class SeriesResult(BaseModel):
    """Chart lines plus what the caller needs to explain them."""

    metric: Metric
    overlay: Overlay
    title: str
    dates: tuple[str, ...] = Field(default=(), description="Shared x-axis")
    series: tuple[Series, ...] = Field(default=())
    insufficient_data: bool = Field(default=False)
    omitted_accounts: int = Field(default=0, ge=0)
    note: Optional[str] = Field(default=None)

    model_config = {"frozen": True}


def accounts_in_scope(db: Database, firm_id: Optional[str] = None) -> list[Account]:
    """Accounts of one firm, or all accounts, in database order."""
    if firm_id:
        return [a for a in db.accounts if a.firm_id == firm_id]
    return list(db.accounts)


def aggregate(db: Database, firm_id: Optional[str] = None) -> Totals:
    """Sum every in-scope account's unconditional snapshot by firm.

    Args:
        db: Database snapshot.
        firm_id: Restrict to one firm (None for all firms).

    Returns:
        Firm rows ordered by firm name, and the global sum of those rows.
    """
    accounts = accounts_in_scope(db, firm_id)
    index = LedgerIndex.from_database(db, [a.id for a in accounts])

    by_firm: dict[str, dict] = {}
    for account in accounts:
        row = by_firm.setdefault(account.firm_id, {
            "firm_id": account.firm_id,
            "firm_name": db.firm_name(account.firm_id),
            "accounts": 0,
            "current_balance": 0.0,
            "total_withdrawals": 0.0,
            "initial_balance": 0.0,
            "profit_incl_withdrawals": 0.0,
        })
        snapshot = account_snapshot(account, index.ledger(account.id).entries)
        row["accounts"] += 1
        row["current_balance"] += snapshot.current_balance
        row["total_withdrawals"] += snapshot.total_withdrawals
        row["initial_balance"] += snapshot.initial_balance
        row["profit_incl_withdrawals"] += snapshot.profit_incl_withdrawals

    rows = sorted((FirmTotals(**r) for r in by_firm.values()), key=lambda r: r.firm_name)

    global_totals = FirmTotals(
        firm_name="Firm Total" if firm_id else "Global Total",
        accounts=sum(r.accounts for r in rows),
        current_balance=sum(r.current_balance for r in rows),
        total_withdrawals=sum(r.total_withdrawals for r in rows),
        initial_balance=sum(r.initial_balance for r in rows),
        profit_incl_withdrawals=sum(r.profit_incl_withdrawals for r in rows),
    )
    return Totals(per_firm=tuple(rows), global_totals=global_totals)


def _points(
    dates: list[str],
    account_ids: list[str],
    index: LedgerIndex,
    initial_balances: dict[str, float],
    metric: str,
) -> tuple[SeriesPoint, ...]:
    points = []
    initial_sum = sum(initial_balances[a] for a in account_ids)
    for date in dates:
        balance = 0.0
        withdrawals = 0.0
        for account_id in account_ids:
            balance += index.ending_balance_on_or_before(account_id, date)
            withdrawals += index.withdrawals_up_to(account_id, date)

        if metric == "balance":
            value = balance
        elif metric == "withdrawals":
            value = withdrawals
        else:
            value = balance + withdrawals - initial_sum
        points.append(SeriesPoint(date=date, value=value))
    return tuple(points)


def build_series(
    db: Database,
    firm_id: Optional[str] = None,
    overlay: str = "global",
    metric: str = "balance",
) -> SeriesResult:
    """Build chart lines for ``metric`` over the shared date axis.

    The axis is every distinct compliance date of the in-scope accounts.
    Each line sums, per axis date, its accounts' latest ending balance,
    running withdrawals and initial balance.

    Args:
        db: Database snapshot.
        firm_id: Restrict to one firm (None for all firms).
        overlay: ``global`` (one line), ``firms`` (a line per firm) or
            ``accounts`` (a line per account, capped).
        metric: ``balance``, ``profitInclWithdrawals`` or ``withdrawals``.

    Returns:
        The series, or ``insufficient_data`` when fewer than two dates
        exist.

    Raises:
        ValueError: If ``overlay`` or ``metric`` is not recognised.
    """
    if overlay not in OVERLAYS:
        raise ValueError(f"Unknown overlay '{overlay}'. Expected one of: {', '.join(OVERLAYS)}")
    if metric not in METRICS:
        raise ValueError(f"Unknown metric '{metric}'. Expected one of: {', '.join(METRICS)}")

    accounts = accounts_in_scope(db, firm_id)
    index = LedgerIndex.from_database(db, [a.id for a in accounts])
    dates = sorted({e.date for a in accounts for e in index.ledger(a.id).entries})
    initial_balances = {
        a.id: initial_balance_for(a, list(index.ledger(a.id).entries)) for a in accounts
    }

    omitted = 0
    note = None
    if overlay == "global":
        groups = [(
            "global",
            "Firm Total" if firm_id else "Global Total",
            [a.id for a in accounts],
        )]
    elif overlay == "firms":
        by_firm: dict[str, list[str]] = {}
        for account in accounts:
            by_firm.setdefault(account.firm_id, []).append(account.id)
        groups = sorted(
            ((f"firm-{fid}", db.firm_name(fid), ids) for fid, ids in by_firm.items()),
            key=lambda g: g[1],
        )
    else:
        cap = MAX_ACCOUNT_LINES_FOR_FIRM if firm_id else MAX_ACCOUNT_LINES
        omitted = max(0, len(accounts) - cap)
        if omitted:
            note = (
                f"Showing first {cap} accounts for readability."
                if firm_id
                else f"Showing first {cap} accounts for readability. "
                f"Select a firm to see more (up to {MAX_ACCOUNT_LINES_FOR_FIRM})."
            )
        groups = [
            (f"acct-{a.id}", f"{db.firm_name(a.firm_id)} / {a.name}", [a.id])
            for a in accounts[:cap]
        ]

    result = {
        "metric": metric,
        "overlay": overlay,
        "title": METRIC_TITLES[metric],
        "dates": tuple(dates),
        "omitted_accounts": omitted,
        "note": note,
    }
    if len(dates) < 2 or not groups:
        return SeriesResult(**result, insufficient_data=True)

    series = tuple(
        Series(key=key, label=label, points=_points(dates, ids, index, initial_balances, metric))
        for key, label, ids in groups
    )
    return SeriesResult(**result, series=series)
