"""Point-in-time financial snapshot of a single account."""

from typing import Iterable, Optional

from pydantic import BaseModel, Field

from propjournal.models import Account, ComplianceEntry, Database
from propjournal.reporting.ledger import LedgerIndex, sort_entries
from propjournal.reporting.parsing import parse_number


class AccountSnapshot(BaseModel):
    """Derived state of an account as of a cutoff date."""

    account_id: str = Field(..., description="Account ID")
    as_of_date: Optional[str] = Field(default=None, description="Date of the latest entry used")
    entry_count: int = Field(default=0, ge=0, description="Entries on or before the cutoff")
    initial_balance: float = Field(default=0.0)
    current_balance: float = Field(default=0.0)
    high_water_mark: float = Field(default=0.0)
    total_withdrawals: float = Field(default=0.0)
    profit_incl_withdrawals: float = Field(default=0.0)
    overall_max_loss_limit: float = Field(default=0.0)
    overall_used: float = Field(default=0.0, ge=0)
    overall_remaining: float = Field(default=0.0, ge=0)
    trailing_drawdown_limit: float = Field(default=0.0)
    trailing_used: float = Field(default=0.0, ge=0)
    trailing_remaining: float = Field(default=0.0, ge=0)

    model_config = {"frozen": True}


def initial_balance_for(account: Account, sorted_entries: list[ComplianceEntry]) -> float:
    """Initial balance from the account, else the first entry's starting balance."""
    if account.initial_balance.strip():
        return parse_number(account.initial_balance)
    if sorted_entries:
        return parse_number(sorted_entries[0].starting_balance)
    return 0.0


def account_snapshot(
    account: Account,
    entries: Iterable[ComplianceEntry],
    cutoff: Optional[str] = None,
) -> AccountSnapshot:
    """Compute an account's snapshot from its compliance entries.

    Args:
        account: The account.
        entries: The account's compliance entries, in any order.
        cutoff: Only entries dated on or before this date are considered.
            None considers every entry.

    Returns:
        The derived snapshot. An account without entries reports zero
        balances.
    """
    considered = sort_entries(e for e in entries if cutoff is None or e.date <= cutoff)
    latest = considered[-1] if considered else None

    initial_balance = initial_balance_for(account, considered)
    current_balance = parse_number(latest.ending_balance) if latest else 0.0
    high_water_mark = (
        max(parse_number(e.ending_balance) for e in considered) if considered else current_balance
    )
    total_withdrawals = 0.0
    for entry in considered:
        if entry.withdrew_funds:
            total_withdrawals += parse_number(entry.withdrawal_amount)

    overall_limit = parse_number(account.overall_max_loss_limit)
    trailing_limit = parse_number(account.trailing_drawdown_limit)

    overall_used = max(0.0, initial_balance - current_balance)
    overall_remaining = max(0.0, overall_limit - overall_used) if overall_limit > 0 else 0.0
    trailing_used = max(0.0, high_water_mark - current_balance)
    trailing_remaining = max(0.0, trailing_limit - trailing_used) if trailing_limit > 0 else 0.0

    return AccountSnapshot(
        account_id=account.id,
        as_of_date=latest.date if latest else None,
        entry_count=len(considered),
        initial_balance=initial_balance,
        current_balance=current_balance,
        high_water_mark=high_water_mark,
        total_withdrawals=total_withdrawals,
        profit_incl_withdrawals=current_balance + total_withdrawals - initial_balance,
        overall_max_loss_limit=overall_limit,
        overall_used=overall_used,
        overall_remaining=overall_remaining,
        trailing_drawdown_limit=trailing_limit,
        trailing_used=trailing_used,
        trailing_remaining=trailing_remaining,
    )


def snapshot_for(
    db: Database, account_id: str, cutoff: Optional[str] = None
) -> Optional[AccountSnapshot]:
    """Snapshot of ``account_id`` in ``db``, or None if the account is unknown."""
    account = db.get_account(account_id)
    if account is None:
        return None
    ledger = LedgerIndex.from_database(db, [account_id]).ledger(account_id)
    return account_snapshot(account, ledger.entries, cutoff)


class AccountReportRow(BaseModel):
    """One account of the reporting view."""

    account_id: str
    firm_name: str
    account_name: str
    account_type: str
    platform: str
    snapshot: AccountSnapshot
    missing_limits: bool = Field(
        default=False,
        description="Initial balance or a drawdown limit is zero",
    )

    model_config = {"frozen": True}


def _matches(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()


def account_report(
    db: Database,
    account_id: Optional[str] = None,
    query: str = "",
    as_of: Optional[str] = None,
) -> list[AccountReportRow]:
    """Build the per-account reporting rows.

    Args:
        db: Database snapshot.
        account_id: Only report this account (None for all).
        query: Case-insensitive search over firm, name, type and platform.
        as_of: Optional cutoff date for every snapshot.

    Returns:
        Rows sorted by account name. Empty when nothing matches.
    """
    text = query.strip()
    selected = []
    for account in db.accounts:
        if account_id and account.id != account_id:
            continue
        firm_name = db.firm_name(account.firm_id)
        if text:
            blob = " | ".join(
                [firm_name, account.name, account.account_type, account.platform]
            )
            if not _matches(blob, text):
                continue
        selected.append((account, firm_name))
    selected.sort(key=lambda pair: pair[0].name.lower())

    index = LedgerIndex.from_database(db, [a.id for a, _ in selected])
    rows = []
    for account, firm_name in selected:
        snapshot = account_snapshot(account, index.ledger(account.id).entries, as_of)
        rows.append(AccountReportRow(
            account_id=account.id,
            firm_name=firm_name,
            account_name=account.name,
            account_type=account.account_type,
            platform=account.platform or "—",
            snapshot=snapshot,
            missing_limits=(
                snapshot.initial_balance == 0
                or snapshot.overall_max_loss_limit == 0
                or snapshot.trailing_drawdown_limit == 0
            ),
        ))
    return rows
