"""Low drawdown-cushion detection."""

from typing import Iterator, Optional

from pydantic import BaseModel, Field

from propjournal.models import Database
from propjournal.reporting.aggregate import accounts_in_scope
from propjournal.reporting.ledger import LedgerIndex
from propjournal.reporting.parsing import parse_number
from propjournal.reporting.snapshot import initial_balance_for

LOW_DRAWDOWN_THRESHOLD = 0.20


class DrawdownAlert(BaseModel):
    """An account whose remaining drawdown is below the threshold."""

    account_id: str
    account_name: str
    firm_name: str
    as_of_date: str
    max_limit: float = Field(..., gt=0)
    remaining: float = Field(..., ge=0)
    ratio: float = Field(..., ge=0, description="remaining / max_limit")
    manual: bool = Field(default=False, description="Remaining came from the manual override")

    model_config = {"frozen": True}


def _iter_alerts(
    db: Database, firm_id: Optional[str], threshold: float
) -> Iterator[DrawdownAlert]:
    accounts = accounts_in_scope(db, firm_id)
    index = LedgerIndex.from_database(db, [a.id for a in accounts])
    for account in accounts:
        entries = list(index.ledger(account.id).entries)
        if not entries:
            continue
        latest = entries[-1]

        # Trailing drawdown takes precedence over the overall loss limit
        max_limit = parse_number(account.trailing_drawdown_limit)
        if max_limit <= 0:
            max_limit = parse_number(account.overall_max_loss_limit)
        if max_limit <= 0:
            continue

        manual = parse_number(latest.manual_drawdown_remaining)
        if manual > 0:
            remaining = manual
        else:
            loss = max(0.0, initial_balance_for(account, entries) - parse_number(latest.ending_balance))
            remaining = max(0.0, max_limit - loss)

        ratio = remaining / max_limit
        if ratio < threshold:
            yield DrawdownAlert(
                account_id=account.id,
                account_name=account.name,
                firm_name=db.firm_name(account.firm_id),
                as_of_date=latest.date,
                max_limit=max_limit,
                remaining=remaining,
                ratio=ratio,
                manual=manual > 0,
            )


def has_low_drawdown_warning(
    db: Database,
    firm_id: Optional[str] = None,
    threshold: float = LOW_DRAWDOWN_THRESHOLD,
) -> bool:
    """True if any in-scope account's drawdown cushion is below ``threshold``.

    Stops at the first matching account.
    """
    return any(True for _ in _iter_alerts(db, firm_id, threshold))


def low_drawdown_alerts(
    db: Database,
    firm_id: Optional[str] = None,
    threshold: float = LOW_DRAWDOWN_THRESHOLD,
) -> list[DrawdownAlert]:
    """Every in-scope account whose drawdown cushion is below ``threshold``."""
    return list(_iter_alerts(db, firm_id, threshold))
