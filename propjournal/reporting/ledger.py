"""Per-account, time-indexed access over compliance entries.

Dates are compared as ISO ``YYYY-MM-DD`` text. Entries sharing a date keep
their original relative order (stable sort), so "latest on a date" is the
last one stored.
"""

from bisect import bisect_right
from itertools import accumulate
from typing import Iterable, Optional

from propjournal.models import ComplianceEntry, Database
from propjournal.reporting.parsing import parse_number


def sort_entries(entries: Iterable[ComplianceEntry]) -> list[ComplianceEntry]:
    """Sort entries ascending by date, keeping ties in input order."""
    return sorted(entries, key=lambda e: e.date)


class AccountLedger:
    """Sorted view over one account's compliance entries.

    The ledger is built once; every query is a binary search over the
    sorted dates plus a lookup into precomputed running withdrawal sums.
    """

    def __init__(self, account_id: str, entries: Iterable[ComplianceEntry]):
        self.account_id = account_id
        self.entries: tuple[ComplianceEntry, ...] = tuple(sort_entries(entries))
        self._dates = [e.date for e in self.entries]
        self._withdrawal_totals = list(
            accumulate(
                (parse_number(e.withdrawal_amount) if e.withdrew_funds else 0.0)
                for e in self.entries
            )
        )

    def __len__(self) -> int:
        return len(self.entries)

    def _count_on_or_before(self, cutoff: Optional[str]) -> int:
        if cutoff is None:
            return len(self.entries)
        return bisect_right(self._dates, cutoff)

    def entries_on_or_before(self, cutoff: Optional[str] = None) -> tuple[ComplianceEntry, ...]:
        """All entries dated on or before ``cutoff`` (all entries when None)."""
        return self.entries[: self._count_on_or_before(cutoff)]

    def latest_on_or_before(self, cutoff: Optional[str] = None) -> Optional[ComplianceEntry]:
        """The last entry dated on or before ``cutoff``, or None."""
        count = self._count_on_or_before(cutoff)
        return self.entries[count - 1] if count else None

    def withdrawals_up_to(self, date: Optional[str] = None) -> float:
        """Running sum of withdrawals dated on or before ``date``."""
        count = self._count_on_or_before(date)
        return self._withdrawal_totals[count - 1] if count else 0.0

    def ending_balance_on_or_before(self, date: Optional[str] = None) -> float:
        """Ending balance of the latest entry on or before ``date``, or 0."""
        latest = self.latest_on_or_before(date)
        return parse_number(latest.ending_balance) if latest else 0.0


class LedgerIndex:
    """Ledgers for every account of a database snapshot, keyed by account id.

    Unknown account ids behave like accounts with no entries.
    """

    def __init__(self, ledgers: dict[str, AccountLedger]):
        self._ledgers = ledgers

    @classmethod
    def from_database(
        cls, db: Database, account_ids: Optional[Iterable[str]] = None
    ) -> "LedgerIndex":
        """Index the compliance entries of ``db`` in a single pass.

        Args:
            db: Database snapshot.
            account_ids: Restrict the index to these accounts (default: all).
        """
        wanted = set(account_ids) if account_ids is not None else {a.id for a in db.accounts}
        grouped: dict[str, list[ComplianceEntry]] = {account_id: [] for account_id in wanted}
        for entry in db.compliance:
            if entry.account_id in grouped:
                grouped[entry.account_id].append(entry)
        return cls({k: AccountLedger(k, v) for k, v in grouped.items()})

    def ledger(self, account_id: str) -> AccountLedger:
        found = self._ledgers.get(account_id)
        return found if found is not None else AccountLedger(account_id, ())

    def entries_on_or_before(
        self, account_id: str, cutoff: Optional[str] = None
    ) -> tuple[ComplianceEntry, ...]:
        return self.ledger(account_id).entries_on_or_before(cutoff)

    def latest_on_or_before(
        self, account_id: str, cutoff: Optional[str] = None
    ) -> Optional[ComplianceEntry]:
        return self.ledger(account_id).latest_on_or_before(cutoff)

    def withdrawals_up_to(self, account_id: str, date: Optional[str] = None) -> float:
        return self.ledger(account_id).withdrawals_up_to(date)

    def ending_balance_on_or_before(self, account_id: str, date: Optional[str] = None) -> float:
        return self.ledger(account_id).ending_balance_on_or_before(date)


def entries_on_or_before(
    db: Database, account_id: str, cutoff: Optional[str] = None
) -> list[ComplianceEntry]:
    """Linear-scan form of ``AccountLedger.entries_on_or_before``."""
    return sort_entries(
        e for e in db.compliance
        if e.account_id == account_id and (cutoff is None or e.date <= cutoff)
    )


def latest_on_or_before(
    db: Database, account_id: str, cutoff: Optional[str] = None
) -> Optional[ComplianceEntry]:
    """Linear-scan form of ``AccountLedger.latest_on_or_before``."""
    entries = entries_on_or_before(db, account_id, cutoff)
    return entries[-1] if entries else None


def withdrawals_up_to(db: Database, account_id: str, date: Optional[str] = None) -> float:
    """Linear-scan form of ``AccountLedger.withdrawals_up_to``."""
    total = 0.0
    for entry in entries_on_or_before(db, account_id, date):
        if entry.withdrew_funds:
            total += parse_number(entry.withdrawal_amount)
    return total


def ending_balance_on_or_before(
    db: Database, account_id: str, date: Optional[str] = None
) -> float:
    """Linear-scan form of ``AccountLedger.ending_balance_on_or_before``."""
    latest = latest_on_or_before(db, account_id, date)
    return parse_number(latest.ending_balance) if latest else 0.0
