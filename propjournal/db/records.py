"""Record editing over immutable database snapshots.

Every helper takes a ``Database`` and returns a new one; nothing is mutated
in place. Callers publish the result through ``DataStore.commit`` so that
normalization and persistence always follow an edit.
"""

import uuid
from datetime import date
from typing import Any, Optional

from pydantic import BaseModel

from propjournal.models import (
    Account,
    ComplianceEntry,
    Database,
    Firm,
    JournalEntry,
    TradingRules,
)
from propjournal.reporting.parsing import format_fixed2, parse_number


class RecordNotFoundError(KeyError):
    """Raised when an edit targets a record id that does not exist."""

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} '{record_id}' not found")
        self.kind = kind
        self.record_id = record_id

    def __str__(self) -> str:
        return self.args[0]


def new_id() -> str:
    """Generate a record id."""
    return str(uuid.uuid4())


def today_iso() -> str:
    return date.today().isoformat()


def _patched(record: BaseModel, patch: dict[str, Any], readonly: set[str]) -> BaseModel:
    """Return ``record`` with ``patch`` applied and re-validated.

    Raises:
        ValueError: If the patch names an unknown or read-only field.
    """
    fields = type(record).model_fields
    unknown = [k for k in patch if k not in fields]
    if unknown:
        raise ValueError(f"Unknown field(s) for {type(record).__name__}: {', '.join(unknown)}")
    blocked = [k for k in patch if k in readonly]
    if blocked:
        raise ValueError(f"Field(s) cannot be edited directly: {', '.join(blocked)}")
    return type(record).model_validate({**record.model_dump(), **patch})


# --- Firms ---


def add_firm(db: Database, name: str = "New Firm") -> tuple[Database, Firm]:
    """Add a firm at the front of the firm list."""
    firm = Firm(id=new_id(), name=name)
    return db.model_copy(update={"firms": (firm, *db.firms)}), firm


def rename_firm(db: Database, firm_id: str, name: str) -> Database:
    if db.get_firm(firm_id) is None:
        raise RecordNotFoundError("Firm", firm_id)
    firms = tuple(f.model_copy(update={"name": name}) if f.id == firm_id else f for f in db.firms)
    return db.model_copy(update={"firms": firms})


def cascade_counts(db: Database, firm_id: str) -> tuple[int, int]:
    """Number of accounts and compliance entries deleting ``firm_id`` removes."""
    account_ids = {a.id for a in db.accounts if a.firm_id == firm_id}
    entries = sum(1 for c in db.compliance if c.account_id in account_ids)
    return len(account_ids), entries


def delete_firm(db: Database, firm_id: str) -> Database:
    """Delete a firm together with its accounts and their compliance entries."""
    if db.get_firm(firm_id) is None:
        raise RecordNotFoundError("Firm", firm_id)
    account_ids = {a.id for a in db.accounts if a.firm_id == firm_id}
    return db.model_copy(update={
        "firms": tuple(f for f in db.firms if f.id != firm_id),
        "accounts": tuple(a for a in db.accounts if a.firm_id != firm_id),
        "compliance": tuple(c for c in db.compliance if c.account_id not in account_ids),
    })


# --- Accounts ---


def add_account(
    db: Database, firm_id: str, name: str = "New Account", **fields: Any
) -> tuple[Database, Account]:
    """Add an account under ``firm_id``.

    Args:
        db: Database snapshot.
        firm_id: Owning firm.
        name: Account name.
        **fields: Other ``Account`` fields by attribute name. ``start_date``
            defaults to today.
    """
    if db.get_firm(firm_id) is None:
        raise RecordNotFoundError("Firm", firm_id)
    fields.setdefault("start_date", today_iso())
    unknown = [k for k in fields if k not in Account.model_fields or k in ("id", "firm_id")]
    if unknown:
        raise ValueError(f"Unknown field(s) for Account: {', '.join(unknown)}")
    account = Account(id=new_id(), firm_id=firm_id, name=name, **fields)
    return db.model_copy(update={"accounts": (account, *db.accounts)}), account


def update_account(db: Database, account_id: str, **patch: Any) -> Database:
    """Apply ``patch`` to an account.

    Raises:
        RecordNotFoundError: If the account, or a patched ``firm_id``, does
            not exist.
    """
    if db.get_account(account_id) is None:
        raise RecordNotFoundError("Account", account_id)
    if "firm_id" in patch and db.get_firm(patch["firm_id"]) is None:
        raise RecordNotFoundError("Firm", patch["firm_id"])
    accounts = tuple(
        _patched(a, patch, {"id"}) if a.id == account_id else a for a in db.accounts
    )
    return db.model_copy(update={"accounts": accounts})


def delete_account(db: Database, account_id: str) -> Database:
    """Delete an account together with its compliance entries."""
    if db.get_account(account_id) is None:
        raise RecordNotFoundError("Account", account_id)
    return db.model_copy(update={
        "accounts": tuple(a for a in db.accounts if a.id != account_id),
        "compliance": tuple(c for c in db.compliance if c.account_id != account_id),
    })


def filter_accounts(
    db: Database,
    firm_id: Optional[str] = None,
    account_type: Optional[str] = None,
    query: str = "",
) -> list[Account]:
    """Accounts matching firm, type and a case-insensitive text search, by name."""
    text = query.strip().lower()
    matches = []
    for account in db.accounts:
        if firm_id and account.firm_id != firm_id:
            continue
        if account_type and account.account_type != account_type:
            continue
        if text:
            blob = " | ".join(
                [account.name, account.account_type, account.platform, account.start_date]
            )
            if text not in blob.lower():
                continue
        matches.append(account)
    return sorted(matches, key=lambda a: a.name.lower())


# --- Compliance entries ---


def calc_daily_pnl(
    starting_balance: str, ending_balance: str, withdrew_funds: bool, withdrawal_amount: str
) -> str:
    """Daily P/L: ending - starting, plus the day's withdrawal when one was made."""
    withdrawal = parse_number(withdrawal_amount) if withdrew_funds else 0.0
    return format_fixed2(parse_number(ending_balance) - parse_number(starting_balance) + withdrawal)


def derive_entry(entry: ComplianceEntry) -> ComplianceEntry:
    """Apply the derived-field rules to an entry.

    Clears the withdrawal fields when no withdrawal was made and
    recomputes ``daily_pnl``.
    """
    update: dict[str, Any] = {}
    if not entry.withdrew_funds:
        update["withdrawal_amount"] = ""
        update["withdrawal_notes"] = ""
    update["daily_pnl"] = calc_daily_pnl(
        entry.starting_balance,
        entry.ending_balance,
        entry.withdrew_funds,
        entry.withdrawal_amount,
    )
    return entry.model_copy(update=update)


def new_compliance_entry(account_id: str, on: Optional[str] = None) -> ComplianceEntry:
    """A blank compliance entry for ``account_id`` dated ``on`` (default today)."""
    return derive_entry(ComplianceEntry(id=new_id(), account_id=account_id, date=on or today_iso()))


def add_compliance_entry(
    db: Database, account_id: str, on: Optional[str] = None, **fields: Any
) -> tuple[Database, ComplianceEntry]:
    """Add a compliance entry at the front of the log.

    Raises:
        RecordNotFoundError: If the account does not exist.
        ValueError: If ``fields`` names an unknown field or ``daily_pnl``.
    """
    if db.get_account(account_id) is None:
        raise RecordNotFoundError("Account", account_id)
    entry = new_compliance_entry(account_id, on)
    if fields:
        entry = derive_entry(_patched(entry, fields, {"id", "account_id", "daily_pnl"}))
    return db.model_copy(update={"compliance": (entry, *db.compliance)}), entry


def update_compliance_entry(db: Database, entry_id: str, **patch: Any) -> Database:
    """Apply ``patch`` to an entry and re-derive its daily P/L.

    A blank grade falls back to ``C``. ``daily_pnl`` is derived and cannot be
    patched.
    """
    if db.get_entry(entry_id) is None:
        raise RecordNotFoundError("Compliance entry", entry_id)
    if "compliance_grade" in patch and not patch["compliance_grade"]:
        patch["compliance_grade"] = "C"
    readonly = {"id", "account_id", "daily_pnl"}
    compliance = tuple(
        derive_entry(_patched(c, patch, readonly)) if c.id == entry_id else c
        for c in db.compliance
    )
    return db.model_copy(update={"compliance": compliance})


def delete_compliance_entry(db: Database, entry_id: str) -> Database:
    if db.get_entry(entry_id) is None:
        raise RecordNotFoundError("Compliance entry", entry_id)
    return db.model_copy(
        update={"compliance": tuple(c for c in db.compliance if c.id != entry_id)}
    )


def delete_compliance_for_account(db: Database, account_id: str) -> Database:
    """Delete every compliance entry of an account."""
    return db.model_copy(
        update={"compliance": tuple(c for c in db.compliance if c.account_id != account_id)}
    )


def entries_for_account(db: Database, account_id: str) -> list[ComplianceEntry]:
    """An account's entries, newest first."""
    return sorted(
        (c for c in db.compliance if c.account_id == account_id),
        key=lambda c: c.date,
        reverse=True,
    )


# --- Journals ---


def add_journal(db: Database, on: Optional[str] = None) -> tuple[Database, JournalEntry]:
    journal = JournalEntry(id=new_id(), date=on or today_iso())
    return db.model_copy(update={"journals": (journal, *db.journals)}), journal


def update_journal(db: Database, journal_id: str, **patch: Any) -> Database:
    """Apply ``patch`` to a journal entry.

    ``trading_rules`` may be a partial dict; it is merged into the existing
    rules field by field.
    """
    current = db.get_journal(journal_id)
    if current is None:
        raise RecordNotFoundError("Journal", journal_id)
    if "trading_rules" in patch:
        rules = patch["trading_rules"]
        if isinstance(rules, TradingRules):
            rules = rules.model_dump()
        patch["trading_rules"] = _patched(current.trading_rules, dict(rules), set())
    journals = tuple(
        _patched(j, patch, {"id"}) if j.id == journal_id else j for j in db.journals
    )
    return db.model_copy(update={"journals": journals})


def delete_journal(db: Database, journal_id: str) -> Database:
    if db.get_journal(journal_id) is None:
        raise RecordNotFoundError("Journal", journal_id)
    return db.model_copy(update={"journals": tuple(j for j in db.journals if j.id != journal_id)})


def filter_journals(
    db: Database,
    query: str = "",
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> list[JournalEntry]:
    """Journal entries in a date range matching a text search, newest first."""
    text = query.strip().lower()
    matches = []
    for journal in db.journals:
        if date_from and journal.date < date_from:
            continue
        if date_to and journal.date > date_to:
            continue
        if text:
            rules = journal.trading_rules
            blob = " | ".join([
                journal.date,
                journal.focus,
                journal.hard_stop_time,
                journal.key_levels,
                journal.news_events,
                rules.daily_max_loss,
                rules.allowed_setups,
                rules.max_trades,
                rules.max_risk_per_trade,
            ])
            if text not in blob.lower():
                continue
        matches.append(journal)
    return sorted(matches, key=lambda j: j.date, reverse=True)
