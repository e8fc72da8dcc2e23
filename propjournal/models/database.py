"""Database aggregate model."""

from pydantic import BaseModel, Field

from propjournal.models.account import Account
from propjournal.models.compliance import ComplianceEntry
from propjournal.models.firm import Firm
from propjournal.models.journal import JournalEntry


class Database(BaseModel):
    """The aggregate root holding every record.

    Instances are immutable snapshots. Edits produce a new ``Database``
    (see ``propjournal.db.records``) which is normalized before it is
    published.
    """

    firms: tuple[Firm, ...] = Field(default=())
    accounts: tuple[Account, ...] = Field(default=())
    journals: tuple[JournalEntry, ...] = Field(default=())
    compliance: tuple[ComplianceEntry, ...] = Field(default=())

    model_config = {"frozen": True}

    def to_dict(self) -> dict:
        """Return the serialized (camelCase, JSON-compatible) form."""
        return self.model_dump(mode="json", by_alias=True)

    def get_firm(self, firm_id: str) -> Firm | None:
        return next((f for f in self.firms if f.id == firm_id), None)

    def get_account(self, account_id: str) -> Account | None:
        return next((a for a in self.accounts if a.id == account_id), None)

    def get_entry(self, entry_id: str) -> ComplianceEntry | None:
        return next((c for c in self.compliance if c.id == entry_id), None)

    def get_journal(self, journal_id: str) -> JournalEntry | None:
        return next((j for j in self.journals if j.id == journal_id), None)

    def firm_name(self, firm_id: str, default: str = "—") -> str:
        firm = self.get_firm(firm_id)
        return firm.name if firm else default
