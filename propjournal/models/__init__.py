"""Data models for propjournal."""

from propjournal.models.firm import Firm
from propjournal.models.account import ACCOUNT_TYPES, Account, AccountType
from propjournal.models.compliance import (
    GRADES,
    RULE_FLAGS,
    ComplianceEntry,
    ComplianceGrade,
)
from propjournal.models.journal import JournalEntry, TradingRules
from propjournal.models.database import Database

__all__ = [
    "Firm",
    "Account",
    "AccountType",
    "ACCOUNT_TYPES",
    "ComplianceEntry",
    "ComplianceGrade",
    "GRADES",
    "RULE_FLAGS",
    "JournalEntry",
    "TradingRules",
    "Database",
]
