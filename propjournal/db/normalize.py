"""Referential-integrity and defaulting pass over raw database data.

Input may come from an old or hand-edited file: collections may be missing,
records may lack newer fields, and accounts or compliance entries may point
at records that were deleted. ``normalize`` never raises; anything it cannot
use degrades to defaults or is dropped.
"""

import logging
import typing
from typing import Any

from pydantic import BaseModel, Field

from propjournal.models import (
    Account,
    ComplianceEntry,
    Database,
    Firm,
    JournalEntry,
)

logger = logging.getLogger(__name__)

_MISSING = object()

# Fields that identify a record or point at another one; a record without
# them is unusable and is dropped.
_KEY_FIELDS = {"id", "firm_id", "account_id"}


class _UnusableRecord(Exception):
    """Raised internally when a record lacks an identifying field."""


class NormalizeReport(BaseModel):
    """Counts of records dropped by a normalization pass."""

    dropped_firms: int = Field(default=0, ge=0)
    dropped_accounts: int = Field(default=0, ge=0)
    dropped_compliance: int = Field(default=0, ge=0)
    dropped_journals: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    @property
    def total(self) -> int:
        return (
            self.dropped_firms
            + self.dropped_accounts
            + self.dropped_compliance
            + self.dropped_journals
        )


def _as_text(value: Any, default: str) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        try:
            return str(value)
        except ValueError:
            # past the interpreter's int-to-str digit limit
            return default
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return default
        return str(int(value)) if value.is_integer() else repr(value)
    return default


def _coerce(annotation: Any, value: Any, default: Any) -> Any:
    """Coerce ``value`` to a field's type, or return ``default``."""
    if value is _MISSING:
        return default
    if typing.get_origin(annotation) is typing.Literal:
        return value if value in typing.get_args(annotation) else default
    if annotation is bool:
        return value if isinstance(value, bool) else default
    if annotation is str:
        return _as_text(value, default)
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return _coerce_fields(annotation, value if isinstance(value, dict) else {})
    return default


def _coerce_fields(model: type[BaseModel], raw: dict) -> dict:
    """Build a by-alias dict for ``model`` from ``raw``, defaulting per field.

    Nested models are merged field by field, never replaced wholesale.
    """
    out = {}
    for name, field in model.model_fields.items():
        key = field.alias or name
        value = raw.get(key, raw.get(name, _MISSING))
        if name in _KEY_FIELDS:
            text = _as_text(value, "") if value is not _MISSING else ""
            if not text.strip():
                raise _UnusableRecord(name)
            out[key] = text
            continue
        default = field.get_default(call_default_factory=True)
        if isinstance(default, BaseModel):
            default = default.model_dump(by_alias=True)
        out[key] = _coerce(field.annotation, value, default)
    return out


def _records(model: type[BaseModel], items: Any) -> tuple[list, int]:
    """Validate a raw collection into records, returning (records, dropped)."""
    if not isinstance(items, (list, tuple)):
        return [], 0
    records = []
    dropped = 0
    for item in items:
        if isinstance(item, BaseModel):
            item = item.model_dump(by_alias=True)
        if not isinstance(item, dict):
            dropped += 1
            continue
        try:
            records.append(model.model_validate(_coerce_fields(model, item)))
        except _UnusableRecord:
            dropped += 1
    return records, dropped


def normalize_with_report(raw: Any) -> tuple[Database, NormalizeReport]:
    """Normalize raw data and report what was dropped.

    Args:
        raw: A ``Database``, a JSON-compatible dict with ``firms``,
            ``accounts``, ``journals`` and ``compliance`` lists, or anything
            else (treated as empty).

    Returns:
        The normalized database and the drop counts.
    """
    if isinstance(raw, Database):
        raw = raw.to_dict()
    if not isinstance(raw, dict):
        raw = {}

    firms, dropped_firms = _records(Firm, raw.get("firms"))
    firm_ids = {f.id for f in firms}

    accounts, dropped_accounts = _records(Account, raw.get("accounts"))
    kept_accounts = [a for a in accounts if a.firm_id in firm_ids]
    dropped_accounts += len(accounts) - len(kept_accounts)
    account_ids = {a.id for a in kept_accounts}

    compliance, dropped_compliance = _records(ComplianceEntry, raw.get("compliance"))
    kept_compliance = [c for c in compliance if c.account_id in account_ids]
    dropped_compliance += len(compliance) - len(kept_compliance)

    journals, dropped_journals = _records(JournalEntry, raw.get("journals"))

    report = NormalizeReport(
        dropped_firms=dropped_firms,
        dropped_accounts=dropped_accounts,
        dropped_compliance=dropped_compliance,
        dropped_journals=dropped_journals,
    )
    if report.total:
        logger.warning(
            "Normalization dropped %d firm(s), %d account(s), %d compliance entries, %d journal(s)",
            report.dropped_firms,
            report.dropped_accounts,
            report.dropped_compliance,
            report.dropped_journals,
        )

    db = Database(
        firms=tuple(firms),
        accounts=tuple(kept_accounts),
        journals=tuple(journals),
        compliance=tuple(kept_compliance),
    )
    return db, report


def normalize(raw: Any) -> Database:
    """Normalize raw data into a ``Database`` whose references all resolve."""
    return normalize_with_report(raw)[0]
