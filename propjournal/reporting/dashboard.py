"""Dashboard summary counts."""

from typing import Optional

from pydantic import BaseModel, Field

from propjournal.models import ACCOUNT_TYPES, GRADES, Database, JournalEntry
from propjournal.reporting.alerts import has_low_drawdown_warning


class DashboardSummary(BaseModel):
    latest_journal: Optional[JournalEntry] = None
    grade_counts: dict[str, int] = Field(default_factory=dict)
    violations_count: int = Field(default=0, ge=0)
    accounts_by_type: dict[str, int] = Field(default_factory=dict)
    low_drawdown_warning: bool = False

    model_config = {"frozen": True}


def dashboard_summary(db: Database) -> DashboardSummary:
    latest = max(db.journals, key=lambda j: j.date, default=None)

    grade_counts = {grade: 0 for grade in GRADES}
    for entry in db.compliance:
        grade_counts[entry.compliance_grade] += 1

    accounts_by_type = {account_type: 0 for account_type in ACCOUNT_TYPES}
    for account in db.accounts:
        accounts_by_type[account.account_type] += 1

    return DashboardSummary(
        latest_journal=latest,
        grade_counts=grade_counts,
        violations_count=sum(1 for c in db.compliance if c.violations.strip()),
        accounts_by_type=accounts_by_type,
        low_drawdown_warning=has_low_drawdown_warning(db),
    )
