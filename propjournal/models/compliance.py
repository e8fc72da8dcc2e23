"""ComplianceEntry data model."""

from typing import Literal

from pydantic import BaseModel, Field

ComplianceGrade = Literal["A", "B", "C", "D", "F"]

GRADES: tuple[str, ...] = ("A", "B", "C", "D", "F")

RULE_FLAGS: tuple[str, ...] = (
    "stayed_within_daily_max_loss",
    "stayed_within_trailing_drawdown",
    "followed_position_size",
    "followed_trading_hours",
    "followed_stop_rule_11",
)


class ComplianceEntry(BaseModel):
    """Represents one account's compliance record for a trading day.

    ``daily_pnl`` is derived from the balances and withdrawal; it is
    recomputed by ``propjournal.db.records`` on every create and edit.
    """

    id: str = Field(..., min_length=1, description="Unique entry ID")
    account_id: str = Field(..., alias="accountId", description="Owning account ID")
    date: str = Field(default="", description="Trading day (YYYY-MM-DD)")
    compliance_grade: ComplianceGrade = Field(default="C", alias="complianceGrade")

    starting_balance: str = Field(default="", alias="startingBalance")
    ending_balance: str = Field(default="", alias="endingBalance")
    daily_pnl: str = Field(default="", alias="dailyPnL")
    manual_drawdown_remaining: str = Field(default="", alias="manualDrawdownRemaining")

    stayed_within_daily_max_loss: bool = Field(default=False, alias="stayedWithinDailyMaxLoss")
    stayed_within_trailing_drawdown: bool = Field(
        default=False, alias="stayedWithinTrailingDrawdown"
    )
    followed_position_size: bool = Field(default=False, alias="followedPositionSize")
    followed_trading_hours: bool = Field(default=False, alias="followedTradingHours")
    followed_stop_rule_11: bool = Field(default=True, alias="followedStopRule11")

    withdrew_funds: bool = Field(default=False, alias="withdrewFunds")
    withdrawal_amount: str = Field(default="", alias="withdrawalAmount")
    withdrawal_notes: str = Field(default="", alias="withdrawalNotes")

    violations: str = Field(default="", description="Rule violations")
    notes: str = Field(default="", description="Free-form notes")

    model_config = {"frozen": True, "populate_by_name": True}
