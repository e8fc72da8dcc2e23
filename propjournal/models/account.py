"""Account data model."""

from typing import Literal

from pydantic import BaseModel, Field

AccountType = Literal["Evaluation", "Sim Funded", "Live", "Personal"]

ACCOUNT_TYPES: tuple[str, ...] = ("Evaluation", "Sim Funded", "Live", "Personal")


class Account(BaseModel):
    """Represents an evaluation, funded, live or personal trading account.

    Balances and limits are kept as the text the trader typed; they are
    parsed on demand with ``propjournal.reporting.parsing.parse_number``.
    """

    id: str = Field(..., min_length=1, description="Unique account ID")
    firm_id: str = Field(..., alias="firmId", description="Owning firm ID")
    name: str = Field(default="", description="Account name")
    account_type: AccountType = Field(
        default="Evaluation", alias="accountType", description="Account type"
    )
    platform: str = Field(default="", description="Trading platform")
    start_date: str = Field(default="", alias="startDate", description="Start date (YYYY-MM-DD)")
    initial_balance: str = Field(default="", alias="initialBalance")
    overall_max_loss_limit: str = Field(default="", alias="overallMaxLossLimit")
    trailing_drawdown_limit: str = Field(default="", alias="trailingDrawdownLimit")

    model_config = {"frozen": True, "populate_by_name": True}
