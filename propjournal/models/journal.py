"""JournalEntry data model."""

from pydantic import BaseModel, Field


class TradingRules(BaseModel):
    """Rules the trader commits to for the day."""

    daily_max_loss: str = Field(default="", alias="dailyMaxLoss")
    allowed_setups: str = Field(default="", alias="allowedSetups")
    max_trades: str = Field(default="", alias="maxTrades")
    max_risk_per_trade: str = Field(default="", alias="maxRiskPerTrade")

    model_config = {"frozen": True, "populate_by_name": True}


class JournalEntry(BaseModel):
    """Represents a daily trading plan."""

    id: str = Field(..., min_length=1, description="Unique journal ID")
    date: str = Field(default="", description="Journal date (YYYY-MM-DD)")
    focus: str = Field(default="", description="Focus for the day")
    hard_stop_time: str = Field(default="11:00 AM", alias="hardStopTime")
    key_levels: str = Field(default="", alias="keyLevels")
    news_events: str = Field(default="", alias="newsEvents")
    trading_rules: TradingRules = Field(default_factory=TradingRules, alias="tradingRules")

    model_config = {"frozen": True, "populate_by_name": True}
