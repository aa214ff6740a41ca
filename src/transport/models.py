"""Pydantic models for the signal payloads handed to the presentation layer."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.strategy.models import SignalDecision


class TechnicalIndicatorsPayload(BaseModel):
    """Reported indicator values, pre-formatted as strings ("N/A" if missing)."""

    model_config = ConfigDict(populate_by_name=True)

    volatility: str
    momentum: str
    support: str
    resistance: str
    sma20: str = "N/A"
    sma50: str = "N/A"
    rsi: str = "N/A"
    macd: str = "N/A"
    bollinger_upper: str = Field(default="N/A", alias="bollingerUpper")
    bollinger_lower: str = Field(default="N/A", alias="bollingerLower")
    stochastic: str = "N/A"


class SignalPayload(BaseModel):
    """Trading signal for one instrument."""

    model_config = ConfigDict(populate_by_name=True)

    symbol: str
    signal: Literal["BUY", "SELL", "HOLD"]
    confidence: float = Field(ge=30, le=95)
    trend: Literal["bullish", "bearish", "neutral"]
    strength: float = Field(ge=0, le=100)
    entry_price: Optional[float] = Field(default=None, alias="entryPrice")
    exit_price: Optional[float] = Field(default=None, alias="exitPrice")
    stop_loss: float = Field(alias="stopLoss")
    take_profit: float = Field(alias="takeProfit")
    risk_reward: str = Field(alias="riskReward")
    analysis: str
    technical_indicators: Optional[TechnicalIndicatorsPayload] = Field(
        default=None, alias="technicalIndicators"
    )

    @classmethod
    def from_decision(cls, decision: SignalDecision) -> "SignalPayload":
        """Build the payload from an engine decision."""
        return cls.model_validate(decision.to_dict())

    def to_json(self) -> str:
        """Serialize with the camelCase field names consumers expect."""
        return self.model_dump_json(by_alias=True)


class SignalsResponse(BaseModel):
    """Batch of signals for all instruments."""

    success: bool = True
    signals: list[SignalPayload]
    timestamp: int  # epoch milliseconds
    message: Optional[str] = None
