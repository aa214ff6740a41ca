"""Signal engine output types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from src.strategy.market_metrics import Trend


class SignalAction(str, Enum):
    """Discrete trading recommendation."""

    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


@dataclass(frozen=True)
class SignalScore:
    """Outcome of the buy/sell scoring table."""

    action: SignalAction
    buy_score: int
    sell_score: int


@dataclass(frozen=True)
class SignalDecision:
    """
    Recommendation computed for one instrument.

    Created fresh on every computation and never mutated. to_dict() renders
    the camelCase shape consumed by the presentation layer.
    """

    symbol: str
    signal: SignalAction
    confidence: float  # 30-95
    trend: Trend
    strength: float  # 0-100
    entry_price: Optional[float]
    exit_price: Optional[float]
    stop_loss: float
    take_profit: float
    risk_reward: str
    analysis: str
    technical_indicators: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict with the transport field names."""
        return {
            "symbol": self.symbol,
            "signal": self.signal.value,
            "confidence": self.confidence,
            "trend": self.trend.value,
            "strength": self.strength,
            "entryPrice": self.entry_price,
            "exitPrice": self.exit_price,
            "stopLoss": self.stop_loss,
            "takeProfit": self.take_profit,
            "riskReward": self.risk_reward,
            "analysis": self.analysis,
            "technicalIndicators": dict(self.technical_indicators),
        }
