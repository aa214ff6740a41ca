"""
Bollinger Bands indicator.

Bollinger Bands are a volatility indicator that consists of three bands:
- Middle Band: Simple Moving Average (SMA) of price
- Upper Band: Middle Band + (standard deviation * multiplier)
- Lower Band: Middle Band - (standard deviation * multiplier)

Algorithm:
    Middle Band = SMA(prices[0:period])
    Standard Deviation = population STD (ddof=0) of the same window
    Upper Band = Middle + (StdDev * multiplier)
    Lower Band = Middle - (StdDev * multiplier)

    Since the standard deviation is never negative, upper >= middle >= lower
    always holds; on a flat window all three bands coincide.

Parameters:
    - period: 20
    - std_dev: 2.0

Integration:
    A close below the lower band or above the upper band adds one point to
    the buy or sell side. The bands also anchor entry, stop-loss and
    take-profit levels when SMA(20) cannot.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from src.indicators.sma import to_price_series, validate_period


@dataclass(frozen=True)
class BollingerResult:
    """Bollinger Bands calculation result."""

    upper: float
    middle: float
    lower: float

    def is_below(self, price: float) -> bool:
        """Check if price has broken below the lower band."""
        return price < self.lower

    def is_above(self, price: float) -> bool:
        """Check if price has broken above the upper band."""
        return price > self.upper


def calculate_bollinger_bands(
    prices: Sequence[float],
    period: int = 20,
    std_dev: float = 2.0,
) -> Optional[BollingerResult]:
    """
    Calculate Bollinger Bands over the most recent `period` prices.

    Args:
        prices: Prices ordered newest-first
        period: SMA period (default: 20)
        std_dev: Standard deviation multiplier (default: 2.0)

    Returns:
        BollingerResult, or None if fewer than `period` prices
    """
    validate_period(period)
    if len(prices) < period:
        return None

    window = to_price_series(prices[:period])
    middle = float(window.mean())
    deviation = float(window.std(ddof=0))

    return BollingerResult(
        upper=middle + std_dev * deviation,
        middle=middle,
        lower=middle - std_dev * deviation,
    )
