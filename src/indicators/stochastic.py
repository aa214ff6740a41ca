"""
Stochastic oscillator (%K).

Shows where the current price sits within its recent high/low range:
- < 20: Oversold
- > 80: Overbought

Algorithm:
    window = prices[0:period]
    %K = (prices[0] - min(window)) / (max(window) - min(window)) * 100

    A flat window has no range; %K is then 50 (mid-range) instead of a
    division by zero.

Parameters:
    - period: 14
"""

from typing import Optional, Sequence

from src.indicators.sma import to_price_series, validate_period

STOCHASTIC_OVERSOLD = 20.0
STOCHASTIC_OVERBOUGHT = 80.0


def calculate_stochastic(
    prices: Sequence[float],
    period: int = 14,
) -> Optional[float]:
    """
    Calculate %K for the most recent price.

    Args:
        prices: Prices ordered newest-first
        period: Lookback window (default: 14)

    Returns:
        %K in [0, 100], or None if fewer than `period` prices
    """
    validate_period(period)
    if len(prices) < period:
        return None

    window = to_price_series(prices[:period])
    highest = float(window.max())
    lowest = float(window.min())
    current = float(window.iloc[0])

    if highest == lowest:
        return 50.0

    return (current - lowest) / (highest - lowest) * 100.0
