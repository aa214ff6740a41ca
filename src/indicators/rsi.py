"""
Relative Strength Index (RSI) indicator.

RSI measures momentum by comparing the magnitude of gains to losses.
Values range from 0 to 100:
- < 30: Oversold (buy side of the signal table)
- > 70: Overbought (sell side of the signal table)

Algorithm:
    Uses a plain average over a single window rather than Wilder's
    smoothing:

        delta[i] = prices[i] - prices[i-1]      for i in 1..period
        avg_gain = sum(positive deltas) / period
        avg_loss = sum(-negative deltas) / period
        RSI = 100 - 100 / (1 + avg_gain / avg_loss)

    Deltas are taken in array order over the newest-first window
    prices[0:period+1]. With no losses in the window RSI is exactly 100,
    which also covers a completely flat window.

Parameters:
    - period: 14 (requires period + 1 prices)
"""

from typing import Optional, Sequence

from src.indicators.sma import to_price_series, validate_period

RSI_OVERSOLD = 30.0
RSI_OVERBOUGHT = 70.0
RSI_MIDLINE = 50.0


def calculate_rsi(
    prices: Sequence[float],
    period: int = 14,
) -> Optional[float]:
    """
    Calculate RSI over the most recent period + 1 prices.

    Args:
        prices: Prices ordered newest-first
        period: RSI period (default: 14)

    Returns:
        RSI value (0-100), or None if fewer than period + 1 prices
    """
    validate_period(period)
    if len(prices) < period + 1:
        return None

    window = to_price_series(prices[: period + 1])
    delta = window.diff().iloc[1:]

    gains = float(delta.where(delta > 0, 0.0).sum())
    losses = float(-delta.where(delta < 0, 0.0).sum())

    avg_gain = gains / period
    avg_loss = losses / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))
