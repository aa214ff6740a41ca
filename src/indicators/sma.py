"""
Simple Moving Average (SMA) indicator.

All indicator functions in this package take prices ordered newest-first:
index 0 is the most recent observation. This matches how price history is
stored per instrument, so no reordering happens between the history and
the indicators.

Algorithm:
    SMA = sum(prices[0:period]) / period

    Only the most recent `period` observations contribute; older points in
    the window are ignored.

Parameters:
    - period: 20 (short trend) and 50 (long trend) are used by the engine

Integration:
    SMA(20) vs SMA(50) ordering feeds the signal table, SMA(20) anchors
    entry and stop-loss levels, and SMA(period) is the Bollinger middle band.
"""

from typing import Optional, Sequence

import pandas as pd


def to_price_series(prices: Sequence[float]) -> pd.Series:
    """Wrap a newest-first price sequence in a float Series (order kept)."""
    return pd.Series(list(prices), dtype="float64")


def validate_period(period: int) -> None:
    """Reject non-positive indicator periods."""
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}")


def calculate_sma(
    prices: Sequence[float],
    period: int,
) -> Optional[float]:
    """
    Calculate SMA over the most recent `period` prices.

    Args:
        prices: Prices ordered newest-first
        period: Window length

    Returns:
        Mean of prices[0:period], or None if fewer than `period` prices
    """
    validate_period(period)
    if len(prices) < period:
        return None

    window = to_price_series(prices[:period])
    return float(window.mean())
