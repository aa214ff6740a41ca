"""
Exponential Moving Average (EMA) indicator.

Algorithm:
    EMA = price * alpha + EMA_prev * (1 - alpha)
    where alpha = 2 / (period + 1)

    The recursion is seeded with prices[0] and walks forward in array
    order over the whole sequence. Because prices are newest-first, the
    recursion runs from the most recent observation back to the oldest,
    so the result leans towards the older end of the history. This is the
    defined behaviour of the engine and is kept as-is: a textbook EMA
    (oldest to newest) would change every downstream MACD value.

    pandas' ewm(span=period, adjust=False) implements exactly this
    recursion (y0 = x0, yt = (1 - alpha) * yt-1 + alpha * xt).

Parameters:
    - period: 12 (fast) and 26 (slow), the MACD legs

Integration:
    EMA(12) and EMA(26) are reported in the indicator set and combined into
    the MACD line.
"""

from typing import Optional, Sequence

from src.indicators.sma import to_price_series, validate_period


def calculate_ema(
    prices: Sequence[float],
    period: int,
) -> Optional[float]:
    """
    Calculate EMA over a newest-first price sequence.

    Args:
        prices: Prices ordered newest-first
        period: EMA period (sets alpha = 2 / (period + 1))

    Returns:
        Final EMA value, or None if fewer than `period` prices
    """
    validate_period(period)
    if len(prices) < period:
        return None

    series = to_price_series(prices)
    return float(series.ewm(span=period, adjust=False).mean().iloc[-1])
