"""
Descriptive market metrics derived from an instrument's price history.

All functions take the newest-first PricePoint history (or its prices) and
degrade to neutral defaults when history is short:
- volatility 0.0 with fewer than 2 points
- trend neutral with fewer than 5 points (or no older group)
- momentum 0.0 with fewer than 10 points
- support/resistance 0.0 with fewer than 10 points

Trend and momentum compare the mean of the 5 most recent points with the
mean of the 5 points before them.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Union

import numpy as np
import pandas as pd

from src.market.models import PricePoint

# Recent/older comparison groups (newest-first indices)
_RECENT_WINDOW = slice(0, 5)
_OLDER_WINDOW = slice(5, 10)
_MIN_TREND_POINTS = 5
_MIN_MOMENTUM_POINTS = 10
_TREND_THRESHOLD = 0.02  # 2% relative change

_MIN_LEVEL_POINTS = 10
_SUPPORT_PERCENTILE = 0.1
_RESISTANCE_PERCENTILE = 0.9

_MIN_VOLUME_POINTS = 5
_VOLUME_BASELINE_RATIO = 0.8
_VOLUME_HIGH_RATIO = 1.2
_VOLUME_LOW_RATIO = 0.8

HistoryLike = Union[Sequence[PricePoint], Sequence[float]]


class Trend(str, Enum):
    """Price trend direction."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class VolumeTrend(str, Enum):
    """Current volume relative to its baseline."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class Sentiment(str, Enum):
    """Market sentiment bucket."""

    VERY_BULLISH = "very_bullish"
    BULLISH = "bullish"
    NEUTRAL = "neutral"
    BEARISH = "bearish"
    VERY_BEARISH = "very_bearish"

    @property
    def is_bullish(self) -> bool:
        return self in (Sentiment.VERY_BULLISH, Sentiment.BULLISH)

    @property
    def is_bearish(self) -> bool:
        return self in (Sentiment.VERY_BEARISH, Sentiment.BEARISH)


@dataclass(frozen=True)
class SupportResistance:
    """Percentile-based price floor and ceiling (0.0 = not enough data)."""

    support: float
    resistance: float

    @property
    def is_known(self) -> bool:
        return self.support > 0 and self.resistance > 0


def _prices(history: HistoryLike) -> list[float]:
    return [p.price if isinstance(p, PricePoint) else float(p) for p in history]


def _group_means(prices: list[float]) -> tuple[float, float]:
    recent = prices[_RECENT_WINDOW]
    older = prices[_OLDER_WINDOW]
    return sum(recent) / len(recent), sum(older) / len(older)


def calculate_volatility(history: HistoryLike) -> float:
    """
    Standard deviation of period-over-period returns, in percent.

    Returns are (p[i] - p[i-1]) / p[i-1] in array order.

    Args:
        history: Newest-first price history

    Returns:
        Population std-dev of returns * 100 (0.0 with fewer than 2 points)
    """
    prices = _prices(history)
    if len(prices) < 2:
        return 0.0

    returns = pd.Series(prices, dtype="float64").pct_change().iloc[1:]
    returns = returns.replace([np.inf, -np.inf], np.nan).dropna()
    if returns.empty:
        return 0.0

    return float(returns.std(ddof=0)) * 100.0


def determine_trend(history: HistoryLike) -> Trend:
    """
    Classify trend from recent vs older average price.

    Args:
        history: Newest-first price history

    Returns:
        BULLISH above +2%, BEARISH below -2%, otherwise NEUTRAL
    """
    prices = _prices(history)
    if len(prices) < _MIN_TREND_POINTS:
        return Trend.NEUTRAL
    if not prices[_RECENT_WINDOW] or not prices[_OLDER_WINDOW]:
        return Trend.NEUTRAL

    recent_avg, older_avg = _group_means(prices)
    if older_avg == 0:
        return Trend.NEUTRAL

    change = (recent_avg - older_avg) / older_avg

    if change > _TREND_THRESHOLD:
        return Trend.BULLISH
    elif change < -_TREND_THRESHOLD:
        return Trend.BEARISH

    return Trend.NEUTRAL


def calculate_momentum(history: HistoryLike) -> float:
    """
    Percent change of the recent average over the older average.

    Args:
        history: Newest-first price history

    Returns:
        Momentum in percent (0.0 with fewer than 10 points)
    """
    prices = _prices(history)
    if len(prices) < _MIN_MOMENTUM_POINTS:
        return 0.0

    recent_avg, older_avg = _group_means(prices)
    if older_avg == 0:
        return 0.0

    return (recent_avg - older_avg) / older_avg * 100.0


def find_support_resistance(history: HistoryLike) -> SupportResistance:
    """
    Estimate support (10th percentile) and resistance (90th percentile).

    Uses the nearest-rank element of the ascending sort at index
    floor(n * 0.1) and floor(n * 0.9), with no interpolation.

    Args:
        history: Newest-first price history

    Returns:
        SupportResistance (both 0.0 with fewer than 10 points)
    """
    prices = _prices(history)
    if len(prices) < _MIN_LEVEL_POINTS:
        return SupportResistance(support=0.0, resistance=0.0)

    ordered = sorted(prices)
    n = len(ordered)

    return SupportResistance(
        support=ordered[math.floor(n * _SUPPORT_PERCENTILE)],
        resistance=ordered[math.floor(n * _RESISTANCE_PERCENTILE)],
    )


def analyze_volume_trend(history: HistoryLike, volume: float) -> VolumeTrend:
    """
    Classify current volume against a baseline of 0.8x itself.

    No per-instrument volume history is kept, so the baseline is derived
    from the current volume. Any positive volume is therefore HIGH and a
    zero volume is NORMAL; LOW is unreachable for non-negative volume.

    Args:
        history: Newest-first price history (only its length is used)
        volume: Current volume

    Returns:
        VolumeTrend (NORMAL with fewer than 5 history points)
    """
    if len(history) < _MIN_VOLUME_POINTS:
        return VolumeTrend.NORMAL

    baseline = volume * _VOLUME_BASELINE_RATIO

    if volume > baseline * _VOLUME_HIGH_RATIO:
        return VolumeTrend.HIGH
    elif volume < baseline * _VOLUME_LOW_RATIO:
        return VolumeTrend.LOW

    return VolumeTrend.NORMAL


def sentiment_score(change_24h: float, volume: float, volatility: float) -> int:
    """
    Signed sentiment score from 24h change, volume and volatility.

    Contributions:
    - change_24h: > 2 -> +2, > 0 -> +1, < -2 -> -2, < 0 -> -1
    - volume: > 1e9 -> +1, < 1e8 -> -1
    - volatility: > 5 -> +1, < 1 -> -1
    """
    score = 0

    if change_24h > 2:
        score += 2
    elif change_24h > 0:
        score += 1
    elif change_24h < -2:
        score -= 2
    elif change_24h < 0:
        score -= 1

    if volume > 1_000_000_000:
        score += 1
    elif volume < 100_000_000:
        score -= 1

    if volatility > 5:
        score += 1
    elif volatility < 1:
        score -= 1

    return score


def analyze_sentiment(change_24h: float, volume: float, volatility: float) -> Sentiment:
    """
    Map the sentiment score to a sentiment bucket.

    Returns:
        VERY_BULLISH (> 2), BULLISH (> 0), VERY_BEARISH (< -2),
        BEARISH (< 0), otherwise NEUTRAL
    """
    score = sentiment_score(change_24h, volume, volatility)

    if score > 2:
        return Sentiment.VERY_BULLISH
    if score > 0:
        return Sentiment.BULLISH
    if score < -2:
        return Sentiment.VERY_BEARISH
    if score < 0:
        return Sentiment.BEARISH
    return Sentiment.NEUTRAL
