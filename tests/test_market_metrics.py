"""
Tests for descriptive market metrics.

Tests cover:
- Volatility of returns
- Trend classification and momentum
- Support/resistance percentiles
- Volume trend
- Sentiment scoring
"""

import pytest

from src.market.models import PricePoint
from src.strategy.market_metrics import (
    Sentiment,
    SupportResistance,
    Trend,
    VolumeTrend,
    analyze_sentiment,
    analyze_volume_trend,
    calculate_momentum,
    calculate_volatility,
    determine_trend,
    find_support_resistance,
    sentiment_score,
)


# ============================================================================
# Volatility Tests
# ============================================================================

class TestVolatility:
    """Tests for calculate_volatility."""

    def test_short_history_is_zero(self):
        assert calculate_volatility([]) == 0.0
        assert calculate_volatility([100.0]) == 0.0

    def test_constant_prices_is_zero(self):
        assert calculate_volatility([100.0] * 20) == pytest.approx(0.0)

    def test_population_std_of_returns(self):
        """Returns of +10% and -10% have a population std of 10%."""
        assert calculate_volatility([100.0, 110.0, 99.0]) == pytest.approx(10.0)

    def test_accepts_price_points(self):
        history = [PricePoint(100.0, 3), PricePoint(110.0, 2), PricePoint(99.0, 1)]
        assert calculate_volatility(history) == pytest.approx(10.0)


# ============================================================================
# Trend and Momentum Tests
# ============================================================================

class TestTrend:
    """Tests for determine_trend."""

    def test_short_history_is_neutral(self):
        assert determine_trend([110.0, 100.0, 90.0, 80.0]) == Trend.NEUTRAL

    def test_no_older_group_is_neutral(self):
        """Five to nine points have no older group to compare with."""
        assert determine_trend([200.0] * 5 + [100.0] * 4) == Trend.NEUTRAL

    def test_bullish(self):
        assert determine_trend([110.0] * 5 + [100.0] * 5) == Trend.BULLISH

    def test_bearish(self):
        assert determine_trend([90.0] * 5 + [100.0] * 5) == Trend.BEARISH

    def test_small_change_is_neutral(self):
        """A change within +/-2% is neutral."""
        assert determine_trend([101.5] * 5 + [100.0] * 5) == Trend.NEUTRAL
        assert determine_trend([98.5] * 5 + [100.0] * 5) == Trend.NEUTRAL

    def test_only_first_ten_points_count(self):
        prices = [110.0] * 5 + [100.0] * 5 + [1000.0] * 20
        assert determine_trend(prices) == Trend.BULLISH


class TestMomentum:
    """Tests for calculate_momentum."""

    def test_short_history_is_zero(self):
        assert calculate_momentum([110.0] * 5 + [100.0] * 4) == 0.0

    def test_positive_momentum(self):
        assert calculate_momentum([110.0] * 5 + [100.0] * 5) == pytest.approx(10.0)

    def test_negative_momentum(self):
        assert calculate_momentum([95.0] * 5 + [100.0] * 5) == pytest.approx(-5.0)


# ============================================================================
# Support / Resistance Tests
# ============================================================================

class TestSupportResistance:
    """Tests for find_support_resistance."""

    def test_short_history_is_unknown(self):
        levels = find_support_resistance([100.0] * 9)

        assert levels == SupportResistance(support=0.0, resistance=0.0)
        assert not levels.is_known

    def test_nearest_rank_percentiles(self):
        """Support/resistance are sorted[floor(n*0.1)] and sorted[floor(n*0.9)]."""
        prices = [float(i) for i in range(20, 0, -1)]
        levels = find_support_resistance(prices)

        assert levels.support == 3.0
        assert levels.resistance == 19.0
        assert levels.is_known

    def test_ten_points(self):
        levels = find_support_resistance([float(i) for i in range(1, 11)])

        assert levels.support == 2.0
        assert levels.resistance == 10.0

    def test_order_independent(self):
        prices = [5.0, 1.0, 9.0, 3.0, 7.0, 2.0, 8.0, 4.0, 10.0, 6.0]
        assert find_support_resistance(prices) == find_support_resistance(sorted(prices))


# ============================================================================
# Volume Trend Tests
# ============================================================================

class TestVolumeTrend:
    """Tests for analyze_volume_trend."""

    def test_short_history_is_normal(self):
        assert analyze_volume_trend([100.0] * 4, 5_000_000.0) == VolumeTrend.NORMAL

    def test_positive_volume_is_high(self):
        """Baseline is 0.8x the current volume, so any positive volume is high."""
        assert analyze_volume_trend([100.0] * 5, 5_000_000.0) == VolumeTrend.HIGH

    def test_zero_volume_is_normal(self):
        assert analyze_volume_trend([100.0] * 50, 0.0) == VolumeTrend.NORMAL


# ============================================================================
# Sentiment Tests
# ============================================================================

class TestSentiment:
    """Tests for sentiment scoring."""

    @pytest.mark.parametrize(
        "change_24h,volume,volatility,expected",
        [
            (3.0, 2e9, 6.0, 4),
            (1.0, 5e8, 2.0, 1),
            (0.0, 5e8, 2.0, 0),
            (-1.0, 5e8, 2.0, -1),
            (-3.0, 5e7, 0.5, -4),
        ],
    )
    def test_sentiment_score(self, change_24h, volume, volatility, expected):
        assert sentiment_score(change_24h, volume, volatility) == expected

    @pytest.mark.parametrize(
        "change_24h,volume,volatility,expected",
        [
            (3.0, 2e9, 6.0, Sentiment.VERY_BULLISH),
            (1.0, 5e8, 2.0, Sentiment.BULLISH),
            (0.0, 5e8, 2.0, Sentiment.NEUTRAL),
            (-1.0, 5e8, 2.0, Sentiment.BEARISH),
            (-3.0, 5e7, 0.5, Sentiment.VERY_BEARISH),
        ],
    )
    def test_sentiment_buckets(self, change_24h, volume, volatility, expected):
        assert analyze_sentiment(change_24h, volume, volatility) == expected

    def test_score_of_two_is_bullish_not_very_bullish(self):
        assert analyze_sentiment(3.0, 5e8, 2.0) == Sentiment.BULLISH

    def test_bullish_and_bearish_helpers(self):
        assert Sentiment.VERY_BULLISH.is_bullish
        assert Sentiment.BULLISH.is_bullish
        assert Sentiment.BEARISH.is_bearish
        assert not Sentiment.NEUTRAL.is_bullish
        assert not Sentiment.NEUTRAL.is_bearish
