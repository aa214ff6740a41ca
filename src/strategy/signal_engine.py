"""
Signal engine: technical indicators plus market metrics -> BUY/SELL/HOLD.

Combines the indicator set with descriptive metrics (trend, momentum,
volume, sentiment) in an additive scoring table. Each condition adds a
fixed weight to the buy or sell side:

    Condition                                   Buy   Sell
    trend bullish / bearish                     +2    +2
    price > SMA20 > SMA50 / price < SMA20 < SMA50  +2 +2
    RSI < 30 / RSI > 70                         +2    +2
      otherwise RSI > 50 / RSI < 50             +1    +1
    MACD > signal and > 0 / < signal and < 0    +2    +2
    price below lower band / above upper band   +1    +1
    Stochastic < 20 / > 80                      +1    +1
    volume high (to the side leading so far)    +1    +1
    momentum > 2 / < -2                         +1    +1
    sentiment very bullish|bullish / bearish    +2|+1 +2|+1

BUY requires buy >= 6 and a lead of more than 2 points over sell (SELL is
symmetric); anything else is HOLD, so close scores never flip the signal.

Every call is independent: no state is kept between computations and the
result depends only on the snapshot.
"""

from typing import Optional

import structlog

from src.indicators.indicator_set import IndicatorConfig, IndicatorSet, calculate_indicator_set
from src.indicators.macd import MACDResult
from src.indicators.rsi import RSI_MIDLINE, RSI_OVERBOUGHT, RSI_OVERSOLD
from src.indicators.stochastic import STOCHASTIC_OVERBOUGHT, STOCHASTIC_OVERSOLD
from src.market.models import MarketSnapshot
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
)
from src.strategy.models import SignalAction, SignalDecision, SignalScore
from src.strategy.trade_levels import calculate_trade_levels, format_fixed

logger = structlog.get_logger(__name__)

# Decision rule
_MIN_SIGNAL_SCORE = 6
_MIN_SCORE_MARGIN = 2

_MOMENTUM_SIGNAL_THRESHOLD = 2.0

# Confidence
_BASE_CONFIDENCE = 50
_MIN_CONFIDENCE = 30
_MAX_CONFIDENCE = 95
_MOMENTUM_CONFIRM_THRESHOLD = 1.0
_STRONG_MOMENTUM_THRESHOLD = 3.0
_RSI_BUY_CONFIRM = 40.0
_RSI_SELL_CONFIRM = 60.0

_MAX_STRENGTH = 100.0
_NOT_AVAILABLE = "N/A"


def score_signal(
    price: float,
    trend: Trend,
    momentum: float,
    volume_trend: VolumeTrend,
    sentiment: Sentiment,
    indicators: IndicatorSet,
) -> SignalScore:
    """
    Run the scoring table and apply the decision rule.

    Args:
        price: Current price
        trend: Trend classification
        momentum: Momentum in percent
        volume_trend: Volume classification
        sentiment: Sentiment bucket
        indicators: Indicator values (None entries are skipped)

    Returns:
        SignalScore with the action and both accumulators
    """
    buy_score = 0
    sell_score = 0

    if trend == Trend.BULLISH:
        buy_score += 2
    elif trend == Trend.BEARISH:
        sell_score += 2

    sma20, sma50 = indicators.sma20, indicators.sma50
    if sma20 is not None and sma50 is not None:
        if price > sma20 > sma50:
            buy_score += 2
        elif price < sma20 < sma50:
            sell_score += 2

    rsi = indicators.rsi
    if rsi is not None:
        if rsi < RSI_OVERSOLD:
            buy_score += 2
        elif rsi > RSI_OVERBOUGHT:
            sell_score += 2
        elif rsi > RSI_MIDLINE:
            buy_score += 1
        elif rsi < RSI_MIDLINE:
            sell_score += 1

    macd = indicators.macd
    if macd is not None:
        if macd.macd > macd.signal and macd.macd > 0:
            buy_score += 2
        elif macd.macd < macd.signal and macd.macd < 0:
            sell_score += 2

    bollinger = indicators.bollinger
    if bollinger is not None:
        if bollinger.is_below(price):
            buy_score += 1
        elif bollinger.is_above(price):
            sell_score += 1

    stochastic = indicators.stochastic
    if stochastic is not None:
        if stochastic < STOCHASTIC_OVERSOLD:
            buy_score += 1
        elif stochastic > STOCHASTIC_OVERBOUGHT:
            sell_score += 1

    # Volume confirms whichever side leads at this point (nothing on a tie)
    if volume_trend == VolumeTrend.HIGH:
        if buy_score > sell_score:
            buy_score += 1
        elif sell_score > buy_score:
            sell_score += 1

    if momentum > _MOMENTUM_SIGNAL_THRESHOLD:
        buy_score += 1
    elif momentum < -_MOMENTUM_SIGNAL_THRESHOLD:
        sell_score += 1

    if sentiment == Sentiment.VERY_BULLISH:
        buy_score += 2
    elif sentiment == Sentiment.BULLISH:
        buy_score += 1
    elif sentiment == Sentiment.VERY_BEARISH:
        sell_score += 2
    elif sentiment == Sentiment.BEARISH:
        sell_score += 1

    if buy_score >= _MIN_SIGNAL_SCORE and buy_score > sell_score + _MIN_SCORE_MARGIN:
        action = SignalAction.BUY
    elif sell_score >= _MIN_SIGNAL_SCORE and sell_score > buy_score + _MIN_SCORE_MARGIN:
        action = SignalAction.SELL
    else:
        action = SignalAction.HOLD

    return SignalScore(action=action, buy_score=buy_score, sell_score=sell_score)


def calculate_confidence(
    action: SignalAction,
    trend: Trend,
    momentum: float,
    volume_trend: VolumeTrend,
    rsi: Optional[float] = None,
    macd: Optional[MACDResult] = None,
) -> float:
    """
    Confidence in a signal, clamped to [30, 95].

    Starts at 50 and adds:
    - +20 when the trend agrees with the signal
    - +15 when momentum agrees (> 1 for BUY, < -1 for SELL)
    - +10 when RSI confirms (BUY below 40, SELL above 60)
    - +10 when MACD confirms (BUY above signal, SELL below signal)
    - +10 on high volume
    - +5 when |momentum| > 3

    Volume and strong momentum count for HOLD as well.
    """
    confidence = _BASE_CONFIDENCE

    if (action == SignalAction.BUY and trend == Trend.BULLISH) or (
        action == SignalAction.SELL and trend == Trend.BEARISH
    ):
        confidence += 20

    if (action == SignalAction.BUY and momentum > _MOMENTUM_CONFIRM_THRESHOLD) or (
        action == SignalAction.SELL and momentum < -_MOMENTUM_CONFIRM_THRESHOLD
    ):
        confidence += 15

    if rsi is not None:
        if (action == SignalAction.BUY and rsi < _RSI_BUY_CONFIRM) or (
            action == SignalAction.SELL and rsi > _RSI_SELL_CONFIRM
        ):
            confidence += 10

    if macd is not None:
        if (action == SignalAction.BUY and macd.macd > macd.signal) or (
            action == SignalAction.SELL and macd.macd < macd.signal
        ):
            confidence += 10

    if volume_trend == VolumeTrend.HIGH:
        confidence += 10

    if abs(momentum) > _STRONG_MOMENTUM_THRESHOLD:
        confidence += 5

    return float(min(max(confidence, _MIN_CONFIDENCE), _MAX_CONFIDENCE))


def generate_analysis(
    symbol: str,
    action: SignalAction,
    trend: Trend,
    momentum: float,
    levels: SupportResistance,
) -> str:
    """
    Build the human-readable analysis for a signal.

    Phrasing is fixed per signal; only the symbol and numbers vary. The
    support/resistance line is included only when both levels are known.
    """
    trend_label = trend.value.upper()
    momentum_label = format_fixed(momentum)
    lines = []

    if action == SignalAction.BUY:
        lines.append(f"🟢 STRONG BUY SIGNAL: {symbol} shows bullish momentum with technical confirmation")
        lines.append(f"📈 Trend: {trend_label} - Price action indicates upward movement")
        lines.append(f"⚡ Momentum: {momentum_label}% - Strong buying pressure detected")
    elif action == SignalAction.SELL:
        lines.append(f"🔴 STRONG SELL SIGNAL: {symbol} shows bearish momentum with technical confirmation")
        lines.append(f"📉 Trend: {trend_label} - Price action indicates downward movement")
        lines.append(f"⚡ Momentum: {momentum_label}% - Strong selling pressure detected")
    else:
        lines.append(f"🟡 HOLD SIGNAL: {symbol} in consolidation phase")
        lines.append(f"📊 Trend: {trend_label} - Waiting for clear direction")
        lines.append(f"⚡ Momentum: {momentum_label}% - Neutral momentum")

    if levels.is_known:
        lines.append(
            f"🎯 Support: ${format_fixed(levels.support)} | "
            f"Resistance: ${format_fixed(levels.resistance)}"
        )

    if action == SignalAction.BUY:
        lines.append("💡 Strategy: Look for entry on pullbacks to support levels")
        lines.append("⚠️ Risk Management: Set stop loss below support, target resistance levels")
    elif action == SignalAction.SELL:
        lines.append("💡 Strategy: Look for entry on rallies to resistance levels")
        lines.append("⚠️ Risk Management: Set stop loss above resistance, target support levels")
    else:
        lines.append("💡 Strategy: Wait for breakout above resistance or breakdown below support")
        lines.append("⚠️ Risk Management: Monitor volume for confirmation of direction")

    return "\n".join(lines)


def _fixed_or_na(value: Optional[float], places: int = 2) -> str:
    return _NOT_AVAILABLE if value is None else format_fixed(value, places)


def format_technical_indicators(
    volatility: float,
    momentum: float,
    levels: SupportResistance,
    indicators: IndicatorSet,
) -> dict[str, str]:
    """
    Render the reported indicator subset as strings.

    Two decimals throughout except the MACD line (4 decimals); missing
    indicators are "N/A".
    """
    macd = indicators.macd
    bollinger = indicators.bollinger

    return {
        "volatility": format_fixed(volatility),
        "momentum": format_fixed(momentum),
        "support": format_fixed(levels.support),
        "resistance": format_fixed(levels.resistance),
        "sma20": _fixed_or_na(indicators.sma20),
        "sma50": _fixed_or_na(indicators.sma50),
        "rsi": _fixed_or_na(indicators.rsi),
        "macd": _fixed_or_na(macd.macd if macd is not None else None, 4),
        "bollingerUpper": _fixed_or_na(bollinger.upper if bollinger is not None else None),
        "bollingerLower": _fixed_or_na(bollinger.lower if bollinger is not None else None),
        "stochastic": _fixed_or_na(indicators.stochastic),
    }


class SignalEngine:
    """
    Turns a market snapshot into a SignalDecision.

    Pipeline:
    1. Indicator set from the newest-first history prices
    2. Market metrics: volatility, trend, momentum, support/resistance,
       volume trend, sentiment
    3. Scoring table -> BUY/SELL/HOLD
    4. Confidence, trade levels and analysis text

    The engine holds only its (immutable) indicator configuration, so one
    instance can serve many instruments concurrently.
    """

    def __init__(self, config: Optional[IndicatorConfig] = None):
        """
        Initialize signal engine.

        Args:
            config: Indicator periods (defaults match the reported
                SMA20/SMA50/EMA12/EMA26/RSI14/Bollinger20/Stochastic14 set)
        """
        self.config = config or IndicatorConfig()

    @classmethod
    def from_settings(cls, settings) -> "SignalEngine":
        """Create an engine using indicator periods from Settings."""
        return cls(settings.indicator_config())

    def compute_signal(self, symbol: str, snapshot: MarketSnapshot) -> SignalDecision:
        """
        Compute the signal for one instrument.

        Never raises for a valid snapshot: short history turns indicators
        into None and metrics into neutral defaults, which biases the
        decision towards HOLD.

        Args:
            symbol: Instrument symbol reported in the decision
            snapshot: Market snapshot (price > 0, newest-first history)

        Returns:
            SignalDecision for the snapshot
        """
        price = snapshot.price
        history = snapshot.price_history
        prices = snapshot.prices()

        volatility = calculate_volatility(prices)
        trend = determine_trend(prices)
        momentum = calculate_momentum(prices)
        levels = find_support_resistance(prices)

        indicators = calculate_indicator_set(prices, self.config)

        volume_trend = analyze_volume_trend(history, snapshot.volume)
        sentiment = analyze_sentiment(snapshot.change_24h, snapshot.volume, volatility)

        score = score_signal(
            price=price,
            trend=trend,
            momentum=momentum,
            volume_trend=volume_trend,
            sentiment=sentiment,
            indicators=indicators,
        )
        confidence = calculate_confidence(
            score.action,
            trend,
            momentum,
            volume_trend,
            rsi=indicators.rsi,
            macd=indicators.macd,
        )
        trade_levels = calculate_trade_levels(
            price,
            score.action,
            levels,
            sma20=indicators.sma20,
            bollinger=indicators.bollinger,
        )

        logger.debug(
            "signal_computed",
            symbol=symbol,
            signal=score.action.value,
            buy_score=score.buy_score,
            sell_score=score.sell_score,
            confidence=confidence,
            trend=trend.value,
            sentiment=sentiment.value,
            history_points=len(prices),
        )

        return SignalDecision(
            symbol=symbol,
            signal=score.action,
            confidence=confidence,
            trend=trend,
            strength=min(volatility * 10, _MAX_STRENGTH),
            entry_price=trade_levels.entry,
            exit_price=trade_levels.exit,
            stop_loss=trade_levels.stop_loss,
            take_profit=trade_levels.take_profit,
            risk_reward=trade_levels.risk_reward,
            analysis=generate_analysis(symbol, score.action, trend, momentum, levels),
            technical_indicators=format_technical_indicators(
                volatility, momentum, levels, indicators
            ),
        )


def compute_signal(
    symbol: str,
    snapshot: MarketSnapshot,
    config: Optional[IndicatorConfig] = None,
) -> SignalDecision:
    """Compute a signal with a one-off engine (default indicator periods)."""
    return SignalEngine(config).compute_signal(symbol, snapshot)
