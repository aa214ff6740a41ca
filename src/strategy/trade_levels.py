"""
Entry, stop-loss and take-profit levels for a signal.

Levels are anchored on technical levels in priority order, falling back to
fixed percentages of the current price when an anchor is unavailable:

BUY:
    entry:       SMA20 * 1.001 if price > SMA20
                 else lower band * 1.002 if price > lower band
                 else price * 0.998
    take-profit: upper band * 0.998 if upper band > price
                 else resistance * 0.998 if resistance > price
                 else price * 1.08
    stop-loss:   SMA20 * 0.995 if SMA20 < price
                 else lower band * 0.995 if lower band < price
                 else max(support * 0.98, price * 0.92)

SELL mirrors BUY around SMA20, the upper band and resistance.

HOLD carries no entry, only a symmetric 2% stop/target band.

Support/resistance of 0 (not enough history) are replaced with
price * 0.9 / price * 1.1 before use.
"""

import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Optional

from src.indicators.bollinger import BollingerResult
from src.strategy.market_metrics import SupportResistance
from src.strategy.models import SignalAction

# Defaults before the signal-specific levels are applied
_DEFAULT_STOP_LOSS_RATIO = 0.95
_DEFAULT_TAKE_PROFIT_RATIO = 1.10

# HOLD band
_HOLD_STOP_LOSS_RATIO = 0.98
_HOLD_TAKE_PROFIT_RATIO = 1.02

# Substitutes for unknown support/resistance
_FALLBACK_SUPPORT_RATIO = 0.9
_FALLBACK_RESISTANCE_RATIO = 1.1


@dataclass(frozen=True)
class TradeLevels:
    """Proposed trade levels for one signal."""

    entry: Optional[float]
    exit: Optional[float]
    stop_loss: float
    take_profit: float
    risk_reward: str  # reward / risk, 2 decimals


def format_fixed(value: float, places: int = 2) -> str:
    """
    Format a float with a fixed number of decimals, rounding half up.

    Rounds the exact binary value (Decimal(float) is exact), so 1.005
    renders as "1.00" and 0.125 as "0.13". Non-finite values render as
    "Infinity", "-Infinity" or "NaN".
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"

    exact = Decimal(value)
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        # Enough digits for every integer digit plus the requested decimals
        ctx.prec = max(ctx.prec, exact.adjusted() + places + 2)
        return str(exact.quantize(quantum, rounding=ROUND_HALF_UP))


def calculate_risk_reward(price: float, stop_loss: float, take_profit: float) -> str:
    """
    Reward-to-risk ratio as a 2-decimal string.

    Returns:
        |take_profit - price| / |price - stop_loss|, or "1.00" if risk is zero
    """
    risk = abs(price - stop_loss)
    reward = abs(take_profit - price)
    if risk > 0:
        return format_fixed(reward / risk)
    return "1.00"


def calculate_trade_levels(
    price: float,
    action: SignalAction,
    levels: SupportResistance,
    sma20: Optional[float] = None,
    bollinger: Optional[BollingerResult] = None,
) -> TradeLevels:
    """
    Calculate entry, stop-loss and take-profit for a signal.

    Args:
        price: Current price
        action: Signal to build levels for
        levels: Support/resistance (0.0 when unknown)
        sma20: Short SMA, if available
        bollinger: Bollinger Bands, if available

    Returns:
        TradeLevels for the signal
    """
    entry: Optional[float] = None
    exit_price: Optional[float] = None
    stop_loss = price * _DEFAULT_STOP_LOSS_RATIO
    take_profit = price * _DEFAULT_TAKE_PROFIT_RATIO

    support = levels.support if levels.support > 0 else price * _FALLBACK_SUPPORT_RATIO
    resistance = levels.resistance if levels.resistance > 0 else price * _FALLBACK_RESISTANCE_RATIO

    if action == SignalAction.BUY:
        # Entry on a pullback to SMA20 or the lower band
        if sma20 is not None and price > sma20:
            entry = sma20 * 1.001
        elif bollinger is not None and price > bollinger.lower:
            entry = bollinger.lower * 1.002
        else:
            entry = price * 0.998

        if bollinger is not None and bollinger.upper > price:
            take_profit = bollinger.upper * 0.998
        elif resistance > price:
            take_profit = resistance * 0.998
        else:
            take_profit = price * 1.08

        if sma20 is not None and sma20 < price:
            stop_loss = sma20 * 0.995
        elif bollinger is not None and bollinger.lower < price:
            stop_loss = bollinger.lower * 0.995
        else:
            stop_loss = max(support * 0.98, price * 0.92)

    elif action == SignalAction.SELL:
        # Entry on a rally to SMA20 or the upper band
        if sma20 is not None and price < sma20:
            entry = sma20 * 0.999
        elif bollinger is not None and price < bollinger.upper:
            entry = bollinger.upper * 0.998
        else:
            entry = price * 1.002

        if bollinger is not None and bollinger.lower < price:
            take_profit = bollinger.lower * 1.002
        elif support < price:
            take_profit = support * 1.002
        else:
            take_profit = price * 0.92

        if sma20 is not None and sma20 > price:
            stop_loss = sma20 * 1.005
        elif bollinger is not None and bollinger.upper > price:
            stop_loss = bollinger.upper * 1.005
        else:
            stop_loss = min(resistance * 1.02, price * 1.08)

    else:
        stop_loss = price * _HOLD_STOP_LOSS_RATIO
        take_profit = price * _HOLD_TAKE_PROFIT_RATIO

    return TradeLevels(
        entry=entry,
        exit=exit_price,
        stop_loss=stop_loss,
        take_profit=take_profit,
        risk_reward=calculate_risk_reward(price, stop_loss, take_profit),
    )
