"""
Indicator set: every indicator the signal engine needs, computed in one pass.

Each field is None when the price window is shorter than the indicator's
required period. Insufficient history is never an error.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from src.indicators.bollinger import BollingerResult, calculate_bollinger_bands
from src.indicators.ema import calculate_ema
from src.indicators.macd import MACDResult, calculate_macd
from src.indicators.rsi import calculate_rsi
from src.indicators.sma import calculate_sma
from src.indicators.stochastic import calculate_stochastic


@dataclass(frozen=True)
class IndicatorConfig:
    """Indicator periods used by the signal engine."""

    sma_short_period: int = 20
    sma_long_period: int = 50
    ema_fast_period: int = 12
    ema_slow_period: int = 26
    rsi_period: int = 14
    macd_signal_period: int = 9
    bollinger_period: int = 20
    bollinger_std: float = 2.0
    stochastic_period: int = 14


@dataclass(frozen=True)
class IndicatorSet:
    """Current values of all indicators (None = insufficient data)."""

    sma20: Optional[float] = None
    sma50: Optional[float] = None
    ema12: Optional[float] = None
    ema26: Optional[float] = None
    rsi: Optional[float] = None
    macd: Optional[MACDResult] = None
    bollinger: Optional[BollingerResult] = None
    stochastic: Optional[float] = None


def calculate_indicator_set(
    prices: Sequence[float],
    config: Optional[IndicatorConfig] = None,
) -> IndicatorSet:
    """
    Calculate all indicators for a newest-first price sequence.

    Args:
        prices: Prices ordered newest-first
        config: Indicator periods (defaults: 20/50 SMA, 12/26 EMA, RSI 14,
            MACD 12/26/9, Bollinger 20x2, Stochastic 14)

    Returns:
        IndicatorSet with None for every indicator lacking data
    """
    config = config or IndicatorConfig()

    return IndicatorSet(
        sma20=calculate_sma(prices, config.sma_short_period),
        sma50=calculate_sma(prices, config.sma_long_period),
        ema12=calculate_ema(prices, config.ema_fast_period),
        ema26=calculate_ema(prices, config.ema_slow_period),
        rsi=calculate_rsi(prices, config.rsi_period),
        macd=calculate_macd(
            prices,
            fast_period=config.ema_fast_period,
            slow_period=config.ema_slow_period,
            signal_period=config.macd_signal_period,
        ),
        bollinger=calculate_bollinger_bands(
            prices,
            period=config.bollinger_period,
            std_dev=config.bollinger_std,
        ),
        stochastic=calculate_stochastic(prices, config.stochastic_period),
    )
