"""
Signal engine settings, read from the environment and an optional .env file.

Variable names are the upper-cased field names, e.g. RSI_PERIOD=21 or
SIGNAL_WORKERS=8.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.daemon.signal_service import SignalServiceConfig
from src.indicators.indicator_set import IndicatorConfig


class Settings(BaseSettings):
    """Indicator periods, history size, batch workers and logging."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Optional log file path"
    )
    log_json: bool = Field(
        default=False,
        description="Render logs as JSON (for log shippers)"
    )

    # Price history
    history_capacity: int = Field(
        default=100,
        ge=10,
        le=1000,
        description="Maximum price points kept per instrument (oldest evicted first)"
    )

    # Indicator Parameters - Moving Averages
    sma_short_period: int = Field(default=20, ge=2, le=100)
    sma_long_period: int = Field(default=50, ge=5, le=200)
    ema_fast_period: int = Field(default=12, ge=2, le=50)
    ema_slow_period: int = Field(default=26, ge=5, le=100)

    # Indicator Parameters - Oscillators
    rsi_period: int = Field(default=14, ge=2, le=50)
    macd_signal_period: int = Field(default=9, ge=2, le=50)
    stochastic_period: int = Field(default=14, ge=2, le=50)

    # Indicator Parameters - Bollinger Bands
    bollinger_period: int = Field(default=20, ge=5, le=100)
    bollinger_std: float = Field(default=2.0, ge=1.0, le=4.0)

    # Batch signal generation
    signal_workers: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Worker threads used when computing signals for many instruments"
    )

    @field_validator("sma_long_period")
    @classmethod
    def validate_sma_long(cls, v: int, info) -> int:
        """Ensure long SMA is greater than short SMA."""
        if "sma_short_period" in info.data and v <= info.data["sma_short_period"]:
            raise ValueError("sma_long_period must be greater than sma_short_period")
        return v

    @field_validator("ema_slow_period")
    @classmethod
    def validate_ema_slow(cls, v: int, info) -> int:
        """Ensure slow EMA is greater than fast EMA."""
        if "ema_fast_period" in info.data and v <= info.data["ema_fast_period"]:
            raise ValueError("ema_slow_period must be greater than ema_fast_period")
        return v

    def indicator_config(self) -> IndicatorConfig:
        """Indicator periods for the signal engine."""
        return IndicatorConfig(
            sma_short_period=self.sma_short_period,
            sma_long_period=self.sma_long_period,
            ema_fast_period=self.ema_fast_period,
            ema_slow_period=self.ema_slow_period,
            rsi_period=self.rsi_period,
            macd_signal_period=self.macd_signal_period,
            bollinger_period=self.bollinger_period,
            bollinger_std=self.bollinger_std,
            stochastic_period=self.stochastic_period,
        )

    def signal_service_config(self) -> SignalServiceConfig:
        """Batch service configuration."""
        return SignalServiceConfig(max_workers=self.signal_workers)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def _changed_fields(old: Settings, new: Settings) -> dict[str, tuple]:
    before = old.model_dump()
    after = new.model_dump()
    return {
        name: (before[name], after[name])
        for name in after
        if before[name] != after[name]
    }


def reload_settings() -> tuple[Settings, dict[str, tuple]]:
    """
    Re-read settings from the environment and .env file.

    Returns:
        (settings, changes) where changes maps each modified field to
        (old, new); empty on the first load
    """
    global _settings

    previous, _settings = _settings, Settings()
    changes = _changed_fields(previous, _settings) if previous is not None else {}
    return _settings, changes
