"""
Pytest configuration and shared fixtures for signal engine tests.
"""

import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest
from unittest.mock import MagicMock

# Silence structlog during tests
import structlog

from src.market.models import AssetType, MarketSnapshot, PricePoint


def _mock_logger_factory(*args):
    """Factory that creates mock loggers for testing."""
    mock = MagicMock()
    # Configure mock methods to return the mock itself (for chaining)
    mock.bind.return_value = mock
    return mock


structlog.configure(
    processors=[],
    logger_factory=_mock_logger_factory,
)


BASE_TIMESTAMP = 1_700_000_000_000


def to_history(chronological_prices, step_ms=1000):
    """
    Build a newest-first PricePoint history from oldest-to-newest prices.

    The last price given is the most recent and ends up at index 0.
    """
    return tuple(
        PricePoint(price=float(price), timestamp=BASE_TIMESTAMP + i * step_ms)
        for i, price in reversed(list(enumerate(chronological_prices)))
    )


# ============================================================================
# Shared Fixtures
# ============================================================================

@pytest.fixture
def make_snapshot():
    """Snapshot factory taking chronological (oldest-first) prices."""
    def _make(
        chronological_prices=(),
        price=None,
        change_24h=0.0,
        volume=0.0,
        symbol="BTC",
        asset_type=AssetType.CRYPTO,
    ):
        history = to_history(list(chronological_prices))
        if price is None:
            price = history[0].price if history else 100.0
        return MarketSnapshot(
            symbol=symbol,
            asset_type=asset_type,
            price=price,
            change_24h=change_24h,
            volume=volume,
            price_history=history,
        )

    return _make


@pytest.fixture
def rising_prices():
    """
    50 prices rising monotonically from 40000 to 45000 (oldest first).

    A slow grind for 40 points followed by a steep 10-point rally, so the
    5 most recent points average clearly more than 2% above the 5 before.
    """
    slow = [40000.0 + 25.0 * i for i in range(40)]  # 40000 .. 40975
    fast = [40975.0 + 402.5 * i for i in range(1, 11)]  # 41377.5 .. 45000
    return slow + fast


@pytest.fixture
def geometric_prices():
    """Factory for prices compounding at a fixed rate (oldest first)."""
    def _generate(length=60, start=100.0, rate=0.01):
        return [start * (1 + rate) ** i for i in range(length)]

    return _generate
