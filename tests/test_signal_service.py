"""
Tests for SignalService.

Tests cover:
- Signals for a single instrument and for the whole book
- Asset class filtering
- Parallel and inline computation
- Failure isolation
"""

import pytest
from unittest.mock import Mock

from src.daemon.signal_service import SignalService, SignalServiceConfig
from src.market.book import MarketBook, UnknownSymbolError
from src.market.models import AssetType
from src.strategy.models import SignalAction
from src.strategy.signal_engine import SignalEngine


@pytest.fixture
def book(rising_prices):
    """Book with a rising BTC history and flat forex/commodity instruments."""
    book = MarketBook()
    book.register("BTC", AssetType.CRYPTO, rising_prices[0], change_24h=3.2, volume=2e9)
    book.register("EURUSD", AssetType.FOREX, 1.08)
    book.register("XAUUSD", AssetType.COMMODITIES, 2000.0)

    for i, price in enumerate(rising_prices):
        book.update_quote("BTC", price=price)
        book.record_ticks(i)
    return book


@pytest.fixture
def service(book):
    return SignalService(SignalEngine(), book)


# ============================================================================
# Generation Tests
# ============================================================================

class TestGenerateSignals:
    """Tests for signal generation."""

    def test_generate_signal(self, service):
        decision = service.generate_signal("BTC")

        assert decision.symbol == "BTC"
        assert decision.signal == SignalAction.BUY

    def test_generate_signal_unknown_symbol(self, service):
        with pytest.raises(UnknownSymbolError):
            service.generate_signal("DOGE")

    def test_generate_all_keeps_order(self, service):
        decisions = service.generate_all()

        assert [d.symbol for d in decisions] == ["BTC", "EURUSD", "XAUUSD"]

    def test_generate_all_by_asset_type(self, service):
        decisions = service.generate_all(AssetType.FOREX)

        assert [d.symbol for d in decisions] == ["EURUSD"]
        assert decisions[0].signal == SignalAction.HOLD

    def test_generate_all_empty_book(self):
        service = SignalService(SignalEngine(), MarketBook())
        assert service.generate_all() == []

    def test_inline_matches_parallel(self, book):
        parallel = SignalService(SignalEngine(), book, SignalServiceConfig(max_workers=4))
        inline = SignalService(SignalEngine(), book, SignalServiceConfig(max_workers=1))

        assert parallel.generate_all() == inline.generate_all()

    def test_update_config(self, service):
        service.update_config(SignalServiceConfig(max_workers=1))
        assert service.config.max_workers == 1


# ============================================================================
# Failure Isolation Tests
# ============================================================================

class TestFailureIsolation:
    """One failing instrument must not block the rest of the batch."""

    @pytest.mark.parametrize("max_workers", [1, 4])
    def test_failed_instrument_skipped(self, book, max_workers):
        real_engine = SignalEngine()

        def compute(symbol, snapshot):
            if symbol == "EURUSD":
                raise RuntimeError("boom")
            return real_engine.compute_signal(symbol, snapshot)

        engine = Mock()
        engine.compute_signal.side_effect = compute

        service = SignalService(engine, book, SignalServiceConfig(max_workers=max_workers))
        decisions = service.generate_all()

        assert [d.symbol for d in decisions] == ["BTC", "XAUUSD"]
        assert engine.compute_signal.call_count == 3

    def test_all_failed(self, book):
        engine = Mock()
        engine.compute_signal.side_effect = ValueError("bad data")

        service = SignalService(engine, book)

        assert service.generate_all() == []
