"""
In-memory market book: current quote and bounded price history per instrument.

The book is the single owner of each instrument's history. A feed driver
updates quotes and records ticks; readers only ever get immutable
MarketSnapshot copies, taken under a lock so a snapshot never interleaves
with an in-progress append.

Fetching quotes from external providers is not part of this module.
"""

from dataclasses import dataclass
from threading import Lock
from typing import Iterator, Optional

import structlog

from src.market.models import (
    DEFAULT_HISTORY_CAPACITY,
    DEFAULT_SYMBOLS,
    AssetType,
    MarketSnapshot,
    PriceHistory,
)

logger = structlog.get_logger(__name__)


class UnknownSymbolError(KeyError):
    """Raised when a symbol is not registered in the market book."""


@dataclass
class _Instrument:
    """Mutable per-instrument state owned by the book."""

    symbol: str
    asset_type: AssetType
    price: float
    history: PriceHistory
    change_24h: float = 0.0
    volume: float = 0.0
    market_cap: Optional[float] = None
    high_24h: Optional[float] = None
    low_24h: Optional[float] = None
    last_update: Optional[int] = None


class MarketBook:
    """
    Registry of instruments with their latest quote and price history.

    Responsibilities:
    - Register instruments by asset class
    - Apply quote updates from a feed
    - Record ticks into bounded newest-first histories
    - Hand out atomic, immutable snapshots
    """

    def __init__(self, history_capacity: int = DEFAULT_HISTORY_CAPACITY):
        """
        Initialize market book.

        Args:
            history_capacity: Maximum price points kept per instrument
        """
        self.history_capacity = history_capacity
        self._instruments: dict[str, _Instrument] = {}
        self._lock = Lock()

    @classmethod
    def from_settings(cls, settings) -> "MarketBook":
        """Create a book using the history capacity from Settings."""
        return cls(history_capacity=settings.history_capacity)

    def load(self, snapshot: MarketSnapshot) -> None:
        """
        Register an instrument from a stored snapshot, history included.

        Replaces any existing entry. A history longer than the book's
        capacity keeps only its newest points.
        """
        with self._lock:
            self._instruments[snapshot.symbol] = _Instrument(
                symbol=snapshot.symbol,
                asset_type=snapshot.asset_type,
                price=snapshot.price,
                history=PriceHistory(snapshot.price_history, capacity=self.history_capacity),
                change_24h=snapshot.change_24h,
                volume=snapshot.volume,
                market_cap=snapshot.market_cap,
                high_24h=snapshot.high_24h,
                low_24h=snapshot.low_24h,
                last_update=snapshot.last_update,
            )
        logger.debug(
            "instrument_loaded",
            symbol=snapshot.symbol,
            history_points=len(snapshot.price_history),
        )

    def register(
        self,
        symbol: str,
        asset_type: AssetType,
        price: float,
        change_24h: float = 0.0,
        volume: float = 0.0,
        market_cap: Optional[float] = None,
        high_24h: Optional[float] = None,
        low_24h: Optional[float] = None,
        last_update: Optional[int] = None,
    ) -> None:
        """
        Register an instrument (replaces any existing entry and its history).

        Raises:
            ValueError: If price is not positive
        """
        if not price > 0:
            raise ValueError(f"price must be > 0 for {symbol}, got {price}")

        with self._lock:
            self._instruments[symbol] = _Instrument(
                symbol=symbol,
                asset_type=AssetType(asset_type),
                price=float(price),
                history=PriceHistory(capacity=self.history_capacity),
                change_24h=change_24h,
                volume=volume,
                market_cap=market_cap,
                high_24h=high_24h,
                low_24h=low_24h,
                last_update=last_update,
            )
        logger.debug(
            "instrument_registered",
            symbol=symbol,
            asset_type=AssetType(asset_type).value,
        )

    def register_universe(
        self,
        prices: dict[str, float],
        universe: Optional[dict[AssetType, tuple[str, ...]]] = None,
    ) -> list[str]:
        """
        Register every symbol of an instrument universe that has a price.

        Args:
            prices: Starting price per symbol; symbols without one are skipped
            universe: Symbols per asset class (default: DEFAULT_SYMBOLS)

        Returns:
            Symbols that were registered
        """
        registered = []
        for asset_type, symbols in (universe or DEFAULT_SYMBOLS).items():
            for symbol in symbols:
                if symbol in prices:
                    self.register(symbol, asset_type, prices[symbol])
                    registered.append(symbol)
        return registered

    def update_quote(
        self,
        symbol: str,
        price: Optional[float] = None,
        change_24h: Optional[float] = None,
        volume: Optional[float] = None,
        market_cap: Optional[float] = None,
        high_24h: Optional[float] = None,
        low_24h: Optional[float] = None,
        last_update: Optional[int] = None,
    ) -> None:
        """
        Update quote fields for an instrument.

        Only updates fields that are explicitly provided (not None).

        Raises:
            UnknownSymbolError: If the symbol is not registered
            ValueError: If price is provided and not positive
        """
        if price is not None and not price > 0:
            raise ValueError(f"price must be > 0 for {symbol}, got {price}")

        with self._lock:
            instrument = self._get(symbol)
            if price is not None:
                instrument.price = float(price)
            if change_24h is not None:
                instrument.change_24h = change_24h
            if volume is not None:
                instrument.volume = volume
            if market_cap is not None:
                instrument.market_cap = market_cap
            if high_24h is not None:
                instrument.high_24h = high_24h
            if low_24h is not None:
                instrument.low_24h = low_24h
            if last_update is not None:
                instrument.last_update = last_update

    def record_tick(self, symbol: str, timestamp: int) -> None:
        """
        Append the instrument's current price to its history.

        Raises:
            UnknownSymbolError: If the symbol is not registered
        """
        with self._lock:
            instrument = self._get(symbol)
            instrument.history.record(instrument.price, timestamp)

    def record_ticks(self, timestamp: int) -> None:
        """Append the current price of every instrument to its history."""
        with self._lock:
            for instrument in self._instruments.values():
                instrument.history.record(instrument.price, timestamp)

    def snapshot(self, symbol: str) -> MarketSnapshot:
        """
        Take an immutable snapshot of an instrument.

        Raises:
            UnknownSymbolError: If the symbol is not registered
        """
        with self._lock:
            return self._snapshot(self._get(symbol))

    def snapshots(self, asset_type: Optional[AssetType] = None) -> list[MarketSnapshot]:
        """Snapshots of all instruments (optionally one asset class), in registration order."""
        with self._lock:
            return [
                self._snapshot(instrument)
                for instrument in self._instruments.values()
                if asset_type is None or instrument.asset_type == asset_type
            ]

    def symbols(self, asset_type: Optional[AssetType] = None) -> list[str]:
        """Registered symbols (optionally one asset class), in registration order."""
        with self._lock:
            return [
                instrument.symbol
                for instrument in self._instruments.values()
                if asset_type is None or instrument.asset_type == asset_type
            ]

    def _get(self, symbol: str) -> _Instrument:
        try:
            return self._instruments[symbol]
        except KeyError:
            raise UnknownSymbolError(symbol) from None

    @staticmethod
    def _snapshot(instrument: _Instrument) -> MarketSnapshot:
        return MarketSnapshot(
            symbol=instrument.symbol,
            asset_type=instrument.asset_type,
            price=instrument.price,
            change_24h=instrument.change_24h,
            volume=instrument.volume,
            price_history=instrument.history.snapshot(),
            market_cap=instrument.market_cap,
            high_24h=instrument.high_24h,
            low_24h=instrument.low_24h,
            last_update=instrument.last_update,
        )

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._instruments

    def __len__(self) -> int:
        return len(self._instruments)

    def __iter__(self) -> Iterator[str]:
        return iter(self.symbols())
