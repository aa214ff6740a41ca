"""
Market data model: price points, bounded price history, and snapshots.

Price history is kept newest-first (index 0 = most recent) with a fixed
capacity. Recording a new observation evicts the oldest one once the
capacity is reached.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from itertools import islice
from typing import Any, Iterable, Optional

DEFAULT_HISTORY_CAPACITY = 100


class InvalidSnapshotError(ValueError):
    """Raised when a market snapshot cannot be built from its input."""


class AssetType(str, Enum):
    """Supported asset classes."""

    CRYPTO = "crypto"
    FOREX = "forex"
    INDICES = "indices"
    COMMODITIES = "commodities"


# Instrument universe tracked by default, per asset class
DEFAULT_SYMBOLS: dict[AssetType, tuple[str, ...]] = {
    AssetType.CRYPTO: ("BTC", "ETH", "ADA", "SOL", "DOT", "LINK", "AVAX", "MATIC"),
    AssetType.FOREX: ("EURUSD", "GBPUSD", "USDJPY", "AUDUSD", "USDCAD", "NZDUSD", "USDCHF"),
    AssetType.INDICES: ("US30", "NAS100", "SPX500", "UK100", "GER30", "FRA40", "JPN225"),
    AssetType.COMMODITIES: ("XAUUSD", "XAGUSD", "USOIL", "UKOIL", "NATGAS", "COPPER", "WHEAT"),
}


def infer_asset_type(symbol: str) -> AssetType:
    """Asset class of a symbol from the default universe (crypto if unknown)."""
    for asset_type, symbols in DEFAULT_SYMBOLS.items():
        if symbol in symbols:
            return asset_type
    return AssetType.CRYPTO


@dataclass(frozen=True)
class PricePoint:
    """Single price observation (timestamp in epoch milliseconds)."""

    price: float
    timestamp: int


class PriceHistory:
    """
    Bounded newest-first price history.

    Backed by a deque with maxlen, so recording is O(1) and the oldest
    observation drops off the far end on overflow. The engine never reads
    this object directly: callers hand it an immutable snapshot().
    """

    def __init__(
        self,
        points: Optional[Iterable[PricePoint]] = None,
        capacity: int = DEFAULT_HISTORY_CAPACITY,
    ):
        """
        Initialize price history.

        Args:
            points: Existing observations, newest-first
            capacity: Maximum number of observations kept
        """
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._points: deque[PricePoint] = deque(maxlen=capacity)
        if points is not None:
            # Only the newest `capacity` points survive; extend() on the right
            # would otherwise evict from the newest end
            self._points.extend(islice(points, capacity))

    def append(self, point: PricePoint) -> None:
        """Record a new (most recent) observation."""
        self._points.appendleft(point)

    def record(self, price: float, timestamp: int) -> PricePoint:
        """Record a price observation and return it."""
        point = PricePoint(price=float(price), timestamp=int(timestamp))
        self.append(point)
        return point

    def prices(self) -> list[float]:
        """Prices ordered newest-first."""
        return [point.price for point in self._points]

    def snapshot(self) -> tuple[PricePoint, ...]:
        """Immutable newest-first copy of the history."""
        return tuple(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        return f"PriceHistory(len={len(self)}, capacity={self._capacity})"


@dataclass(frozen=True)
class MarketSnapshot:
    """
    Point-in-time view of one instrument, the input of the signal engine.

    price_history is newest-first and immutable; price must be positive.
    """

    symbol: str
    asset_type: AssetType
    price: float
    change_24h: float = 0.0  # percent
    volume: float = 0.0
    price_history: tuple[PricePoint, ...] = field(default_factory=tuple)
    market_cap: Optional[float] = None
    high_24h: Optional[float] = None
    low_24h: Optional[float] = None
    last_update: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.price > 0:
            raise InvalidSnapshotError(
                f"price must be > 0 for {self.symbol}, got {self.price}"
            )
        if not isinstance(self.price_history, tuple):
            object.__setattr__(self, "price_history", tuple(self.price_history))

    def prices(self) -> list[float]:
        """History prices ordered newest-first."""
        return [point.price for point in self.price_history]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MarketSnapshot":
        """
        Build a snapshot from the camelCase JSON shape used by the feed.

        Example:
            {"symbol": "BTC", "assetType": "crypto", "price": 45000,
             "change24h": 3.2, "volume": 2e9,
             "priceHistory": [{"price": 45000, "timestamp": 1700000000000}]}

        Raises:
            InvalidSnapshotError: If required fields are missing or invalid
        """
        try:
            history = tuple(
                PricePoint(price=float(p["price"]), timestamp=int(p["timestamp"]))
                for p in data.get("priceHistory") or []
            )
            symbol = str(data["symbol"])
            asset_type = data.get("assetType")
            return cls(
                symbol=symbol,
                asset_type=AssetType(asset_type) if asset_type else infer_asset_type(symbol),
                price=float(data["price"]),
                change_24h=float(data.get("change24h") or 0.0),
                volume=float(data.get("volume") or 0.0),
                price_history=history,
                market_cap=_optional_float(data.get("marketCap")),
                high_24h=_optional_float(data.get("high24h")),
                low_24h=_optional_float(data.get("low24h")),
                last_update=_optional_int(data.get("lastUpdate")),
            )
        except InvalidSnapshotError:
            raise
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidSnapshotError(f"Invalid snapshot data: {e}") from e


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)
