"""
Signal service for computing signals across every tracked instrument.

Handles:
- Snapshotting instruments from the market book
- Mapping the signal engine over instruments, optionally in parallel
- Isolating per-instrument failures so one bad instrument never blocks
  the rest of the batch
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

import structlog

from src.market.book import MarketBook
from src.market.models import AssetType, MarketSnapshot
from src.strategy.models import SignalDecision
from src.strategy.signal_engine import SignalEngine

logger = structlog.get_logger(__name__)


@dataclass
class SignalServiceConfig:
    """Configuration for the signal service."""

    # Threads used for batch computation (1 = compute inline)
    max_workers: int = 4


class SignalService:
    """
    Service for generating signals from a market book.

    Responsibilities:
    - Take an atomic snapshot per instrument
    - Compute signals per instrument (no ordering dependency between them)
    - Log and skip instruments whose computation fails
    """

    def __init__(
        self,
        engine: SignalEngine,
        book: MarketBook,
        config: Optional[SignalServiceConfig] = None,
    ):
        """
        Initialize signal service.

        Args:
            engine: Signal engine shared by all instruments
            book: Market book holding quotes and price histories
            config: Service configuration
        """
        self.engine = engine
        self.book = book
        self.config = config or SignalServiceConfig()

    def update_config(self, config: SignalServiceConfig) -> None:
        """
        Update the service configuration.

        Used for hot-reload of settings.
        """
        self.config = config
        logger.info("signal_service_config_updated", max_workers=config.max_workers)

    def generate_signal(self, symbol: str) -> SignalDecision:
        """
        Compute the signal for one instrument.

        Raises:
            UnknownSymbolError: If the symbol is not in the market book
        """
        snapshot = self.book.snapshot(symbol)
        return self.engine.compute_signal(symbol, snapshot)

    def generate_all(self, asset_type: Optional[AssetType] = None) -> list[SignalDecision]:
        """
        Compute signals for every instrument (optionally one asset class).

        Snapshots are taken up front, then the engine is mapped over them.
        Results keep the book's registration order; failed instruments are
        left out.

        Args:
            asset_type: Restrict to one asset class

        Returns:
            Signal decisions for all instruments that computed successfully
        """
        snapshots = self.book.snapshots(asset_type)
        if not snapshots:
            logger.info("no_market_data_available", asset_type=asset_type.value if asset_type else None)
            return []

        if self.config.max_workers > 1 and len(snapshots) > 1:
            with ThreadPoolExecutor(
                max_workers=min(self.config.max_workers, len(snapshots)),
                thread_name_prefix="signals",
            ) as pool:
                results = list(pool.map(self._safe_compute, snapshots))
        else:
            results = [self._safe_compute(snapshot) for snapshot in snapshots]

        decisions = [decision for decision in results if decision is not None]

        logger.info(
            "signals_generated",
            requested=len(snapshots),
            generated=len(decisions),
            failed=len(snapshots) - len(decisions),
        )
        return decisions

    def _safe_compute(self, snapshot: MarketSnapshot) -> Optional[SignalDecision]:
        """Compute one signal, logging instead of raising on failure."""
        try:
            return self.engine.compute_signal(snapshot.symbol, snapshot)
        except Exception as e:
            logger.error(
                "signal_generation_failed",
                symbol=snapshot.symbol,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None
