"""
Signal Engine - Command Line Entry Point

Computes technical indicators and a BUY/SELL/HOLD recommendation for one or
more market snapshots stored as JSON (a single snapshot object or a list).

Snapshots are loaded into a market book (history trimmed to
HISTORY_CAPACITY) and computed by the batch signal service. A symbol that
appears more than once keeps its last snapshot.

Snapshot shape (camelCase, history newest-first):
    {"symbol": "BTC", "assetType": "crypto", "price": 45000.0,
     "change24h": 3.2, "volume": 2000000000,
     "priceHistory": [{"price": 45000.0, "timestamp": 1700000000000}, ...]}

Usage:
    python -m src.main snapshot.json
    python -m src.main market.json --symbol ETH
    python -m src.main market.json --json

Configuration:
    Indicator periods and logging are read from the environment / .env
    (see config/settings.py).
"""

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Optional

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pydantic import ValidationError

from config.logging_config import setup_logging, get_logger
from config.settings import get_settings
from src.daemon.signal_service import SignalService
from src.market.book import MarketBook
from src.market.models import InvalidSnapshotError, MarketSnapshot
from src.strategy.models import SignalDecision
from src.strategy.signal_engine import SignalEngine
from src.transport.models import SignalPayload, SignalsResponse

NO_MARKET_DATA_MESSAGE = "No market data available"


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Compute technical trading signals from market snapshots",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m src.main snapshot.json                # Analyze every snapshot in the file
  python -m src.main market.json --symbol ETH     # Analyze one symbol only
  python -m src.main market.json --json           # Print the JSON payload
        """,
    )
    parser.add_argument("snapshot_file", type=Path, help="JSON file with one snapshot or a list")
    parser.add_argument("--symbol", type=str, help="Only analyze this symbol")
    parser.add_argument("--json", action="store_true", help="Print signals as JSON")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override LOG_LEVEL from settings",
    )
    return parser


def load_snapshots(path: Path) -> list[MarketSnapshot]:
    """
    Load market snapshots from a JSON file.

    Raises:
        OSError: If the file cannot be read
        InvalidSnapshotError: If the content is not a snapshot or list of snapshots
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise InvalidSnapshotError(f"Invalid JSON in {path}: {e}") from e

    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise InvalidSnapshotError(f"Expected a snapshot object or a list in {path}")

    snapshots = []
    for item in data:
        if not isinstance(item, dict):
            raise InvalidSnapshotError(f"Expected snapshot objects in {path}, got {type(item).__name__}")
        snapshots.append(MarketSnapshot.from_dict(item))
    return snapshots


def format_decision(decision: SignalDecision) -> str:
    """Render a decision as a text block."""
    entry = f"{decision.entry_price:.2f}" if decision.entry_price is not None else "-"
    lines = [
        "=" * 60,
        f"  {decision.symbol}: {decision.signal.value} "
        f"(confidence {decision.confidence:.0f}%, trend {decision.trend.value})",
        "=" * 60,
        f"  Entry: {entry}  Stop: {decision.stop_loss:.2f}  "
        f"Target: {decision.take_profit:.2f}  R/R: {decision.risk_reward}",
        "",
        decision.analysis,
        "",
        "  " + "  ".join(f"{key}={value}" for key, value in decision.technical_indicators.items()),
    ]
    return "\n".join(lines)


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the signal CLI.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = create_parser().parse_args(argv)

    try:
        settings = get_settings()

        setup_logging(
            log_level=args.log_level or settings.log_level,
            log_file=settings.log_file,
            json_format=settings.log_json,
        )
        logger = get_logger(__name__)

        book = MarketBook.from_settings(settings)
        for snapshot in load_snapshots(args.snapshot_file):
            book.load(snapshot)

        service = SignalService(
            SignalEngine.from_settings(settings),
            book,
            settings.signal_service_config(),
        )

        if args.symbol:
            if args.symbol not in book:
                print(f"[ERROR] Symbol not found: {args.symbol}", file=sys.stderr)
                return 1
            decisions = [service.generate_signal(args.symbol)]
        else:
            decisions = service.generate_all()

        logger.info("signals_computed", count=len(decisions), source=str(args.snapshot_file))

        message = None if decisions else NO_MARKET_DATA_MESSAGE

        if args.json:
            response = SignalsResponse(
                signals=[SignalPayload.from_decision(d) for d in decisions],
                timestamp=int(time.time() * 1000),
                message=message,
            )
            print(response.model_dump_json(by_alias=True, indent=2))
        elif message:
            print(f"[INFO] {message}")
        else:
            for decision in decisions:
                print(format_decision(decision))

        return 0

    except KeyboardInterrupt:
        print("\n[INFO] Cancelled")
        return 130

    except (OSError, InvalidSnapshotError, ValidationError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
