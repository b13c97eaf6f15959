#!/usr/bin/env python3
# TRAILGUARD_FEAT: main-entry-001
"""
TRAILGUARD PRIME - Main Entry Point
===================================

Command line entry point.

Usage:
    python -m trailguard_prime.main --config config/paper.yaml --dry-run
    python -m trailguard_prime.main --replay prices.csv --trailing-bps 300
    python -m trailguard_prime.main --config config/paper.yaml --serve

Author: TRAILGUARD Development Team
Version: 1.0.0
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd

from trailguard_prime.core.config_manager import ConfigManager
from trailguard_prime.core.replay import ReplayConfig, StopReplay
from shared.trailguard_core.trailing_stop_engine import OrderType


def setup_logging(level: str = "INFO") -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="TRAILGUARD PRIME - Trailing stop pricing engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        help="Path to configuration file (YAML or JSON)",
    )

    parser.add_argument(
        "-l", "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: monitoring.log_level or INFO)",
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate config and exit",
    )
    mode.add_argument(
        "--replay",
        type=str,
        metavar="CSV",
        help="Replay a price CSV (timestamp index, price column) through the engine",
    )
    mode.add_argument(
        "--serve",
        action="store_true",
        help="Run the HTTP API",
    )

    replay = parser.add_argument_group("replay")
    replay.add_argument("--column", type=str, default="price", help="Price column (default: price)")
    replay.add_argument(
        "--order-type", type=str, choices=["SELL", "BUY"], default="SELL", help="Order direction"
    )
    replay.add_argument("--trailing-bps", type=int, default=None, help="Trailing distance in bps")
    replay.add_argument("--output", type=str, default=None, help="Write per-tick frame to CSV")

    return parser.parse_args(argv)


def load_config(path: Optional[str], logger: logging.Logger) -> Optional[ConfigManager]:
    config_manager = ConfigManager()
    if path and not config_manager.load(Path(path)):
        logger.error(f"Failed to load configuration: {path}")
        return None
    return config_manager


def run_dry_run(config_manager: ConfigManager, logger: logging.Logger) -> int:
    logger.info("Dry run mode - validating configuration...")
    errors = config_manager.validate()

    if errors:
        for error in errors:
            logger.error(f"Validation error: {error}")
        return 1

    registry = config_manager.build_registry()
    logger.info("Configuration valid!")
    logger.info(f"Mode: {config_manager.config.mode}")
    logger.info(f"Admin: {registry.admin}")
    logger.info(f"Feeds: {registry.list_feeds()}")
    logger.info(f"Keeper interval: {config_manager.keeper.interval_sec}s")
    return 0


def run_replay(args: argparse.Namespace, config_manager: ConfigManager, logger: logging.Logger) -> int:
    csv_path = Path(args.replay)
    if not csv_path.exists():
        logger.error(f"Price file not found: {csv_path}")
        return 1

    frame = pd.read_csv(csv_path, index_col=0, parse_dates=True)
    if args.column not in frame.columns:
        logger.error(f"Column '{args.column}' not in {list(frame.columns)}")
        return 1

    defaults = config_manager.orders
    replay = StopReplay(ReplayConfig(
        order_type=OrderType(args.order_type),
        trailing_distance_bps=args.trailing_bps or defaults.trailing_distance_bps,
        update_frequency_sec=defaults.update_frequency_sec,
        max_slippage_bps=defaults.max_slippage_bps,
        max_price_deviation_bps=defaults.max_price_deviation_bps,
        twap_window_sec=defaults.twap_window_sec,
    ))

    try:
        result = replay.run(frame[args.column])
    except ValueError as e:
        logger.error(f"Replay failed: {e}")
        return 1

    for key, value in result.summary.items():
        logger.info(f"{key}: {value}")

    if args.output:
        result.frame.to_csv(args.output)
        logger.info(f"Frame written to {args.output}")

    return 0


def run_server(args: argparse.Namespace, logger: logging.Logger) -> int:
    import uvicorn

    if args.config:
        os.environ["CONFIG_PATH"] = str(Path(args.config).resolve())

    from trailguard_prime.api.config import get_settings

    get_settings.cache_clear()
    settings = get_settings()

    logger.info(f"Serving {settings.APP_NAME} on {settings.HOST}:{settings.PORT}")
    uvicorn.run(
        "trailguard_prime.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    setup_logging(args.log_level or "INFO")
    logger = logging.getLogger("TRAILGUARD_MAIN")

    config_manager = load_config(args.config, logger)
    if config_manager is None:
        return 1

    if args.log_level is None:
        logging.getLogger().setLevel(config_manager.monitoring.log_level.upper())

    logger.info("=" * 60)
    logger.info("TRAILGUARD PRIME - Trailing Stop Pricing Engine")
    logger.info("=" * 60)

    if args.dry_run:
        return run_dry_run(config_manager, logger)

    if args.replay:
        return run_replay(args, config_manager, logger)

    if args.serve:
        return run_server(args, logger)

    logger.error("Nothing to do: pass --dry-run, --replay or --serve")
    return 2


def run() -> None:
    """Synchronous entry point."""
    try:
        sys.exit(main())
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
