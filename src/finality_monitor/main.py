#!/usr/bin/env python3
"""Entry point for the finality monitor.

Loads configuration, starts monitoring one node and turns the way the
monitor stopped into a process exit code.
"""

import argparse
import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

from .config import MonitorConfig
from .exceptions import InvariantViolation
from .monitor import FinalityMonitor

EXIT_INTERRUPTED = 0
EXIT_VIOLATION = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERNAL_ERROR = 3

# Get logger for this module
logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application.
    
    Args:
        level: Logging level as string (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    log_level: int = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="finality-monitor",
        description="Finality Monitor - fail loudly when a BFT node's justified/finalized heights drift",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Environment Variables:
  NODE_URL             - Node API base address (default: http://localhost:8689/)
  SAMPLING_INTERVAL    - Seconds between sampling rounds (default: 2)
  CHECKPOINT_INTERVAL  - Blocks between BFT checkpoints (default: 180)
  REQUEST_TIMEOUT      - Per-request timeout in seconds (default: 10)
  RETRY_COUNT          - Extra attempts per failed fetch (default: 0)
  LOG_LEVEL            - Logging level (can be overridden with --log-level)

Exit codes:
  1  invariant violation or failed sampling round
  2  configuration error
  3  unexpected internal error
        """
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level (default: INFO)"
    )
    parser.add_argument(
        "--node-url",
        default=None,
        help="Node API base address, overrides NODE_URL"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the monitor and return the process exit code.
    
    Args:
        argv: Command line arguments, defaults to ``sys.argv[1:]``
        
    Returns:
        Exit code describing why monitoring stopped
    """
    load_dotenv()
    args: argparse.Namespace = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    
    logger.info("=== Finality Monitor Starting ===")
    
    try:
        config: MonitorConfig = MonitorConfig.from_env()
        if args.node_url:
            config = config.with_node_url(args.node_url)
    except ValueError as e:
        logger.error(f"Configuration Error: {e}")
        logger.error("Please check NODE_URL, SAMPLING_INTERVAL, CHECKPOINT_INTERVAL, "
                     "REQUEST_TIMEOUT and RETRY_COUNT")
        return EXIT_CONFIG_ERROR
    config.log_config()
    
    try:
        asyncio.run(FinalityMonitor(config).run())
    except InvariantViolation as e:
        logger.critical(f"Error while performing check: {e}")
        return EXIT_VIOLATION
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down...")
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.error(f"Fatal Error: {e}", exc_info=True)
        return EXIT_INTERNAL_ERROR
    
    # run() only returns by raising
    return EXIT_INTERNAL_ERROR


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
