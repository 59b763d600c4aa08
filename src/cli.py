"""Command-line entry point for running the seedshotter without the GUI."""
from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from errors import AppError
from logging_config import setup_logging
from models import WatchStrategy
from paths import APP_LOG_FILE, ensure_runtime_directories
from services import SeedshotService
from trigger import DEFAULT_TRIGGER

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Take a screenshot whenever a trigger line is appended to a log file"
    )
    parser.add_argument("--log-file", help="Log file to watch (default: last used)")
    parser.add_argument("--output", help="Screenshot output file (default: last used)")
    parser.add_argument(
        "--trigger",
        default=DEFAULT_TRIGGER,
        help="Text that fires a capture (default: %(default)r)",
    )
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in WatchStrategy],
        default=WatchStrategy.NATIVE.value,
        help="Filesystem notification strategy (default: %(default)s)",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=None,
        help="Seconds between scans when using the polling strategy",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    ensure_runtime_directories()
    setup_logging(
        log_file=APP_LOG_FILE,
        level=getattr(logging, args.log_level.upper(), logging.INFO),
    )

    service = SeedshotService()
    try:
        handle = service.start(
            args.log_file,
            args.output,
            trigger=args.trigger,
            strategy=args.strategy,
            poll_interval=args.poll_interval,
        )
    except AppError as exc:
        logger.error("%s", exc)
        raise SystemExit(2) from exc

    try:
        while not handle.wait(timeout=1.0):
            pass
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        if not service.stop(wait=True, timeout=5.0):
            logger.warning("Watch session did not stop within 5 seconds")

    if handle.errors:
        logger.info("%s error(s) reported during the session", len(handle.errors))


if __name__ == "__main__":
    main()
