"""Command-line entry point: ``python -m mail_to_calendar [--once | --stats]``."""

from __future__ import annotations

import argparse
import json
import logging

from .config import CHECK_INTERVAL_MINUTES, LEDGER_BACKEND, LEDGER_DIR
from .services.ledger import get_ledger
from .workflows.event_pipeline import run, run_forever

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="mail_to_calendar",
        description="Create and cancel calendar events from booking emails.",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--once", action="store_true", help="process pending emails once and exit")
    mode.add_argument("--stats", action="store_true", help="print outcome ledger statistics and exit")
    parser.add_argument(
        "--interval",
        type=int,
        default=CHECK_INTERVAL_MINUTES,
        help="minutes between passes (default: %(default)s)",
    )
    args = parser.parse_args(argv)

    if args.stats:
        stats = get_ledger(LEDGER_BACKEND, LEDGER_DIR).stats()
        print(json.dumps(stats, indent=2, ensure_ascii=False))
        return
    if args.once:
        run()
        return
    try:
        run_forever(args.interval)
    except KeyboardInterrupt:
        logger.info("Stopped by user")


if __name__ == "__main__":
    main()
