from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from feedsync.app import read_operation_log, run_sync
from feedsync.config import configure_logging
from feedsync.domain.model import TriggerSource

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid integer: {value}") from exc
    if number < 1:
        raise argparse.ArgumentTypeError(f"Must be at least 1: {value}")
    return number


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise the catalog with an XML product feed")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Run one feed synchronisation")
    sync.add_argument(
        "--dry-run",
        action="store_true",
        help="Log every decision without changing the catalog",
    )
    sync.add_argument(
        "--source",
        choices=[trigger.value for trigger in TriggerSource],
        default=TriggerSource.MANUAL.value,
        help="What triggered this run (default: %(default)s)",
    )

    oplog = subparsers.add_parser("log", help="Show the operation log of recent runs")
    oplog.add_argument(
        "--limit",
        type=_positive_int,
        help="Number of most recent lines to show",
    )

    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        if parsed_args.command == "sync":
            report = run_sync(dry_run=parsed_args.dry_run, source=parsed_args.source)
            if report.source is TriggerSource.MANUAL:
                print(report.summary())  # noqa: T201
            else:
                log.info("%s", report.summary())
            if not report.succeeded:
                sys.exit(1)
        elif parsed_args.command == "log":
            for entry in read_operation_log(parsed_args.limit):
                stamp = entry.created_at.isoformat(timespec="seconds")
                print(f"{stamp} {entry.line}")  # noqa: T201
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during feed sync")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
