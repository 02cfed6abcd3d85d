# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from streamfixup.app import fixup_streams
from streamfixup.config import ConfigurationError, configure_logging, parse_ignore_fields
from streamfixup.domain.model import FixupField

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from streamfixup.app import FixupSummary

log = logging.getLogger(__name__)

RULE = "=" * 60


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid integer: {value}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"Must be positive: {value}")
    return parsed


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile IPTV stream metadata")
    subparsers = parser.add_subparsers(dest="command", required=True)

    fixup = subparsers.add_parser(
        "fixup",
        help="Propagate names, channels, logos and EPG ids across duplicate streams",
    )
    fixup.add_argument(
        "--user-id",
        type=_positive_int,
        help="Only reconcile streams of this user",
    )
    fixup.add_argument(
        "--provider-id",
        type=_positive_int,
        help="Only reconcile the user owning this provider",
    )
    fixup.add_argument(
        "--ignore",
        type=str,
        help=(
            "Comma-separated fields to leave untouched "
            f"(available: {', '.join(member.value for member in FixupField)})"
        ),
    )
    fixup.add_argument(
        "--batch-size",
        type=_positive_int,
        default=None,
        help="Number of row updates committed together (defaults to config)",
    )
    fixup.add_argument(
        "--dry-run",
        action="store_true",
        help="Report the updates that would be applied without writing them",
    )
    fixup.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Enable debug logging",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(list(argv))


def _print_summary(summary: FixupSummary, *, dry_run: bool) -> None:
    totals = summary.totals
    print(RULE)
    print("FIXUP COMPLETE (DRY RUN)" if dry_run else "FIXUP COMPLETE")
    print(RULE)
    print(f"Users processed: {summary.targets}")
    print(f"Streams updated: {totals.total}")
    print(f"  names:    {totals.names}")
    print(f"  channels: {totals.channels}")
    print(f"  logos:    {totals.logos}")
    print(f"  tvg ids:  {totals.tvg_ids}")
    print(f"Errors: {len(summary.failed_users)}")
    print(RULE)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        ignore = parse_ignore_fields(parsed_args.ignore)
    except ConfigurationError:
        log.exception("CLI validation error")
        sys.exit(2)

    if ignore:
        log.info("Ignoring fields during fixup: %s", ", ".join(sorted(ignore)))

    try:
        if parsed_args.command != "fixup":
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
        summary = fixup_streams(
            user_id=parsed_args.user_id,
            provider_id=parsed_args.provider_id,
            ignore=ignore or None,
            batch_size=parsed_args.batch_size,
            dry_run=parsed_args.dry_run,
        )
    except ConfigurationError:
        log.exception("Invalid configuration")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during fixup")
        sys.exit(1)

    _print_summary(summary, dry_run=parsed_args.dry_run)
    if not summary.ok:
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
