# main.py

"""Entry point for goldwatch (API server or one-shot CLI)."""

import argparse
import logging
import math
import sys

from goldwatch.config.logging_config import setup_logging
from goldwatch.config.settings import Settings

logger = logging.getLogger("goldwatch.main")


def _positive_float(value: str) -> float:
    """argparse type for --interval: a finite number above zero."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"not a number: {value!r}"
        ) from None
    if not math.isfinite(number) or number <= 0:
        raise argparse.ArgumentTypeError(
            f"must be greater than zero: {value!r}"
        )
    return number


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="goldwatch",
        description="Poll GTA gold prices and serve the latest over HTTP.",
        epilog=f"Default source: {Settings.SOURCE_URL}",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--once",
        action="store_true",
        default=False,
        help="Fetch a single record, print it and exit.",
    )
    mode.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Probe source connectivity and exit.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format for --once (default: json).",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Source page URL (default: GOLDWATCH_SOURCE_URL).",
    )
    parser.add_argument(
        "--interval",
        type=_positive_float,
        default=None,
        help="Seconds between polls (default: GOLDWATCH_POLL_INTERVAL).",
    )
    parser.add_argument("--host", default=None, help="API bind host.")
    parser.add_argument(
        "--port", type=int, default=None, help="API bind port.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Route to the server (default), --once or --health."""
    args = _build_parser().parse_args(argv)

    serving = not (args.once or args.health)
    log_file = setup_logging(
        logging.INFO if serving else logging.WARNING
    )
    logger.info("goldwatch starting, log file: %s", log_file)

    from goldwatch.cli.runner import run_health_check, run_once, serve

    if args.once:
        exit_code = run_once(args.url, args.output_format)
    elif args.health:
        exit_code = run_health_check(args.url)
    else:
        try:
            exit_code = serve(args.host, args.port, args.url, args.interval)
        finally:
            logger.info("goldwatch shutting down")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
