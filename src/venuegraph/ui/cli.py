from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING, NoReturn

from dotenv import load_dotenv

from venuegraph.app import run_venue_ingestion, run_venue_ingestion_for_all_cities
from venuegraph.config import (
    ConfigurationError,
    configure_logging,
    get_city_config,
    list_city_names,
)
from venuegraph.config.cities import CITY_CONFIGS
from venuegraph.domain.model import RunType

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_run_type(value: str) -> RunType:
    try:
        return RunType(value.strip().upper())
    except ValueError as exc:
        choices = ", ".join(run_type.value for run_type in RunType)
        raise argparse.ArgumentTypeError(f"Invalid run type {value!r} (choose {choices})") from exc


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise ValueError(message)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = _ArgumentParser(description="Ingest and deduplicate city venues")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run the ingestion pipeline for one city")
    run.add_argument("--city", type=str, required=True, help="City name from the catalog")
    run.add_argument(
        "--run-type",
        type=_parse_run_type,
        default=RunType.FULL,
        help="FULL or INCREMENTAL (default: %(default)s)",
    )

    run_all = subparsers.add_parser("run-all", help="Run the pipeline for every configured city")
    run_all.add_argument(
        "--run-type",
        type=_parse_run_type,
        default=RunType.FULL,
        help="FULL or INCREMENTAL (default: %(default)s)",
    )

    subparsers.add_parser("cities", help="List the cities in the catalog")

    return parser.parse_args(list(argv))


def _print_cities() -> None:
    for name in list_city_names():
        city = CITY_CONFIGS[name]
        print(f"{city.name}, {city.state} ({city.country})")  # noqa: T201


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command == "run":
            get_city_config(parsed_args.city)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "cities":
            _print_cities()
        elif parsed_args.command == "run":
            result = run_venue_ingestion(parsed_args.city, parsed_args.run_type)
            log.info("Run %s finished with status %s", result.run_id, result.status)
        elif parsed_args.command == "run-all":
            outcomes = run_venue_ingestion_for_all_cities(parsed_args.run_type)
            for outcome in outcomes:
                log.info("%s: %s", outcome.city, outcome.status or outcome.error)
            if not any(outcome.succeeded for outcome in outcomes):
                raise RuntimeError("No city completed ingestion")  # noqa: TRY301
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during ingestion")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def entrypoint() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    entrypoint()
