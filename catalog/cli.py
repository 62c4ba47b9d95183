"""
Run a catalog scrape from the command line.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
from collections.abc import Sequence
from pathlib import Path

from catalog.schemas import RunSummaryResponse
from catalog.scraping.config import (
    CatalogScrapingSettings,
    get_catalog_scraping_settings,
    load_source_configs,
    select_source,
)
from catalog.scraping.engine import CatalogScrapingEngine, CategoryDiscoveryError
from catalog.scraping.logging_utils import configure_logging, log_event
from catalog.scraping.storage import JsonFileSink, SinkWriteError

logger = logging.getLogger("catalog.cli")


def build_parser(settings: CatalogScrapingSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scrape a storefront catalog into a JSON snapshot.")
    parser.add_argument(
        "--output",
        dest="output",
        default=None,
        help=f"Output JSON file (default: {settings.output_path}).",
    )
    parser.add_argument(
        "--delay",
        dest="delay",
        type=float,
        default=None,
        help=f"Seconds each worker waits after every task (default: {settings.delay_seconds}).",
    )
    parser.add_argument(
        "--workers",
        dest="workers",
        type=int,
        default=None,
        help=f"Number of worker threads (default: {settings.workers}).",
    )
    parser.add_argument(
        "--verbose",
        dest="verbose",
        action="store_true",
        default=None,
        help="Log every request and product at DEBUG level.",
    )
    parser.add_argument(
        "--source",
        dest="source",
        default=None,
        help=f"Named source from the sources file (default: {settings.default_source}).",
    )
    parser.add_argument(
        "--timeout",
        dest="timeout",
        type=float,
        default=None,
        help=f"Per-request timeout in seconds (default: {settings.timeout_seconds}).",
    )
    return parser


def apply_overrides(settings: CatalogScrapingSettings, args: argparse.Namespace) -> CatalogScrapingSettings:
    """
    Return settings with every explicitly passed flag applied.
    """

    overrides: dict[str, object] = {}
    if args.output is not None:
        overrides["output_path"] = args.output
    if args.delay is not None:
        overrides["delay_seconds"] = args.delay
    if args.workers is not None:
        overrides["workers"] = args.workers
    if args.verbose is not None:
        overrides["verbose"] = args.verbose
    if args.source is not None:
        overrides["default_source"] = args.source
    if args.timeout is not None:
        overrides["timeout_seconds"] = args.timeout
    return dataclasses.replace(settings, **overrides)


def main(argv: Sequence[str] | None = None) -> int:
    base_settings = get_catalog_scraping_settings()
    parser = build_parser(base_settings)
    args = parser.parse_args(argv)
    settings = apply_overrides(base_settings, args)

    if settings.delay_seconds < 0:
        parser.error("--delay must be >= 0")
    if settings.workers < 1:
        parser.error("--workers must be >= 1")
    if settings.timeout_seconds <= 0:
        parser.error("--timeout must be > 0")

    configure_logging(verbose=settings.verbose)

    try:
        source_config = select_source(
            configs=load_source_configs(config_path=settings.sources_path),
            name=settings.default_source,
        )
    except (OSError, ValueError) as exc:
        parser.error(str(exc))

    output_path = Path(settings.output_path).expanduser().resolve()
    engine = CatalogScrapingEngine(
        settings=settings,
        source_config=source_config,
        sink=JsonFileSink(output_path),
    )
    try:
        summary = engine.run()
    except (CategoryDiscoveryError, SinkWriteError) as exc:
        log_event(
            logger,
            logging.ERROR,
            "run_failed",
            source=source_config.name,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return 1

    print(RunSummaryResponse.from_summary(summary).model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
