from __future__ import annotations

import argparse
import logging
import time
from typing import Callable, List, Optional, Tuple

import httpx

from .base import Target
from .catalog import LISTING_SOURCES, SITEMAP_SOURCES, STATIC_TARGETS
from .discovery import discover_from_listings, discover_from_sitemaps, load_seed_file
from .exporter import PREVIEW_PATH, default_output_path, write_records
from .fetcher import Fetcher
from .importer_adapter import ImportServiceError, post_records
from .parsers.adapters import AdapterRegistry
from .pipeline import PipelineResult, SpecPipeline, merge_targets, run_targets
from .settings import CrawlSettings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Scrape laser cutter specs from manufacturer sites and import them"
    )
    parser.add_argument("--brand", help="Only process targets of this brand")
    parser.add_argument("--dry", action="store_true", default=None, help="Write a file instead of importing")
    parser.add_argument("--output", help="Output file; .csv selects CSV, anything else JSON")
    parser.add_argument("--seeds", help="JSON file with extra [{brand, model, url}] targets")
    parser.add_argument("--import-url", dest="import_url", help="Import endpoint URL")
    parser.add_argument("--concurrency", type=int, help="Targets processed in parallel (default 1)")
    parser.add_argument("--timeout", type=float, help="Per-request timeout in seconds")
    parser.add_argument("--retries", type=int, help="Retries for transient fetch failures")
    parser.add_argument("--delay", type=float, help="Pause after each target, in seconds")
    parser.add_argument(
        "--no-discover", dest="discover", action="store_false", default=None, help="Skip sitemap/listing discovery"
    )
    parser.add_argument(
        "--preview", action="store_true", help="Skip the quality gate and import; write scrape-preview.json"
    )
    parser.add_argument("--log-level", dest="log_level", help="Logging level (default INFO)")
    return parser


def build_settings(argv: Optional[List[str]] = None) -> CrawlSettings:
    """Environment first, then explicit CLI flags on top."""
    args = build_parser().parse_args(argv)
    settings = CrawlSettings.from_env()
    if args.brand:
        settings.brand = args.brand
    if args.dry:
        settings.dry_run = True
    if args.output:
        settings.output = args.output
    if args.seeds:
        settings.seeds = args.seeds
    if args.import_url:
        settings.import_url = args.import_url
    if args.concurrency is not None:
        settings.concurrency = max(1, args.concurrency)
    if args.timeout is not None:
        settings.timeout = args.timeout
    if args.retries is not None:
        settings.retries = max(0, args.retries)
    if args.delay is not None:
        settings.delay = max(0.0, args.delay)
    if args.discover is not None:
        settings.discover = args.discover
    if args.log_level:
        settings.log_level = args.log_level.upper()
    settings.preview = bool(args.preview)
    return settings


def collect_targets(
    settings: CrawlSettings,
    fetcher: Fetcher,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> Tuple[Target, ...]:
    """Static list + seed file, then listing and sitemap discovery, deduplicated by URL."""
    seeds: Tuple[Target, ...] = ()
    if settings.seeds:
        try:
            seeds = load_seed_file(settings.seeds)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring seed file %s: %s", settings.seeds, exc)

    listed: Tuple[Target, ...] = ()
    mapped: Tuple[Target, ...] = ()
    if settings.discover:
        listed = discover_from_listings(
            fetcher,
            [s for s in LISTING_SOURCES if settings.matches_brand(s.brand)],
            delay=settings.delay,
            sleep=sleep,
        )
        mapped = discover_from_sitemaps(
            fetcher,
            [s for s in SITEMAP_SOURCES if settings.matches_brand(s.brand)],
            max_pages=settings.sitemap_max_pages,
            max_pdfs=settings.sitemap_max_pdfs,
            delay=settings.delay,
            sleep=sleep,
        )
    return merge_targets(STATIC_TARGETS, seeds, listed, mapped, brand=settings.brand)


def crawl(
    settings: CrawlSettings,
    fetcher: Fetcher,
    *,
    registry: Optional[AdapterRegistry] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> PipelineResult:
    targets = collect_targets(settings, fetcher, sleep=sleep)
    logger.info("Processing %d targets", len(targets))
    pipeline = SpecPipeline(fetcher, registry=registry, thresholds=settings.thresholds, gate=not settings.preview)
    return run_targets(
        targets, pipeline.process, concurrency=settings.concurrency, delay=settings.delay, sleep=sleep
    )


def run(
    settings: CrawlSettings,
    *,
    fetcher: Optional[Fetcher] = None,
    import_client: Optional[httpx.Client] = None,
    registry: Optional[AdapterRegistry] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    if fetcher is None:
        with Fetcher(timeout=settings.timeout, retries=settings.retries, user_agent=settings.user_agent) as owned:
            result = crawl(settings, owned, registry=registry, sleep=sleep)
    else:
        result = crawl(settings, fetcher, registry=registry, sleep=sleep)

    logger.info(
        "Prepared %d records (%d skipped by quality gate, %d failed)",
        len(result.records),
        len(result.skipped),
        len(result.failed),
    )
    if not result.records:
        logger.error("No records prepared")
        return 1

    if settings.preview:
        path = write_records(settings.output or PREVIEW_PATH, result.records)
        print(path)
        return 0

    if settings.writes_file:
        path = write_records(settings.output or default_output_path(settings.brand), result.records)
        print(path)
        return 0

    try:
        post_records(result.records, settings.import_url, client=import_client)
    except ImportServiceError as exc:
        logger.error("%s", exc)
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    settings = build_settings(argv)
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO), format=LOG_FORMAT)
    return run(settings)


if __name__ == "__main__":
    raise SystemExit(main())
