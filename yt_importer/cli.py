"""CLI entrypoint for the YouTube -> Prismic importer.

All pipeline settings come from environment variables (optionally a ``.env``
file); the flags below only control logging.

Usage:
    python import_videos.py
    python import_videos.py --verbose
    python import_videos.py --env-file ./config/.env --detailed-logging
"""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
import logging
from logging.handlers import RotatingFileHandler
import sys
import time
from pathlib import Path
from typing import Callable, Optional

from .config import ImporterConfig
from .models import ImportReport, MigrationBatch

log = logging.getLogger(__name__)


def _setup_logging(
    *,
    verbose: bool,
    detailed_logging: bool,
    log_file: Path | None,
) -> None:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    root_level = logging.DEBUG if verbose else logging.INFO
    root_logger.setLevel(root_level)

    console_fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    detailed_fmt = (
        "%(asctime)s | %(levelname)-8s | %(name)s | "
        "%(threadName)s | %(filename)s:%(lineno)d | %(message)s"
    )
    formatter = logging.Formatter(
        detailed_fmt if detailed_logging else console_fmt,
        "%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(root_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=20 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(detailed_fmt, "%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(file_handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Import recent YouTube uploads into Prismic as video articles"
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load settings from this .env file (default: search for .env)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--detailed-logging",
        action="store_true",
        help="Enable detailed logging (thread, file/line)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write a rotating debug log to this file",
    )
    return parser.parse_args(argv)


def run_import(
    config: ImporterConfig,
    youtube,
    prismic,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> ImportReport:
    """Run every phase once: list, fetch, filter, dedup + stage, commit."""
    from tqdm import tqdm

    from .commit import commit_batch
    from .sources import fetch_video_details, list_playlist_video_ids
    from .staging import stage_candidates
    from .utils import is_long_form

    report = ImportReport()

    # --- Phase 1: list recent upload IDs ---
    t0 = time.perf_counter()
    video_ids = list_playlist_video_ids(
        youtube,
        config.playlist_id,
        page_size=config.page_size,
        max_pages=config.max_playlist_pages,
        max_items=config.max_videos_to_check,
        delay_s=config.api_delay_s,
        sleep=sleep,
    )
    report.ids_listed = len(video_ids)
    log.info("Phase 1: %s IDs listed (%.2fs)", len(video_ids), time.perf_counter() - t0)
    if not video_ids:
        log.info("No videos found in the playlist.")
        return report

    # --- Phase 2: video details ---
    t0 = time.perf_counter()
    details = fetch_video_details(
        youtube,
        video_ids,
        batch_size=config.detail_batch_size,
        delay_s=config.api_delay_s,
        sleep=sleep,
    )
    report.details_fetched = len(details)
    log.info(
        "Phase 2: details for %s videos (%.2fs)",
        len(details),
        time.perf_counter() - t0,
    )

    # --- Phase 3: drop Shorts ---
    long_form = [
        item
        for item in details
        if is_long_form(item.duration, config.shorts_max_seconds)
    ]
    report.long_form = len(long_form)
    log.info("Phase 3: %s non-Short videos", len(long_form))
    if not long_form:
        log.info("No eligible (non-Short) videos to process.")
        return report

    # --- Phase 4: dedup + stage ---
    t0 = time.perf_counter()
    log.info("Phase 4: staging up to %s document(s) ...", config.max_videos_to_import)
    batch = MigrationBatch()
    staged, skipped = stage_candidates(
        tqdm(long_form, desc="Staging videos"),
        batch,
        prismic,
        config,
    )
    report.staged = len(staged)
    report.staged_ids = [doc.video_id for doc in staged]
    report.assets_staged = len(batch.assets)
    report.skipped_existing = skipped
    log.info(
        "Phase 4: %s staged, %s skipped as existing (%.2fs)",
        len(staged),
        skipped,
        time.perf_counter() - t0,
    )

    # --- Phase 5: commit ---
    t0 = time.perf_counter()
    report.committed, report.commit_error = commit_batch(prismic, batch)
    log.info("Phase 5 completed in %.2fs", time.perf_counter() - t0)
    return report


def main(argv: list[str] | None = None) -> None:
    """Run the importer once."""
    from .config import ConfigError, load_config
    from .prismic import PrismicClient
    from .sources import build_youtube_service

    args = parse_args(argv)
    _setup_logging(
        verbose=args.verbose,
        detailed_logging=args.detailed_logging,
        log_file=args.log_file,
    )

    try:
        config = load_config(env_file=args.env_file)
    except ConfigError as exc:
        log.error("FATAL: %s", exc)
        log.error("Check your .env file or environment.")
        sys.exit(1)

    overall_t0 = time.perf_counter()
    log.info("=" * 60)
    log.info("YouTube -> Prismic import (%s)", datetime.now(timezone.utc).isoformat())
    log.info("  Repository:  %s", config.prismic_repo_name)
    log.info("  Custom type: %s", config.document_type)
    log.info("=" * 60)

    report: Optional[ImportReport] = None
    try:
        youtube = build_youtube_service(config.youtube_api_key)
        with PrismicClient(
            config.prismic_repo_name,
            config.prismic_api_endpoint,
            config.prismic_write_token,
            access_token=config.prismic_access_token,
            migration_api_key=config.prismic_migration_api_key,
        ) as prismic:
            report = run_import(config, youtube, prismic)
    except Exception:
        log.exception("Import aborted by an unexpected error")
    finally:
        log.info("=" * 60)
        log.info("IMPORT COMPLETE (%s)", datetime.now(timezone.utc).isoformat())
        if report is not None:
            log.info(f"  IDs listed:        {report.ids_listed}")
            log.info(f"  Details fetched:   {report.details_fetched}")
            log.info(f"  Non-Shorts:        {report.long_form}")
            log.info(f"  Already existing:  {report.skipped_existing}")
            log.info(f"  Staged:            {report.staged}")
            log.info(f"  Assets staged:     {report.assets_staged}")
            log.info(f"  Migration sent:    {report.committed}")
            if report.commit_error:
                log.warning(f"  Migration error:   {report.commit_error[:200]}")
        log.info(f"  Total runtime:     {time.perf_counter() - overall_t0:.1f}s")
