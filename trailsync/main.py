"""Command-line entry point for a single photo sync run.

Usage:
    trailsync
    trailsync --storage-driver local --sync-days 7 --log-level DEBUG
    python -m trailsync.main

Exit codes:
    0: The run completed (per-camera or per-photo failures included)
    1: The database was unreachable or the run was aborted
    2: Configuration is missing or invalid
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import TYPE_CHECKING

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from trailsync.core.config import get_settings
from trailsync.core.database import close_db, get_session_factory, init_db
from trailsync.core.exceptions import RecordStoreError, SyncAbortedError
from trailsync.core.logging import get_logger, sanitize_error, setup_logging
from trailsync.jobs import PhotoSyncJob
from trailsync.services.notification import SlackNotifier
from trailsync.services.object_storage import get_object_storage
from trailsync.services.record_store import RecordStore
from trailsync.services.spypoint_client import SpypointClient

if TYPE_CHECKING:
    from trailsync.core.config import Settings

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trailsync",
        description="Sync Spypoint trail-camera photos to object storage and PostgreSQL.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override LOG_LEVEL",
    )
    parser.add_argument(
        "--storage-driver",
        choices=["gcs", "local"],
        help="Override STORAGE_DRIVER",
    )
    parser.add_argument(
        "--sync-days",
        type=int,
        help="Override SYNC_DAYS (0 disables the recency filter)",
    )
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Load settings from the environment and apply command-line overrides.

    Raises:
        pydantic.ValidationError: If required configuration is missing or invalid
    """
    settings = get_settings()
    overrides = {
        key: value
        for key, value in {
            "log_level": args.log_level,
            "storage_driver": args.storage_driver,
            "sync_days": args.sync_days,
        }.items()
        if value is not None
    }
    if overrides:
        # Round-trip through validation so overrides obey the field constraints
        settings = type(settings).model_validate({**settings.model_dump(), **overrides})
    return settings


async def run_sync(settings: Settings) -> int:
    """Initialize the database, run the sync job and release resources."""
    notifier = SlackNotifier.from_settings(settings)
    try:
        try:
            await init_db()
            records = RecordStore(get_session_factory())
            await records.ping()
        except (SQLAlchemyError, OSError, RecordStoreError) as e:
            message = f"Database unavailable: {sanitize_error(e)}"
            logger.error(message)
            await notifier.post_error("Database", message)
            return EXIT_FAILURE

        async with SpypointClient(settings.spypoint_host) as client:
            job = PhotoSyncJob(
                settings,
                client,
                get_object_storage(settings),
                records,
                notifier,
            )
            try:
                await job.run()
            except SyncAbortedError as e:
                logger.error(
                    f"Sync aborted during {e.stage}: {sanitize_error(e)}",
                    extra={"stage": e.stage},
                )
                return EXIT_FAILURE
        return EXIT_OK
    finally:
        await notifier.close()
        await close_db()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args)
    except ValidationError as e:
        print(f"Invalid configuration:\n{e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    setup_logging(settings)
    logger.info(f"{settings.app_name} {settings.app_version} starting")
    if settings.sync_days > 0:
        logger.info(
            f"Recency filter active: photos taken more than {settings.sync_days} days "
            "before the run are skipped"
        )
    else:
        logger.info("Recency filter disabled: every listed photo is considered")

    return asyncio.run(run_sync(settings))


if __name__ == "__main__":
    sys.exit(main())
