"""Command-line entry point for lockwatch harvest runs.

Exactly one mode runs per process:

- discover (default): ``lockwatch --database-url harvest.db --iterations 20``
- enrich comments: ``lockwatch --database-url harvest.db --populate-comments``
- export: ``lockwatch --database-url harvest.db --export --output report.csv``

``GITHUB_TOKEN`` must be set for every mode. Tuning knobs are read from the
``LOCKWATCH_*`` environment variables documented on
:class:`lockwatch.harvest.HarvestConfig`.
"""

from __future__ import annotations

import argparse
import asyncio
import enum
import os
import typing as typ
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from lockwatch.github import GitHubConfigError, GitHubRestClient, GitHubRestConfig
from lockwatch.harvest import (
    HarvestConfig,
    HarvestConfigError,
    HarvestService,
    MinimumIntervalGate,
    PageWalker,
)
from lockwatch.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_exception,
    log_info,
    log_warning,
)
from lockwatch.storage import (
    HarvestPersistError,
    HarvestStore,
    create_storage_engine,
    init_storage,
)

logger = get_logger(__name__)

DEFAULT_OUTPUT = Path("commit_activity.csv")


class HarvestMode(enum.StrEnum):
    """Mode selected for the lifetime of the process."""

    DISCOVER = "discover"
    ENRICH_COMMENTS = "enrich-comments"
    EXPORT = "aggregate-and-export"


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the ``lockwatch`` command."""
    parser = argparse.ArgumentParser(
        prog="lockwatch",
        description="Harvest GitHub issues locked as too heated.",
    )
    parser.add_argument(
        "-d",
        "--database-url",
        required=True,
        help="SQLAlchemy URL or SQLite file path for the harvest store",
    )
    parser.add_argument(
        "-i",
        "--iterations",
        type=int,
        default=None,
        help="Number of random repository probes (required in discover mode)",
    )
    modes = parser.add_mutually_exclusive_group()
    modes.add_argument(
        "--populate-comments",
        action="store_true",
        help="Fetch comments for every stored issue",
    )
    modes.add_argument(
        "--export",
        action="store_true",
        help="Count commits around toxic comments and write the CSV report",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT,
        help=f"CSV report path for --export (default: {DEFAULT_OUTPUT})",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOCKWATCH_LOG_LEVEL", "INFO"),
        help="Log level (default: LOCKWATCH_LOG_LEVEL or INFO)",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse ``argv`` and attach the resolved :class:`HarvestMode`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.populate_comments:
        args.mode = HarvestMode.ENRICH_COMMENTS
    elif args.export:
        args.mode = HarvestMode.EXPORT
    else:
        args.mode = HarvestMode.DISCOVER
        if args.iterations is None:
            parser.error(
                "--iterations is required unless --populate-comments or "
                "--export is given"
            )
        if args.iterations < 0:
            parser.error("--iterations must be >= 0")
    return args


async def run_mode(
    args: argparse.Namespace,
    github_config: GitHubRestConfig,
    harvest_config: HarvestConfig,
) -> typ.Any:
    """Open the store and API client, run the selected mode, then clean up."""
    engine = create_storage_engine(args.database_url)
    client = GitHubRestClient(github_config)
    try:
        await init_storage(engine)
        store = HarvestStore(async_sessionmaker(engine, expire_on_commit=False))
        walker = PageWalker(
            client,
            retry=harvest_config.retry_policy,
            rate_limiter=MinimumIntervalGate(harvest_config.page_delay_s),
        )
        service = HarvestService(
            store, walker, base_url=client.base_url, config=harvest_config
        )
        match args.mode:
            case HarvestMode.ENRICH_COMMENTS:
                return await service.enrich_comments()
            case HarvestMode.EXPORT:
                return await service.aggregate_and_export(args.output)
            case _:
                return await service.discover(args.iterations)
    finally:
        await client.aclose()
        await engine.dispose()


def main(argv: list[str] | None = None) -> int:
    """Run one harvest mode and return the process exit code.

    Returns
    -------
    int
        0 on success, 1 when configuration is missing or invalid or when the
        store rejects a write.

    """
    args = parse_args(argv)

    normalized_level, invalid_level = configure_logging(args.log_level)
    if invalid_level:
        log_warning(
            logger,
            "Invalid log level %r, falling back to %s",
            args.log_level,
            normalized_level,
        )

    try:
        github_config = GitHubRestConfig.from_env()
        harvest_config = HarvestConfig.from_env()
    except (GitHubConfigError, HarvestConfigError) as exc:
        log_error(logger, "Configuration error: %s", exc)
        return 1

    log_info(logger, "Starting lockwatch in %s mode", args.mode)
    try:
        result = asyncio.run(run_mode(args, github_config, harvest_config))
    except (HarvestPersistError, SQLAlchemyError) as exc:
        log_exception(logger, f"Harvest store failure in {args.mode} mode", exc)
        return 1

    log_info(logger, "Finished %s: %s", args.mode, result)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
