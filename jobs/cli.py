#!/usr/bin/env python3
"""
CLI for running curation jobs.

Usage:
    python -m jobs.cli list
    python -m jobs.cli run add-category-to-documents
    python -m jobs.cli run purge-crawled-documents --dry-run
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime, timezone

from core.config import ConfigurationError, configure_logging, get_settings
from core.logging import logging_run
from jobs.registry import JOB_REGISTRY, get_job
from jobs.shared import JobContext, PipelineReport

logger = logging.getLogger(__name__)


async def run_job(name: str, dry_run: bool = False) -> PipelineReport:
    """Run one job with clients built from the environment."""
    job = get_job(name)
    settings = get_settings()

    async with JobContext.from_settings(settings, dry_run=dry_run) as ctx:
        if job.needs_index:
            ctx.require_index()
        return await job.run(ctx)


def cmd_list(args):
    """List available jobs."""
    width = max(len(name) for name in JOB_REGISTRY)
    for job in JOB_REGISTRY.values():
        print(f"{job.name:<{width}}  {job.description}")


def cmd_run(args):
    """Run a job and print its report as JSON."""
    configure_logging()
    run_id = f"{args.job}-{datetime.now(timezone.utc):%Y%m%dT%H%M%S}"
    with logging_run(run_id):
        try:
            report = asyncio.run(run_job(args.job, dry_run=args.dry_run))
        except ConfigurationError as e:
            logger.error(f"{args.job} could not start: {e}")
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(2)
        except Exception:
            logger.exception(f"{args.job} failed")
            raise

    print(json.dumps(report.to_dict(), indent=2))
    if report.failed:
        sys.exit(1)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Search index curation jobs")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List jobs")
    list_parser.set_defaults(func=cmd_list)

    run_parser = subparsers.add_parser("run", help="Run a job")
    run_parser.add_argument("job", choices=list(JOB_REGISTRY.keys()), help="Job name")
    run_parser.add_argument(
        "--dry-run", action="store_true",
        help="Log what would be deleted instead of deleting (purge jobs)",
    )
    run_parser.set_defaults(func=cmd_run)

    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
