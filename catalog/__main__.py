"""
Command-line access to the job catalog.

Usage:
    python -m catalog search --title Engineer --remote
    python -m catalog all --page 1
    python -m catalog ingest "React Developer" --location Berlin
    python -m catalog stats

The ingestion token is read from JOB_CATALOG_TOKEN unless --token is given.
"""

import argparse
import asyncio
import json
import os
import sys
from typing import Optional

from catalog.ingestion import StaticSessionProvider
from catalog.service import CatalogService
from exceptions import JobCatalogError
from observability.logging import setup_logging


def _print_page(service: CatalogService) -> None:
    snapshot = service.snapshot()
    page = snapshot.page
    print(f"Page {page.number + 1 if page.total_pages else 0} of {page.total_pages} "
          f"({page.total_elements} postings)")
    for posting in page.content:
        location = posting.location or ("Remote" if posting.is_remote else "n/a")
        skills, hidden = posting.skill_preview()
        extra = f" +{hidden} more" if hidden else ""
        print(f"  [{posting.source}] {posting.title} @ {posting.company} ({location})"
              f" {', '.join(skills)}{extra}")
    if snapshot.error:
        print(f"Error: {snapshot.error}", file=sys.stderr)


async def run_command(args: argparse.Namespace) -> int:
    session = StaticSessionProvider(args.token or os.getenv("JOB_CATALOG_TOKEN"))
    service = CatalogService.from_env(session)
    try:
        if args.command == "search":
            state = await service.search({
                "title": args.title,
                "company": args.company,
                "location": args.location,
                "minSalary": args.min_salary,
                "maxSalary": args.max_salary,
                "isRemote": args.remote,
                "source": args.source,
                "page": args.page,
                "size": args.size,
                "sortBy": args.sort_by,
                "sortDir": args.sort_dir,
            })
            _print_page(service)
            return 0 if state.status == "succeeded" else 1

        if args.command == "all":
            state = await service.list_all(args.page, args.size)
            _print_page(service)
            return 0 if state.status == "succeeded" else 1

        if args.command == "ingest":
            outcome = await service.ingest({
                "jobTitle": args.job_title,
                "location": args.location,
                "maxResults": args.max_results,
            })
            if outcome is None:
                print("Nothing submitted: job title is required", file=sys.stderr)
                return 1
            print(outcome.message)
            if not outcome.accepted:
                return 1
            if args.wait:
                await service.ingestion.wait_for_refresh()
                _print_page(service)
            return 0

        if args.command == "stats":
            try:
                stats = await service.backend.get_stats()
            except JobCatalogError as e:
                print(f"Error: {e.message}", file=sys.stderr)
                return 1
            print(json.dumps(stats.model_dump(), indent=2))
            return 0
    finally:
        await service.aclose()
    return 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="catalog", description="Query and refresh the job catalog")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Search postings with filters")
    search.add_argument("--title")
    search.add_argument("--company")
    search.add_argument("--location")
    search.add_argument("--min-salary")
    search.add_argument("--max-salary")
    search.add_argument("--remote", action="store_true", default=None, help="Remote postings only")
    search.add_argument("--source", help="jsearch or adzuna")
    search.add_argument("--page", type=int, default=0)
    search.add_argument("--size", type=int)
    search.add_argument("--sort-by")
    search.add_argument("--sort-dir", choices=["asc", "desc"])

    list_all = sub.add_parser("all", help="List all postings, newest first")
    list_all.add_argument("--page", type=int, default=0)
    list_all.add_argument("--size", type=int)

    ingest = sub.add_parser("ingest", help="Fetch new postings from external providers")
    ingest.add_argument("job_title")
    ingest.add_argument("--location")
    ingest.add_argument("--max-results", type=int)
    ingest.add_argument("--token", help="Bearer token (defaults to JOB_CATALOG_TOKEN)")
    ingest.add_argument("--wait", action="store_true", help="Wait for the follow-up refresh and print it")

    sub.add_parser("stats", help="Show posting counts per source")
    return parser


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    if not hasattr(args, "token"):
        args.token = None
    setup_logging()
    return asyncio.run(run_command(args))


if __name__ == "__main__":
    sys.exit(main())
