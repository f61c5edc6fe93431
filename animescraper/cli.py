"""Command line entry point for animescraper."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .asset_cache import AssetCache
from .catalog import CatalogClient
from .config import settings
from .errors import NetworkError, ParseError
from .models import ListingStatus
from .output import build_writer
from .pagination import PaginationController
from .transport import HttpTransport

logger = logging.getLogger("animescraper")


def _build_parser() -> argparse.ArgumentParser:
    # No prefix matching: "poster --output" must not resolve against "--output-mode"/"--output-path".
    parser = argparse.ArgumentParser(
        "animescraper",
        description="Browse the anime catalog from the terminal.",
        allow_abbrev=False,
    )
    parser.add_argument(
        "--output-mode",
        default="print",
        choices=["print", "txt", "json", "csv"],
        help="Output backend.",
    )
    parser.add_argument("--output-path", default=None, help="File path for txt/json/csv outputs.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level, e.g. INFO or DEBUG.")
    parser.add_argument("--proxy", default=None, help="HTTP(S) proxy for all requests.")

    commands = parser.add_subparsers(dest="command", required=True)

    listing = commands.add_parser("list", help="List trending titles or search results.")
    listing.add_argument("--query", default="", help="Search keyword; empty lists trending titles.")
    listing.add_argument("--page", type=int, default=1, help="1-based page number.")

    detail = commands.add_parser("detail", help="Show the detail record for a listing path.")
    detail.add_argument("path", help="Detail path as printed by 'list', e.g. /watch/foo.123")

    poster = commands.add_parser("poster", help="Download a poster image.")
    poster.add_argument("url", help="Image URL from a listing or detail record.")
    poster.add_argument("-o", "--output", required=True, help="Destination file.")
    return parser


async def _run_list(args: argparse.Namespace, client: CatalogClient) -> int:
    controller = PaginationController(client)
    if not await controller.set_query(args.query):
        print("[ERROR] Failed to fetch the listing. Check network connectivity.", file=sys.stderr)
        return 1
    if args.page != 1 and not await controller.go_to_page(args.page):
        if controller.status is ListingStatus.FAILED:
            print(f"[ERROR] Failed to fetch page {args.page}.", file=sys.stderr)
            return 1
        print(f"[ERROR] Page {args.page} is outside 1..{controller.state.total_pages}.", file=sys.stderr)
        return 2

    snapshot = controller.snapshot()
    if snapshot.status is ListingStatus.NO_RESULTS:
        print(f"No results found for {snapshot.active_query!r}.", file=sys.stderr)
        return 0

    build_writer(args.output_mode, args.output_path).write(snapshot.entries)
    pages = f"Page {snapshot.current_page} of {snapshot.total_pages}"
    if not snapshot.pagination_resolved:
        pages += " (page count unresolved)"
    print(pages, file=sys.stderr)
    return 0


async def _run_detail(args: argparse.Namespace, client: CatalogClient) -> int:
    try:
        record = await client.fetch_detail(args.path)
    except (NetworkError, ParseError) as exc:
        print(f"[ERROR] Failed to fetch details: {exc}", file=sys.stderr)
        return 1
    build_writer(args.output_mode, args.output_path).write([record])
    return 0


async def _run_poster(args: argparse.Namespace, transport: HttpTransport) -> int:
    async with AssetCache(transport) as cache:
        entry = await cache.resolve(args.url)
    if not entry.resolved:
        print(f"[ERROR] Could not download poster after {entry.attempt} attempts: {entry.error}", file=sys.stderr)
        return 1
    Path(args.output).write_bytes(entry.value or b"")
    print(f"Saved {len(entry.value or b'')} bytes to {args.output}", file=sys.stderr)
    return 0


async def _dispatch(args: argparse.Namespace) -> int:
    async with HttpTransport(settings, proxy=args.proxy) as transport:
        if args.command == "poster":
            return await _run_poster(args, transport)
        client = CatalogClient(transport, settings)
        if args.command == "detail":
            return await _run_detail(args, client)
        return await _run_list(args, client)


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return asyncio.run(_dispatch(args))


if __name__ == "__main__":
    sys.exit(main())
