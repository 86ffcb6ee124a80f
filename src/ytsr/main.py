#!/usr/bin/env python3
"""Command-line entry point for ytsr."""

import argparse
import asyncio
import json
import logging
import sys

from . import search
from .core.errors import InvalidQueryError, SearchError
from .core.models import Playlist, ResultType, SearchResults
from .core.settings import SearchSettings


def setup_logging(verbose: bool = False) -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
    )

    # Suppress noisy third-party loggers
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ytsr", description="Search YouTube anonymously.")
    parser.add_argument("query", help="search term, or a results URL with filters")
    parser.add_argument("-n", "--limit", type=int, default=None, help="maximum results")
    parser.add_argument(
        "-t",
        "--type",
        choices=[t.value for t in ResultType],
        default=ResultType.VIDEO.value,
    )
    parser.add_argument("--safe-search", action="store_true", default=None)
    parser.add_argument("--hl", help="interface language, e.g. en")
    parser.add_argument("--gl", help="region, e.g. US")
    parser.add_argument("--json", action="store_true", help="print results as JSON")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def format_results(results: SearchResults) -> str:
    """Render results as one line per item."""
    lines = []
    for item in results.items:
        if isinstance(item, Playlist):
            owner = item.owner.name if item.owner else "-"
            lines.append(f"{item.name} [{item.length} videos] ({owner}) {item.url}")
        else:
            author = item.author.name if item.author else "-"
            extra = "LIVE" if item.is_live else item.duration
            lines.append(f"{item.name} [{extra}] ({author}) {item.url}")
    lines.append(f"-- {len(results.items)} shown, ~{results.results} estimated")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    settings = SearchSettings.load()
    try:
        results = asyncio.run(
            search(
                args.query,
                limit=args.limit,
                safe_search=args.safe_search,
                type=args.type,
                hl=args.hl,
                gl=args.gl,
                settings=settings,
            )
        )
    except InvalidQueryError as e:
        logging.error(f"Invalid query: {e}")
        return 2
    except SearchError as e:
        logging.error(f"Search failed: {e}")
        return 1

    if args.json:
        print(json.dumps(results.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(format_results(results))
    return 0


if __name__ == "__main__":
    sys.exit(main())
