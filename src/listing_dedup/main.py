"""Command-line entry point: deduplicate listing files."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from listing_dedup.config import Settings
from listing_dedup.filters import Deduplicator
from listing_dedup.logging import configure_logging, get_logger
from listing_dedup.models import BatchResult, ListingRecord
from listing_dedup.parsing import parse_listings

logger = get_logger(__name__)


def load_listings(path: Path) -> list[ListingRecord]:
    """Read a JSON array of listings, skipping invalid records.

    Raises:
        OSError: If the file can't be read.
        ValueError: If the file isn't a JSON array.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array of listings")
    return parse_listings(data)


async def run_deduplication(
    settings: Settings,
    new_listings: list[ListingRecord],
    candidate_pool: list[ListingRecord],
) -> BatchResult:
    """Run one batch deduplication with the configured matcher."""
    deduplicator = Deduplicator.from_settings(settings)
    return await deduplicator.batch_deduplicate(new_listings, candidate_pool)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Listing Dedup - find the same property listed on multiple platforms"
    )
    parser.add_argument("new", type=Path, help="JSON file with new listings")
    parser.add_argument(
        "pool",
        type=Path,
        nargs="?",
        default=None,
        help="JSON file with the candidate pool (default: compare new listings to each other)",
    )
    parser.add_argument(
        "--no-semantic",
        action="store_true",
        help="Skip embedding-based description matching",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit JSON log lines instead of console output",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug-level logging for troubleshooting",
    )
    args = parser.parse_args(argv)

    configure_logging(
        json_output=args.json_logs, level=logging.DEBUG if args.debug else logging.INFO
    )

    try:
        settings = Settings()
    except Exception as e:
        logger.error("failed_to_load_settings", error=str(e))
        print(f"Error: Failed to load settings. {e}", file=sys.stderr)
        sys.exit(1)

    if args.no_semantic:
        settings = settings.model_copy(update={"enable_semantic_matching": False})

    try:
        new_listings = load_listings(args.new)
        candidate_pool = load_listings(args.pool) if args.pool else new_listings
    except (OSError, ValueError) as e:
        logger.error("failed_to_load_listings", error=str(e))
        sys.exit(1)

    logger.info(
        "starting_listing_dedup",
        new_listings=len(new_listings),
        pool_size=len(candidate_pool),
        semantic=settings.enable_semantic_matching,
        provider=settings.embedding_provider,
    )

    result = asyncio.run(run_deduplication(settings, new_listings, candidate_pool))
    print(result.model_dump_json(by_alias=True, indent=2))


if __name__ == "__main__":
    main()
