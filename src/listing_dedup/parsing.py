"""Turn raw listing dicts from the ingestion pipeline into ListingRecords."""

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from listing_dedup.logging import get_logger
from listing_dedup.models import ListingRecord

logger = get_logger(__name__)


def parse_listings(raw_listings: Iterable[Mapping[str, Any]]) -> list[ListingRecord]:
    """Validate raw listings, skipping any that are malformed.

    A record missing its city, with a non-positive price, or otherwise
    invalid is logged and dropped so one bad record cannot abort a batch.

    Args:
        raw_listings: Listing dicts (camelCase or snake_case keys).

    Returns:
        Valid listings in input order.
    """
    listings: list[ListingRecord] = []
    skipped = 0
    for position, raw in enumerate(raw_listings):
        if not isinstance(raw, Mapping):
            skipped += 1
            logger.warning("invalid_listing_skipped", position=position, error="not an object")
            continue
        try:
            listings.append(ListingRecord.model_validate(raw))
        except ValidationError as e:
            skipped += 1
            logger.warning(
                "invalid_listing_skipped",
                position=position,
                listing_id=raw.get("id"),
                fields=sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()}),
            )

    if skipped:
        logger.info("listings_parsed", valid=len(listings), skipped=skipped)
    return listings
