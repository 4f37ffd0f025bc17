"""Candidate selection and batch duplicate detection."""

import asyncio
import time
from collections import defaultdict
from collections.abc import Sequence
from typing import Final, Self

from listing_dedup.config import Settings
from listing_dedup.embeddings import build_embedding_gateway
from listing_dedup.embeddings.base import EmbeddingGateway
from listing_dedup.filters.matcher import ListingMatcher
from listing_dedup.filters.scoring import city_key
from listing_dedup.logging import get_logger
from listing_dedup.models import BatchResult, ListingRecord, MatchConfidence, MatchResult

logger = get_logger(__name__)

# Minimum score for a candidate to be reported at all
DUPLICATE_SCORE_THRESHOLD: Final = 50

DEFAULT_MAX_CONCURRENT: Final = 8


def is_same_listing(a: ListingRecord, b: ListingRecord) -> bool:
    """Whether two records are the same listing rather than potential duplicates.

    True for the same record id, or the same external listing re-ingested
    from the same source platform.
    """
    if a.id == b.id:
        return True
    return a.identity_key is not None and a.identity_key == b.identity_key


def _bucket_by_city(pool: Sequence[ListingRecord]) -> dict[str, list[ListingRecord]]:
    """Group the pool by city, keeping pool order within each bucket.

    Pairs in different cities always score 0, so comparing only within a
    bucket never loses a reportable match.
    """
    buckets: dict[str, list[ListingRecord]] = defaultdict(list)
    for candidate in pool:
        buckets[city_key(candidate.location.city)].append(candidate)
    return buckets


class Deduplicator:
    """Find listings in a candidate pool that duplicate new listings."""

    def __init__(
        self,
        matcher: ListingMatcher | None = None,
        *,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
    ) -> None:
        """Initialize the deduplicator.

        Args:
            matcher: Pairwise matcher. Defaults to one without semantic matching.
            max_concurrent: Maximum pair comparisons in flight at once. This
                bounds concurrent embedding calls.
        """
        self.matcher = matcher or ListingMatcher()
        self.max_concurrent = max_concurrent

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        gateway: EmbeddingGateway | None = None,
    ) -> Self:
        """Build a deduplicator from settings.

        Args:
            settings: Application settings.
            gateway: Embedding gateway override. Built from settings when omitted.
        """
        if gateway is None:
            gateway = build_embedding_gateway(settings)
        matcher = ListingMatcher(gateway, embedding_timeout=settings.embedding_timeout_seconds)
        return cls(matcher, max_concurrent=settings.max_concurrent_comparisons)

    async def find_duplicates(
        self,
        listing: ListingRecord,
        candidate_pool: Sequence[ListingRecord],
    ) -> list[MatchResult]:
        """Find likely duplicates of one listing.

        Args:
            listing: The listing to check.
            candidate_pool: Known listings to compare against.

        Returns:
            Matches scoring at least 50, best first. Equal scores keep pool order.
        """
        semaphore = asyncio.Semaphore(self.max_concurrent)
        return await self._find_duplicates(listing, _bucket_by_city(candidate_pool), semaphore)

    async def batch_deduplicate(
        self,
        new_listings: Sequence[ListingRecord],
        candidate_pool: Sequence[ListingRecord],
    ) -> BatchResult:
        """Find duplicates for a batch of new listings against one pool.

        Args:
            new_listings: Listings from the current sync cycle.
            candidate_pool: Known listings to compare against.

        Returns:
            BatchResult with medium and high confidence matches, grouped by
            new listing in input order and ranked within each group.
        """
        started = time.perf_counter()
        semaphore = asyncio.Semaphore(self.max_concurrent)
        pool_by_city = _bucket_by_city(candidate_pool)

        per_listing = await asyncio.gather(
            *(self._find_duplicates(listing, pool_by_city, semaphore) for listing in new_listings)
        )

        matches = [
            match
            for listing_matches in per_listing
            for match in listing_matches
            if match.confidence != MatchConfidence.LOW
        ]
        duplicates_found = sum(1 for m in matches if m.confidence == MatchConfidence.HIGH)
        duration_ms = (time.perf_counter() - started) * 1000

        logger.info(
            "batch_deduplication_complete",
            processed=len(new_listings),
            pool_size=len(candidate_pool),
            matches=len(matches),
            duplicates_found=duplicates_found,
            duration_ms=round(duration_ms, 1),
        )

        return BatchResult(
            processed=len(new_listings),
            duplicates_found=duplicates_found,
            matches=tuple(matches),
            duration_ms=duration_ms,
        )

    async def _find_duplicates(
        self,
        listing: ListingRecord,
        pool_by_city: dict[str, list[ListingRecord]],
        semaphore: asyncio.Semaphore,
    ) -> list[MatchResult]:
        candidates = [
            candidate
            for candidate in pool_by_city.get(city_key(listing.location.city), [])
            if not is_same_listing(listing, candidate)
        ]

        async def compare_one(candidate: ListingRecord) -> MatchResult:
            async with semaphore:
                return await self.matcher.compare(listing, candidate)

        results = await asyncio.gather(*(compare_one(c) for c in candidates))

        # Sort only once every comparison is done; sort is stable so ties keep pool order
        matches = [r for r in results if r.score >= DUPLICATE_SCORE_THRESHOLD]
        matches.sort(key=lambda m: m.score, reverse=True)

        if matches:
            logger.info(
                "duplicates_found",
                listing=listing.id,
                candidates=len(candidates),
                matches=len(matches),
                best_score=matches[0].score,
            )

        return matches
