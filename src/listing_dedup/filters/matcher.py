"""Pairwise listing matcher: cheap signals first, then a gated semantic signal."""

import asyncio
from typing import Final

from listing_dedup.embeddings.base import EmbeddingGateway
from listing_dedup.filters.scoring import (
    MatchScore,
    calculate_match_score,
    cosine_similarity,
    description_signal,
)
from listing_dedup.logging import get_logger
from listing_dedup.models import ListingRecord, MatchResult

logger = get_logger(__name__)

# Share of the accumulated weight the cheap signals must already earn before
# paying for an embedding call
SEMANTIC_GATE_RATIO: Final = 0.40

DEFAULT_EMBEDDING_TIMEOUT: Final = 30.0


def passes_semantic_gate(score: MatchScore, a: ListingRecord, b: ListingRecord) -> bool:
    """Whether a pair is promising enough to compare descriptions semantically."""
    if score.vetoed or score.weight == 0:
        return False
    if not a.description.strip() or not b.description.strip():
        return False
    return score.ratio >= SEMANTIC_GATE_RATIO


class ListingMatcher:
    """Compare two listings and report how likely they are the same property."""

    def __init__(
        self,
        gateway: EmbeddingGateway | None = None,
        *,
        embedding_timeout: float = DEFAULT_EMBEDDING_TIMEOUT,
    ) -> None:
        """Initialize the matcher.

        Args:
            gateway: Embedding gateway for description similarity. None skips
                the semantic signal entirely.
            embedding_timeout: Seconds to wait for one embedding call before
                treating the signal as unavailable.
        """
        self.gateway = gateway
        self.embedding_timeout = embedding_timeout

    async def compare(self, a: ListingRecord, b: ListingRecord) -> MatchResult:
        """Score listing ``b`` as a potential duplicate of listing ``a``.

        Never raises on embedding failures; the pair is then scored from the
        cheap signals alone.
        """
        score = calculate_match_score(a, b)

        if self.gateway is not None and passes_semantic_gate(score, a, b):
            similarity = await self._description_similarity(self.gateway, a, b)
            if similarity is not None:
                score.add(description_signal(similarity))

        result = MatchResult(
            listing_id=a.id,
            matched_listing_id=b.id,
            score=score.total,
            reasons=score.reasons,
            confidence=score.confidence,
        )

        if score.total >= 40:
            logger.debug(
                "match_score_calculated",
                listing=a.id,
                candidate=b.id,
                score=score.to_dict(),
            )

        return result

    async def _description_similarity(
        self, gateway: EmbeddingGateway, a: ListingRecord, b: ListingRecord
    ) -> float | None:
        """Cosine similarity of the two descriptions, or None if unavailable."""
        try:
            result = await asyncio.wait_for(
                gateway.embed([a.description, b.description]),
                timeout=self.embedding_timeout,
            )
        except TimeoutError:
            logger.warning(
                "semantic_similarity_unavailable",
                listing=a.id,
                candidate=b.id,
                reason="timeout",
                timeout=self.embedding_timeout,
            )
            return None
        except Exception as e:
            logger.warning(
                "semantic_similarity_unavailable",
                listing=a.id,
                candidate=b.id,
                reason=type(e).__name__,
                error=str(e),
            )
            return None

        if len(result.embeddings) < 2:
            logger.warning(
                "semantic_similarity_unavailable",
                listing=a.id,
                candidate=b.id,
                reason="missing_embeddings",
                returned=len(result.embeddings),
            )
            return None

        u, v = result.embeddings[0], result.embeddings[1]
        if not u or not v or len(u) != len(v):
            logger.warning(
                "semantic_similarity_unavailable",
                listing=a.id,
                candidate=b.id,
                reason="dimension_mismatch",
                dimensions=(len(u), len(v)),
            )
            return None

        return cosine_similarity(u, v)
