"""Primary/fallback embedding provider chain."""

from collections.abc import Sequence

from listing_dedup.embeddings.base import EmbeddingError, EmbeddingGateway, EmbeddingResult
from listing_dedup.logging import get_logger

logger = get_logger(__name__)


class FallbackEmbeddingGateway:
    """Try the primary provider, then the fallback if the primary fails."""

    def __init__(self, primary: EmbeddingGateway, fallback: EmbeddingGateway) -> None:
        self.primary = primary
        self.fallback = fallback

    async def embed(self, texts: Sequence[str]) -> EmbeddingResult:
        try:
            return await self.primary.embed(texts)
        except EmbeddingError as primary_error:
            logger.warning(
                "primary_embedding_provider_failed",
                provider=getattr(self.primary, "provider", type(self.primary).__name__),
                error=str(primary_error),
            )

        try:
            return await self.fallback.embed(texts)
        except EmbeddingError as e:
            raise EmbeddingError(f"all embedding providers failed: {e}") from e
