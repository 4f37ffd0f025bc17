"""Build the configured embedding gateway."""

from listing_dedup.config import Settings
from listing_dedup.embeddings.base import EmbeddingGateway
from listing_dedup.embeddings.cache import CachingEmbeddingGateway
from listing_dedup.embeddings.fallback import FallbackEmbeddingGateway
from listing_dedup.embeddings.ollama import OllamaEmbeddingClient
from listing_dedup.embeddings.openai_client import OpenAIEmbeddingClient
from listing_dedup.logging import get_logger

logger = get_logger(__name__)


def build_embedding_gateway(settings: Settings) -> EmbeddingGateway | None:
    """Build the embedding gateway described by settings.

    Ollama is the default primary provider. When an OpenAI key is set, OpenAI
    backs it up as a fallback (or serves as the primary when configured so).

    Returns:
        The gateway, or None when semantic matching is disabled or no
        provider is usable.
    """
    if not settings.enable_semantic_matching:
        return None

    timeout = settings.embedding_timeout_seconds
    gateway: EmbeddingGateway

    if settings.embedding_provider == "openai":
        if not settings.has_openai:
            logger.warning("openai_embedding_provider_without_api_key")
            return None
        gateway = OpenAIEmbeddingClient(
            api_key=settings.openai_api_key.get_secret_value(),
            base_url=settings.openai_base_url,
            model=settings.embedding_model,
            timeout=timeout,
        )
    else:
        gateway = OllamaEmbeddingClient(
            base_url=settings.ollama_url,
            model=settings.embedding_model,
            timeout=timeout,
        )
        if settings.has_openai:
            gateway = FallbackEmbeddingGateway(
                gateway,
                OpenAIEmbeddingClient(
                    api_key=settings.openai_api_key.get_secret_value(),
                    base_url=settings.openai_base_url,
                    model=settings.fallback_embedding_model,
                    timeout=timeout,
                ),
            )

    if settings.cache_embeddings:
        gateway = CachingEmbeddingGateway(gateway)

    logger.debug(
        "embedding_gateway_built",
        provider=settings.embedding_provider,
        model=settings.embedding_model,
        fallback=settings.has_openai and settings.embedding_provider == "ollama",
        cached=settings.cache_embeddings,
    )
    return gateway
