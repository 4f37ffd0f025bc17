"""Embedding gateway contract and provider adapters."""

from listing_dedup.embeddings.base import (
    EmbeddingError,
    EmbeddingGateway,
    EmbeddingResult,
)
from listing_dedup.embeddings.cache import CachingEmbeddingGateway
from listing_dedup.embeddings.factory import build_embedding_gateway
from listing_dedup.embeddings.fallback import FallbackEmbeddingGateway
from listing_dedup.embeddings.ollama import OllamaEmbeddingClient
from listing_dedup.embeddings.openai_client import OpenAIEmbeddingClient

__all__ = [
    "CachingEmbeddingGateway",
    "EmbeddingError",
    "EmbeddingGateway",
    "EmbeddingResult",
    "FallbackEmbeddingGateway",
    "OllamaEmbeddingClient",
    "OpenAIEmbeddingClient",
    "build_embedding_gateway",
]
