"""Tests for building the configured embedding gateway."""

from listing_dedup.config import Settings
from listing_dedup.embeddings.cache import CachingEmbeddingGateway
from listing_dedup.embeddings.factory import build_embedding_gateway
from listing_dedup.embeddings.fallback import FallbackEmbeddingGateway
from listing_dedup.embeddings.ollama import OllamaEmbeddingClient
from listing_dedup.embeddings.openai_client import OpenAIEmbeddingClient


def test_disabled_returns_none() -> None:
    assert build_embedding_gateway(Settings(enable_semantic_matching=False)) is None


def test_default_is_cached_ollama() -> None:
    gateway = build_embedding_gateway(Settings())
    assert isinstance(gateway, CachingEmbeddingGateway)
    assert isinstance(gateway.inner, OllamaEmbeddingClient)
    assert gateway.inner.model == "nomic-embed-text"


def test_uncached_ollama() -> None:
    gateway = build_embedding_gateway(
        Settings(
            cache_embeddings=False,
            ollama_url="http://gpu-box:11434/",
            embedding_timeout_seconds=7,
        )
    )
    assert isinstance(gateway, OllamaEmbeddingClient)
    assert gateway.base_url == "http://gpu-box:11434"
    assert gateway.timeout == 7


def test_openai_key_adds_fallback() -> None:
    gateway = build_embedding_gateway(Settings(openai_api_key="sk-test", cache_embeddings=False))
    assert isinstance(gateway, FallbackEmbeddingGateway)
    assert isinstance(gateway.primary, OllamaEmbeddingClient)
    assert isinstance(gateway.fallback, OpenAIEmbeddingClient)
    assert gateway.fallback.model == "text-embedding-3-small"


def test_openai_primary() -> None:
    gateway = build_embedding_gateway(
        Settings(
            embedding_provider="openai",
            embedding_model="text-embedding-3-large",
            openai_api_key="sk-test",
            cache_embeddings=False,
        )
    )
    assert isinstance(gateway, OpenAIEmbeddingClient)
    assert gateway.model == "text-embedding-3-large"


def test_openai_primary_without_key_returns_none() -> None:
    assert build_embedding_gateway(Settings(embedding_provider="openai")) is None
