"""Application configuration using pydantic-settings."""

from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LISTING_DEDUP_",
        extra="ignore",
    )

    # Semantic description matching
    enable_semantic_matching: bool = Field(
        default=True,
        description="Compare descriptions with embeddings for promising pairs",
    )
    embedding_provider: Literal["ollama", "openai"] = Field(
        default="ollama",
        description="Primary embedding provider",
    )
    embedding_model: str = Field(
        default="nomic-embed-text",
        description="Model used by the primary embedding provider",
    )
    fallback_embedding_model: str = Field(
        default="text-embedding-3-small",
        description="OpenAI model used when the primary provider fails",
    )
    embedding_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=120,
        description="Timeout for a single embedding call",
    )
    cache_embeddings: bool = Field(
        default=True,
        description="Embed each distinct description only once per run",
    )

    # Ollama (local, primary by default)
    ollama_url: str = Field(default="http://localhost:11434")

    # OpenAI (optional, enables the fallback provider)
    openai_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="OpenAI API key for the embedding fallback",
    )
    openai_base_url: str = Field(default="https://api.openai.com")

    # Concurrency
    max_concurrent_comparisons: int = Field(
        default=8,
        ge=1,
        le=256,
        description="Pair comparisons in flight at once (bounds embedding fan-out)",
    )

    @property
    def has_openai(self) -> bool:
        return bool(self.openai_api_key.get_secret_value())
