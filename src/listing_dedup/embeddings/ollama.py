"""Ollama embedding client (local models such as nomic-embed-text)."""

from collections.abc import Sequence
from typing import Final

import httpx
from pydantic import BaseModel, ValidationError

from listing_dedup.embeddings.base import EmbeddingError, EmbeddingResult, validate_embeddings
from listing_dedup.logging import get_logger

logger = get_logger(__name__)

DEFAULT_OLLAMA_URL: Final = "http://localhost:11434"
DEFAULT_OLLAMA_MODEL: Final = "nomic-embed-text"
_HEALTH_TIMEOUT: Final = 5.0


class _EmbeddingResponse(BaseModel):
    embedding: list[float]


class _TagsModel(BaseModel):
    name: str


class _TagsResponse(BaseModel):
    models: list[_TagsModel] = []


class OllamaEmbeddingClient:
    """Embed texts through an Ollama server's /api/embeddings endpoint.

    Ollama embeds one prompt per request, so a batch of texts costs one
    round trip per text.
    """

    provider: Final = "ollama"

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_OLLAMA_URL,
        model: str = DEFAULT_OLLAMA_MODEL,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Ollama server URL.
            model: Embedding model name.
            timeout: Per-request timeout in seconds.
            client: Optional shared HTTP client. When omitted, a client is
                opened per call.
        """
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._client = client

    async def embed(self, texts: Sequence[str]) -> EmbeddingResult:
        if self._client is not None:
            return await self._embed_with_client(self._client, texts)

        async with httpx.AsyncClient(timeout=self.timeout) as c:
            return await self._embed_with_client(c, texts)

    async def _embed_with_client(
        self, client: httpx.AsyncClient, texts: Sequence[str]
    ) -> EmbeddingResult:
        embeddings: list[list[float]] = []
        try:
            for text in texts:
                resp = await client.post(
                    f"{self.base_url}/api/embeddings",
                    json={"model": self.model, "prompt": text},
                    timeout=self.timeout,
                )
                if resp.status_code != 200:
                    raise EmbeddingError(f"ollama returned HTTP {resp.status_code}")
                body = _EmbeddingResponse.model_validate_json(resp.content)
                embeddings.append(body.embedding)
        except httpx.HTTPError as e:
            raise EmbeddingError(f"ollama request failed: {e!r}") from e
        except ValidationError as e:
            raise EmbeddingError("ollama returned a malformed embedding response") from e

        return EmbeddingResult(
            embeddings=validate_embeddings(texts, embeddings, provider=self.provider),
            provider=self.provider,
            model=self.model,
        )

    async def health_check(self) -> bool:
        """Whether the Ollama server answers at all."""
        try:
            async with httpx.AsyncClient(timeout=_HEALTH_TIMEOUT) as c:
                resp = await c.get(f"{self.base_url}/api/tags")
            return resp.status_code == 200
        except httpx.HTTPError:
            logger.warning("ollama_health_check_failed", base_url=self.base_url, exc_info=True)
            return False

    async def list_models(self) -> list[str]:
        """Names of the models pulled on the Ollama server, empty on failure."""
        try:
            async with httpx.AsyncClient(timeout=_HEALTH_TIMEOUT) as c:
                resp = await c.get(f"{self.base_url}/api/tags")
            if resp.status_code != 200:
                return []
            return [m.name for m in _TagsResponse.model_validate_json(resp.content).models]
        except (httpx.HTTPError, ValidationError):
            logger.warning("ollama_list_models_failed", base_url=self.base_url, exc_info=True)
            return []
