"""OpenAI embeddings API client."""

from collections.abc import Sequence
from typing import Final

import httpx
from pydantic import BaseModel, ValidationError

from listing_dedup.embeddings.base import EmbeddingError, EmbeddingResult, validate_embeddings

DEFAULT_OPENAI_URL: Final = "https://api.openai.com"
DEFAULT_OPENAI_MODEL: Final = "text-embedding-3-small"


class _EmbeddingItem(BaseModel):
    index: int = 0
    embedding: list[float]


class _EmbeddingsResponse(BaseModel):
    data: list[_EmbeddingItem]


class OpenAIEmbeddingClient:
    """Embed texts in a single request to /v1/embeddings."""

    provider: Final = "openai"

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = DEFAULT_OPENAI_URL,
        model: str = DEFAULT_OPENAI_MODEL,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._client = client

    async def embed(self, texts: Sequence[str]) -> EmbeddingResult:
        if not texts:
            return EmbeddingResult(embeddings=[], provider=self.provider, model=self.model)

        if self._client is not None:
            return await self._embed_with_client(self._client, texts)

        async with httpx.AsyncClient(timeout=self.timeout) as c:
            return await self._embed_with_client(c, texts)

    async def _embed_with_client(
        self, client: httpx.AsyncClient, texts: Sequence[str]
    ) -> EmbeddingResult:
        try:
            resp = await client.post(
                f"{self.base_url}/v1/embeddings",
                json={"model": self.model, "input": list(texts)},
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise EmbeddingError(f"openai request failed: {e!r}") from e

        if resp.status_code != 200:
            raise EmbeddingError(f"openai returned HTTP {resp.status_code}")

        try:
            body = _EmbeddingsResponse.model_validate_json(resp.content)
        except ValidationError as e:
            raise EmbeddingError("openai returned a malformed embedding response") from e

        # The API documents input order but tags each item with its index
        embeddings = [item.embedding for item in sorted(body.data, key=lambda i: i.index)]

        return EmbeddingResult(
            embeddings=validate_embeddings(texts, embeddings, provider=self.provider),
            provider=self.provider,
            model=self.model,
        )
