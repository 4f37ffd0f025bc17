"""In-memory embedding cache keyed by input text."""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from listing_dedup.embeddings.base import EmbeddingError, EmbeddingGateway, EmbeddingResult
from listing_dedup.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_ENTRIES: Final = 10_000


@dataclass(frozen=True)
class _CacheEntry:
    vector: list[float]
    provider: str
    model: str


class CachingEmbeddingGateway:
    """Memoize vectors per text so a description is embedded once per batch.

    The same description usually appears on one side of many concurrent
    pairs. A per-text lock makes concurrent requests for an uncached text
    wait for the first request instead of embedding it again. Failures are
    not cached; the next request for that text retries the provider.

    Behind a fallback chain, texts of one request can end up embedded by
    different models. Such a request raises EmbeddingError instead of
    returning vectors that can't be compared.

    The cache is meant to live for one run. It holds at most ``max_entries``
    vectors and evicts the oldest first.
    """

    def __init__(self, inner: EmbeddingGateway, *, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        self.inner = inner
        self.max_entries = max_entries
        self.hits = 0
        self.misses = 0
        self._entries: dict[str, _CacheEntry] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self._locks.clear()

    async def embed(self, texts: Sequence[str]) -> EmbeddingResult:
        if not texts:
            return await self.inner.embed(texts)

        entries = await asyncio.gather(*(self._entry_for(text) for text in texts))

        models = {(entry.provider, entry.model) for entry in entries}
        if len(models) > 1:
            raise EmbeddingError(
                "cached embeddings come from different models: "
                + ", ".join(f"{provider}/{model}" for provider, model in sorted(models))
            )

        return EmbeddingResult(
            embeddings=[entry.vector for entry in entries],
            provider=entries[0].provider,
            model=entries[0].model,
        )

    async def _entry_for(self, text: str) -> _CacheEntry:
        entry = self._entries.get(text)
        if entry is not None:
            self.hits += 1
            return entry

        lock = self._locks.setdefault(text, asyncio.Lock())
        try:
            async with lock:
                # Another task may have filled the entry while we waited
                entry = self._entries.get(text)
                if entry is not None:
                    self.hits += 1
                    return entry

                result = await self.inner.embed([text])
                if len(result.embeddings) != 1:
                    raise EmbeddingError(
                        f"expected 1 embedding from {result.provider}, "
                        f"got {len(result.embeddings)}"
                    )
                entry = _CacheEntry(result.embeddings[0], result.provider, result.model)
                self._store(text, entry)
        finally:
            if self._locks.get(text) is lock:
                del self._locks[text]

        logger.debug("embedding_cached", cache_size=len(self._entries), model=entry.model)
        return entry

    def _store(self, text: str, entry: _CacheEntry) -> None:
        self._entries[text] = entry
        self.misses += 1
        while len(self._entries) > self.max_entries:
            # Dicts keep insertion order, so the first key is the oldest
            del self._entries[next(iter(self._entries))]
