"""Embedding gateway contract shared by all providers."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict


class EmbeddingError(Exception):
    """Raised when an embedding provider cannot return usable vectors."""


class EmbeddingResult(BaseModel):
    """Vectors for a list of input texts, in input order."""

    model_config = ConfigDict(frozen=True)

    embeddings: list[list[float]]
    provider: str
    model: str


@runtime_checkable
class EmbeddingGateway(Protocol):
    """Anything that turns texts into dense vectors."""

    async def embed(self, texts: Sequence[str]) -> EmbeddingResult:
        """Embed texts, one vector per input, or raise EmbeddingError."""
        ...


def validate_embeddings(
    texts: Sequence[str], embeddings: list[list[float]], *, provider: str
) -> list[list[float]]:
    """Check a provider returned one non-empty vector per text, all the same size.

    Raises:
        EmbeddingError: If the vectors are missing, empty or ragged.
    """
    if len(embeddings) != len(texts):
        raise EmbeddingError(
            f"{provider} returned {len(embeddings)} embeddings for {len(texts)} texts"
        )
    if any(not vector for vector in embeddings):
        raise EmbeddingError(f"{provider} returned an empty embedding")
    if len({len(vector) for vector in embeddings}) > 1:
        raise EmbeddingError(f"{provider} returned embeddings of different dimensions")
    return embeddings
