"""Shared pytest fixtures."""

import os
import sys
from collections.abc import Callable, Sequence
from typing import Any

import pytest
from hypothesis import HealthCheck, settings

from listing_dedup.config import Settings
from listing_dedup.embeddings.base import EmbeddingError, EmbeddingResult
from listing_dedup.models import ListingLocation, ListingRecord


def pytest_configure(config: pytest.Config) -> None:
    """Force line-buffered stdout when piped."""
    if hasattr(sys.stdout, "reconfigure") and not sys.stdout.isatty():
        sys.stdout.reconfigure(line_buffering=True)
    if hasattr(sys.stderr, "reconfigure") and not sys.stderr.isatty():
        sys.stderr.reconfigure(line_buffering=True)


# Hypothesis settings profiles for different environments
settings.register_profile("fast", max_examples=10)
settings.register_profile(
    "ci",
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "fast"))


@pytest.fixture(autouse=True)
def _isolate_settings_from_dotenv(monkeypatch: pytest.MonkeyPatch) -> None:
    """Prevent the local .env file from leaking into test Settings instances."""
    monkeypatch.setattr(
        Settings,
        "model_config",
        {**Settings.model_config, "env_file": None},
    )


def build_listing(
    listing_id: str = "a",
    *,
    city: str = "Bucharest",
    neighborhood: str | None = None,
    price: float = 100_000,
    area_sqm: float | None = 50,
    rooms: int | None = 2,
    title: str = "Apartment 2 rooms downtown",
    description: str = "",
    external_id: str | None = None,
    source_id: str | None = None,
) -> ListingRecord:
    """Build a ListingRecord with sensible defaults for tests."""
    return ListingRecord(
        id=listing_id,
        title=title,
        description=description,
        price=price,
        currency="EUR",
        location=ListingLocation(city=city, neighborhood=neighborhood),
        area_sqm=area_sqm,
        rooms=rooms,
        external_id=external_id,
        source_id=source_id,
    )


@pytest.fixture
def make_listing() -> Callable[..., ListingRecord]:
    """Factory for listings with overridable fields."""
    return build_listing


class StubGateway:
    """Embedding gateway double returning canned vectors per text.

    Texts without a canned vector get a fixed default vector. Set ``error``
    to make every call fail.
    """

    provider = "stub"

    def __init__(
        self,
        vectors: dict[str, list[float]] | None = None,
        *,
        default: list[float] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.vectors = vectors or {}
        self.default = default or [1.0, 0.0, 0.0]
        self.error = error
        self.calls: list[list[str]] = []

    async def embed(self, texts: Sequence[str]) -> EmbeddingResult:
        self.calls.append(list(texts))
        if self.error is not None:
            raise self.error
        return EmbeddingResult(
            embeddings=[self.vectors.get(t, self.default) for t in texts],
            provider=self.provider,
            model="stub-embed",
        )


@pytest.fixture
def stub_gateway() -> Callable[..., StubGateway]:
    """Factory for StubGateway instances."""

    def _make(**kwargs: Any) -> StubGateway:
        return StubGateway(**kwargs)

    return _make


@pytest.fixture
def failing_gateway() -> StubGateway:
    return StubGateway(error=EmbeddingError("provider down"))
