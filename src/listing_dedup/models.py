"""Pydantic models for listings and duplicate-match results."""

from enum import StrEnum
from typing import Any, Final, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Confidence tier boundaries on the 0-100 match score
HIGH_CONFIDENCE_SCORE: Final = 80
MEDIUM_CONFIDENCE_SCORE: Final = 60

# Ingestion and downstream collaborators speak camelCase JSON
_MODEL_CONFIG: Final = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


class MatchConfidence(StrEnum):
    """Confidence level of a duplicate match."""

    HIGH = "high"  # >= 80
    MEDIUM = "medium"  # 60-79
    LOW = "low"  # < 60

    @classmethod
    def from_score(cls, score: int) -> Self:
        """Bucket a 0-100 match score into a confidence tier."""
        if score >= HIGH_CONFIDENCE_SCORE:
            return cls.HIGH
        if score >= MEDIUM_CONFIDENCE_SCORE:
            return cls.MEDIUM
        return cls.LOW


class ListingLocation(BaseModel):
    """Where a listing is, as reported by its source platform."""

    model_config = _MODEL_CONFIG

    city: str
    neighborhood: str | None = None

    @field_validator("city")
    @classmethod
    def normalize_city(cls, v: str) -> str:
        """Trim surrounding whitespace and reject blank cities."""
        v = v.strip()
        if not v:
            raise ValueError("city must not be blank")
        return v

    @field_validator("neighborhood")
    @classmethod
    def blank_neighborhood_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()


class ListingRecord(BaseModel):
    """A normalized listing snapshot used for duplicate comparison."""

    model_config = _MODEL_CONFIG

    id: str = Field(min_length=1)
    title: str = ""
    description: str = ""
    price: float = Field(gt=0)
    currency: str = "EUR"
    location: ListingLocation
    area_sqm: float | None = Field(default=None, gt=0)
    rooms: int | None = Field(default=None, gt=0)
    images: tuple[str, ...] = ()  # Reserved, not used by scoring
    external_id: str | None = None
    source_id: str | None = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def none_text_is_empty(cls, v: Any) -> Any:
        """Scrapers send null for missing free text."""
        return "" if v is None else v

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def identity_key(self) -> tuple[str, str] | None:
        """Origin platform identity, or None unless both parts are present."""
        if self.source_id and self.external_id:
            return (self.source_id, self.external_id)
        return None


class MatchResult(BaseModel):
    """Duplicate-match verdict for an ordered pair of listings."""

    model_config = _MODEL_CONFIG

    listing_id: str
    matched_listing_id: str
    score: int = Field(ge=0, le=100)
    reasons: tuple[str, ...] = ()
    confidence: MatchConfidence


class BatchResult(BaseModel):
    """Outcome of comparing a batch of new listings against a candidate pool."""

    model_config = _MODEL_CONFIG

    processed: int = Field(ge=0)
    duplicates_found: int = Field(ge=0, description="High-confidence matches only")
    matches: tuple[MatchResult, ...] = ()
    duration_ms: float = Field(default=0.0, ge=0)
