"""Pure scoring functions for listing duplicate matching."""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Final

from listing_dedup.models import ListingRecord, MatchConfidence
from listing_dedup.utils.text import token_set_similarity

# Signal weights (maximum points each signal can contribute)
WEIGHT_NEIGHBORHOOD: Final = 15
WEIGHT_PRICE: Final = 25
WEIGHT_AREA: Final = 20
WEIGHT_ROOMS: Final = 15
WEIGHT_TITLE: Final = 15
WEIGHT_DESCRIPTION: Final = 10

# Partial credit for near-but-not-close numeric matches
PARTIAL_PRICE_POINTS: Final = 10
PARTIAL_AREA_POINTS: Final = 10

# Relative price difference tiers
PRICE_FULL_TOLERANCE: Final = 0.05
PRICE_PARTIAL_TOLERANCE: Final = 0.15

# Absolute area difference tiers (square metres)
AREA_FULL_TOLERANCE_SQM: Final = 2.0
AREA_PARTIAL_TOLERANCE_SQM: Final = 5.0

# Token-set similarity above which short text fields count as the same
LEXICAL_MATCH_THRESHOLD: Final = 0.8

# Cosine similarity above which descriptions count as the same
SEMANTIC_MATCH_THRESHOLD: Final = 0.85

REASON_DIFFERENT_CITY: Final = "different city"


@dataclass(frozen=True)
class Signal:
    """One evaluated field comparison.

    Signals that could not be evaluated (data missing on either side) are
    never constructed, so their weight stays out of the denominator.
    """

    name: str
    points: int
    weight: int
    reason: str | None = None


@dataclass
class MatchScore:
    """Weighted accumulation of signals between two listings."""

    signals: list[Signal] = field(default_factory=list)
    vetoed: bool = False

    def add(self, signal: Signal | None) -> None:
        if signal is not None:
            self.signals.append(signal)

    @property
    def points(self) -> int:
        return sum(s.points for s in self.signals)

    @property
    def weight(self) -> int:
        return sum(s.weight for s in self.signals)

    @property
    def ratio(self) -> float:
        """Accumulated points over accumulated weight, 0.0 when nothing was weighed."""
        if self.vetoed or self.weight == 0:
            return 0.0
        return self.points / self.weight

    @property
    def total(self) -> int:
        """Final 0-100 score, rounding halves up."""
        if self.vetoed or self.weight == 0:
            return 0
        return math.floor(100 * self.points / self.weight + 0.5)

    @property
    def reasons(self) -> tuple[str, ...]:
        if self.vetoed:
            return (REASON_DIFFERENT_CITY,)
        return tuple(s.reason for s in self.signals if s.reason)

    @property
    def confidence(self) -> MatchConfidence:
        return MatchConfidence.from_score(self.total)

    def to_dict(self) -> dict[str, object]:
        """Convert to dict for logging."""
        return {
            **{s.name: f"{s.points}/{s.weight}" for s in self.signals},
            "vetoed": self.vetoed,
            "total": self.total,
            "confidence": self.confidence.value,
        }


def city_key(city: str) -> str:
    """Comparison key for a city name."""
    return city.strip().lower()


def cities_match(city1: str, city2: str) -> bool:
    """Case-insensitive exact city comparison."""
    return city_key(city1) == city_key(city2)


def relative_price_difference(price1: float, price2: float) -> float:
    """|p1 - p2| / max(p1, p2), or 0.0 when both are zero."""
    highest = max(price1, price2)
    if highest <= 0:
        return 0.0
    return abs(price1 - price2) / highest


def price_points(price1: float, price2: float) -> int:
    """Tiered price closeness: full under 5%, partial under 15%, else nothing."""
    diff = relative_price_difference(price1, price2)
    if diff < PRICE_FULL_TOLERANCE:
        return WEIGHT_PRICE
    if diff < PRICE_PARTIAL_TOLERANCE:
        return PARTIAL_PRICE_POINTS
    return 0


def area_points(area1: float, area2: float) -> int:
    """Tiered area closeness: full within 2 sqm, partial within 5 sqm."""
    diff = abs(area1 - area2)
    if diff <= AREA_FULL_TOLERANCE_SQM:
        return WEIGHT_AREA
    if diff <= AREA_PARTIAL_TOLERANCE_SQM:
        return PARTIAL_AREA_POINTS
    return 0


def rooms_points(rooms1: int, rooms2: int) -> int:
    return WEIGHT_ROOMS if rooms1 == rooms2 else 0


def cosine_similarity(u: Sequence[float], v: Sequence[float]) -> float:
    """Cosine similarity of two vectors.

    Returns 0.0 for zero-norm vectors or vectors of different lengths.
    """
    if len(u) != len(v) or not u:
        return 0.0
    dot = sum(x * y for x, y in zip(u, v, strict=True))
    norm = math.sqrt(sum(x * x for x in u)) * math.sqrt(sum(y * y for y in v))
    if norm == 0:
        return 0.0
    return dot / norm


def neighborhood_signal(a: ListingRecord, b: ListingRecord) -> Signal | None:
    hood_a = a.location.neighborhood
    hood_b = b.location.neighborhood
    if not hood_a or not hood_b:
        return None
    if token_set_similarity(hood_a, hood_b) > LEXICAL_MATCH_THRESHOLD:
        return Signal("neighborhood", WEIGHT_NEIGHBORHOOD, WEIGHT_NEIGHBORHOOD, "same neighborhood")
    return Signal("neighborhood", 0, WEIGHT_NEIGHBORHOOD)


def price_signal(a: ListingRecord, b: ListingRecord) -> Signal:
    points = price_points(a.price, b.price)
    reason = None
    if points == WEIGHT_PRICE:
        reason = "price within 5%"
    elif points > 0:
        reason = "price within 15%"
    return Signal("price", points, WEIGHT_PRICE, reason)


def area_signal(a: ListingRecord, b: ListingRecord) -> Signal | None:
    if a.area_sqm is None or b.area_sqm is None:
        return None
    points = area_points(a.area_sqm, b.area_sqm)
    reason = None
    if points == WEIGHT_AREA:
        reason = "same area (±2 sqm)"
    elif points > 0:
        reason = "similar area (±5 sqm)"
    return Signal("area", points, WEIGHT_AREA, reason)


def rooms_signal(a: ListingRecord, b: ListingRecord) -> Signal | None:
    if a.rooms is None or b.rooms is None:
        return None
    points = rooms_points(a.rooms, b.rooms)
    return Signal("rooms", points, WEIGHT_ROOMS, "same number of rooms" if points else None)


def title_signal(a: ListingRecord, b: ListingRecord) -> Signal:
    if token_set_similarity(a.title, b.title) > LEXICAL_MATCH_THRESHOLD:
        return Signal("title", WEIGHT_TITLE, WEIGHT_TITLE, "similar title")
    return Signal("title", 0, WEIGHT_TITLE)


def description_signal(similarity: float) -> Signal:
    """Semantic description signal from a cosine similarity already computed."""
    if similarity > SEMANTIC_MATCH_THRESHOLD:
        return Signal(
            "description", WEIGHT_DESCRIPTION, WEIGHT_DESCRIPTION, "very similar description"
        )
    return Signal("description", 0, WEIGHT_DESCRIPTION)


def calculate_match_score(a: ListingRecord, b: ListingRecord) -> MatchScore:
    """Score the cheap (lexical and numeric) signals between two listings.

    A city mismatch vetoes the pair outright and no other signal is evaluated.

    Args:
        a: Listing being checked.
        b: Candidate listing.

    Returns:
        MatchScore with every evaluated cheap signal.
    """
    score = MatchScore()

    # Gate: city must match
    if not cities_match(a.location.city, b.location.city):
        score.vetoed = True
        return score

    score.add(neighborhood_signal(a, b))
    score.add(price_signal(a, b))
    score.add(area_signal(a, b))
    score.add(rooms_signal(a, b))
    score.add(title_signal(a, b))
    return score
