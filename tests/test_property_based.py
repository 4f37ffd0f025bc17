"""Property-based tests using Hypothesis.

Tests invariants of the core algorithms: lexical similarity, numeric tiers
and the city veto. These discover edge cases that example-based tests miss.
"""

import asyncio

from hypothesis import assume, given
from hypothesis import strategies as st

from listing_dedup.filters.deduplication import Deduplicator
from listing_dedup.filters.matcher import ListingMatcher
from listing_dedup.filters.scoring import (
    WEIGHT_PRICE,
    area_points,
    calculate_match_score,
    cities_match,
    cosine_similarity,
    price_points,
    relative_price_difference,
)
from listing_dedup.models import ListingLocation, ListingRecord, MatchConfidence
from listing_dedup.utils.text import normalize_text, token_set_similarity

# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

prices = st.floats(min_value=1, max_value=5_000_000, allow_nan=False, allow_infinity=False)
areas = st.floats(min_value=1, max_value=1_000, allow_nan=False, allow_infinity=False)
rooms = st.integers(min_value=1, max_value=12)
cities = st.sampled_from(["Bucharest", "Cluj-Napoca", "Iasi", "Timisoara", "Brasov"])
short_text = st.text(max_size=40)
vectors = st.lists(
    st.integers(min_value=-100, max_value=100).map(float),
    min_size=1,
    max_size=8,
)


@st.composite
def listings(draw: st.DrawFn, listing_id: str = "a", city: str | None = None) -> ListingRecord:
    return ListingRecord(
        id=listing_id,
        title=draw(short_text),
        description="",
        price=draw(prices),
        location=ListingLocation(city=city or draw(cities)),
        area_sqm=draw(st.none() | areas),
        rooms=draw(st.none() | rooms),
    )


# ---------------------------------------------------------------------------
# Lexical similarity
# ---------------------------------------------------------------------------


class TestTokenSetSimilarityProperties:
    @given(short_text, short_text)
    def test_symmetry(self, s1: str, s2: str) -> None:
        assert token_set_similarity(s1, s2) == token_set_similarity(s2, s1)

    @given(short_text, short_text)
    def test_range(self, s1: str, s2: str) -> None:
        assert 0.0 <= token_set_similarity(s1, s2) <= 1.0

    @given(short_text)
    def test_identity_is_one_unless_empty(self, s: str) -> None:
        expected = 1.0 if normalize_text(s) else 0.0
        assert token_set_similarity(s, s) == expected


# ---------------------------------------------------------------------------
# Numeric tiers
# ---------------------------------------------------------------------------


class TestPricePointsProperties:
    @given(prices)
    def test_exact_match_is_max(self, price: float) -> None:
        assert price_points(price, price) == WEIGHT_PRICE

    @given(prices, prices)
    def test_symmetry(self, a: float, b: float) -> None:
        assert price_points(a, b) == price_points(b, a)

    @given(prices, prices, st.floats(min_value=0, max_value=1))
    def test_monotonic_in_difference(self, b: float, a: float, shrink: float) -> None:
        """Moving a towards b never lowers the price contribution."""
        closer = b + (a - b) * shrink
        assume(relative_price_difference(closer, b) <= relative_price_difference(a, b))
        assert price_points(closer, b) >= price_points(a, b)


class TestAreaPointsProperties:
    @given(areas, areas)
    def test_symmetry(self, a: float, b: float) -> None:
        assert area_points(a, b) == area_points(b, a)


class TestCosineSimilarityProperties:
    @given(vectors, vectors)
    def test_range(self, u: list[float], v: list[float]) -> None:
        similarity = cosine_similarity(u, v)
        assert -1.0 - 1e-9 <= similarity <= 1.0 + 1e-9

    @given(vectors, vectors)
    def test_symmetry(self, u: list[float], v: list[float]) -> None:
        assert cosine_similarity(u, v) == cosine_similarity(v, u)


# ---------------------------------------------------------------------------
# City veto and pair invariants
# ---------------------------------------------------------------------------


class TestCityVetoProperties:
    @given(listings(), cities)
    def test_city_veto_is_absolute(self, a: ListingRecord, other_city: str) -> None:
        assume(not cities_match(a.location.city, other_city))
        # Every other field identical
        b = a.model_copy(update={"id": "b", "location": ListingLocation(city=other_city)})
        result = asyncio.run(ListingMatcher().compare(a, b))
        assert result.score == 0
        assert result.confidence == MatchConfidence.LOW
        assert result.reasons == ("different city",)

    @given(listings("a"), listings("b"))
    def test_score_in_range(self, a: ListingRecord, b: ListingRecord) -> None:
        score = calculate_match_score(a, b)
        assert 0 <= score.total <= 100
        assert score.points <= score.weight


class TestFindDuplicatesProperties:
    @given(listings("x"), st.lists(listings("p"), max_size=5))
    def test_never_matches_self(self, listing: ListingRecord, others: list[ListingRecord]) -> None:
        pool = [listing, *(o.model_copy(update={"id": f"p{i}"}) for i, o in enumerate(others))]
        matches = asyncio.run(Deduplicator().find_duplicates(listing, pool))
        assert all(m.matched_listing_id != listing.id for m in matches)
        scores = [m.score for m in matches]
        assert scores == sorted(scores, reverse=True)
