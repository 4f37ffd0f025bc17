"""Duplicate scoring, pairwise matching and batch deduplication."""

import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from listing_dedup.filters.deduplication import Deduplicator  # noqa: F401
    from listing_dedup.filters.matcher import ListingMatcher  # noqa: F401
    from listing_dedup.filters.scoring import MatchScore, calculate_match_score  # noqa: F401

__all__ = [
    "Deduplicator",
    "ListingMatcher",
    "MatchScore",
    "calculate_match_score",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "Deduplicator": (".deduplication", "Deduplicator"),
    "ListingMatcher": (".matcher", "ListingMatcher"),
    "MatchScore": (".scoring", "MatchScore"),
    "calculate_match_score": (".scoring", "calculate_match_score"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr = _LAZY_IMPORTS[name]
        mod = importlib.import_module(module_path, __name__)
        val = getattr(mod, attr)
        globals()[name] = val  # Cache so __getattr__ is only called once
        return val
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
