"""Free-text normalization and lexical similarity."""

import re
from typing import Final

_NON_WORD_PATTERN: Final = re.compile(r"[^\w\s]")
_WHITESPACE_PATTERN: Final = re.compile(r"\s+")


def normalize_text(text: str | None) -> str:
    """Lowercase, drop punctuation and collapse whitespace.

    Examples:
        "2-Room Apartment,  DOWNTOWN!" -> "2room apartment downtown"
    """
    if not text:
        return ""
    stripped = _NON_WORD_PATTERN.sub("", text.lower())
    return _WHITESPACE_PATTERN.sub(" ", stripped).strip()


def tokenize(text: str | None) -> frozenset[str]:
    """Normalized whitespace-separated token set."""
    return frozenset(normalize_text(text).split())


def token_set_similarity(text1: str | None, text2: str | None) -> float:
    """Jaccard similarity of the normalized token sets, in [0.0, 1.0].

    Empty input on either side yields 0.0, so two blank strings never count
    as a match.
    """
    tokens1 = tokenize(text1)
    tokens2 = tokenize(text2)
    if not tokens1 or not tokens2:
        return 0.0
    return len(tokens1 & tokens2) / len(tokens1 | tokens2)
