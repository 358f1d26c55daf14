"""Food name normalization, similarity and deduplication."""

import re

from meal_nutrition.domain.nutrition import CandidateItem

STOP_WORDS = ("combo", "meal", "with")
DUPLICATE_THRESHOLD = 0.8

_STOP_WORDS_RE = re.compile(r"\b(?:" + "|".join(STOP_WORDS) + r")\b")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")
_TOKEN_SPLIT_RE = re.compile(r"\W+")


def canonicalize(name: str | None) -> str:
    """Lowercase a food name and strip stop words and punctuation."""
    text = (name or "").lower()
    text = _STOP_WORDS_RE.sub("", text)
    text = _NON_ALNUM_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def tokenize(text: str) -> set[str]:
    """Split text into a set of lowercase word tokens."""
    return {token for token in _TOKEN_SPLIT_RE.split(text.lower()) if token}


def similarity(a: str, b: str) -> float:
    """Return token overlap divided by the larger token set size."""
    tokens_a = tokenize(a)
    tokens_b = tokenize(b)
    if not tokens_a or not tokens_b:
        return 0.0
    return len(tokens_a & tokens_b) / max(len(tokens_a), len(tokens_b))


def dedupe_items(items: list[CandidateItem]) -> list[CandidateItem]:
    """Drop items whose canonical name nearly matches an earlier kept item."""
    kept: list[CandidateItem] = []
    kept_names: list[str] = []
    for item in items:
        name = canonicalize(item.name)
        if any(
            similarity(name, other) > DUPLICATE_THRESHOLD for other in kept_names
        ):
            continue
        kept.append(item)
        kept_names.append(name)
    return kept
