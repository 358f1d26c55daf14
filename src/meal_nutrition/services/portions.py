"""Portion text interpretation."""

import re

_COUNT_RE = re.compile(r"(?:^|\s)(x?\s*\d+|\d+\s*x)(?:\b|$)")
_SIZE_WORDS = (
    (re.compile(r"\blarge\b", re.IGNORECASE), 1.3),
    (re.compile(r"\bmedium\b", re.IGNORECASE), 1.0),
    (re.compile(r"\bsmall\b", re.IGNORECASE), 0.8),
)
_MAX_COUNT = 10


def portion_multiplier(portion_text: str | None) -> float:
    """Translate portion text into a serving multiplier.

    An explicit count between 1 and 9 ("2", "3x", "x 2") wins over size words;
    anything unrecognized is a single serving.
    """
    if not portion_text:
        return 1.0
    match = _COUNT_RE.search(portion_text.lower())
    if match:
        digits = re.sub(r"\D", "", match.group(0))
        count = int(digits) if digits else 0
        if 0 < count < _MAX_COUNT:
            return float(count)
    for pattern, multiplier in _SIZE_WORDS:
        if pattern.search(portion_text):
            return multiplier
    return 1.0
