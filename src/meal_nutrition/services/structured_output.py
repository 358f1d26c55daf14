"""Decoding JSON embedded in free-form model output."""

import json
import re

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def decode_structured_output(text: str | None) -> object | None:
    """Extract a JSON value from model text.

    A fenced code block is tried first, then the span from the first "{" to
    the last "}". Returns None when neither parses.
    """
    if not text:
        return None
    fence = _FENCE_RE.search(text)
    if fence and fence.group(1):
        try:
            return json.loads(fence.group(1))
        except ValueError:
            pass
    raw = _OBJECT_RE.search(text)
    if raw:
        try:
            return json.loads(raw.group(0))
        except ValueError:
            return None
    return None


def decode_object(text: str | None) -> dict[str, object]:
    """Decode model text into a dict, or an empty dict when unparsable."""
    decoded = decode_structured_output(text)
    if isinstance(decoded, dict):
        return decoded
    return {}
