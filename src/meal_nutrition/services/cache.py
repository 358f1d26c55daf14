"""Result cache for computed nutrient profiles."""

import hashlib
import json
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

from meal_nutrition.domain.nutrition import NutrientProfile

DEFAULT_TTL_SECONDS = 60 * 60 * 12
DEFAULT_MAX_ENTRIES = 200


class ProfileCache(Protocol):
    """Cache interface for nutrient profiles keyed by request fingerprint."""

    def get(self, key: str) -> NutrientProfile | None:
        """Return a cached profile if present and not expired."""

    def set(self, key: str, value: NutrientProfile) -> None:
        """Store a profile under the fingerprint."""


@dataclass
class _CacheEntry:
    value: NutrientProfile
    stored_at: datetime


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class ResultCache(ProfileCache):
    """In-memory cache with a TTL and insertion-order eviction."""

    ttl_seconds: int = DEFAULT_TTL_SECONDS
    max_entries: int = DEFAULT_MAX_ENTRIES
    clock: Callable[[], datetime] = _utcnow
    _entries: dict[str, _CacheEntry] = field(
        default_factory=dict, init=False, repr=False
    )

    def get(self, key: str) -> NutrientProfile | None:
        """Return a cached profile unless it is older than the TTL."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() - entry.stored_at > timedelta(seconds=self.ttl_seconds):
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: NutrientProfile) -> None:
        """Store a profile, evicting the earliest inserted entry when full."""
        # Overwrites keep their original insertion slot.
        self._entries[key] = _CacheEntry(value=value, stored_at=self.clock())
        while len(self._entries) > self.max_entries:
            oldest = next(iter(self._entries))
            self._entries.pop(oldest, None)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


def request_fingerprint(
    description: str, photo_url: str | None, *, force_micros: bool = False
) -> str:
    """Return a deterministic cache key for an analysis request."""
    normalized = " ".join((description or "").split())
    payload = json.dumps(
        {
            "description": normalized,
            "photo_url": photo_url or None,
            "force_micros": force_micros,
        },
        sort_keys=True,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
