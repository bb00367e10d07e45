"""Memoization of text measurements.

The cache is an optimization only: placements are identical with or
without it. It is NOT safe for concurrent mutation. Give each thread or
worker process its own instance (or guard it with a lock), and never share
one across processes.
"""

from __future__ import annotations

__all__ = ["MeasurementCache", "make_cache_key"]

import hashlib
import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from spc_labels.config import DEFAULT_CONFIG, LabelPlacementConfig
from spc_labels.layout.constants import CACHE_EVICT_FRACTION

logger = logging.getLogger(__name__)

T = TypeVar("T")


def make_cache_key(
    text: str,
    font_size: float,
    line_height: float,
    panel_width: float,
    panel_height: float,
) -> str:
    """Stable hash of the exact measurement inputs."""
    parts = [text] + [
        repr(float(v)) for v in (font_size, line_height, panel_width, panel_height)
    ]
    raw = "\x1f".join(parts)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class _Entry:
    value: Any
    created: float


class MeasurementCache:
    """TTL and size bounded cache keyed by measurement inputs.

    Expired entries are dropped when they are looked up and in a full
    sweep every ``cleanup_interval`` operations. When the entry count
    exceeds ``max_entries`` the oldest quarter (by insertion) is evicted.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CONFIG.cache_ttl_seconds,
        max_entries: int = DEFAULT_CONFIG.cache_max_entries,
        cleanup_interval: int = DEFAULT_CONFIG.cache_cleanup_interval,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not ttl_seconds > 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        if max_entries < 1 or cleanup_interval < 1:
            raise ValueError(
                f"max_entries and cleanup_interval must be at least 1, "
                f"got {max_entries} and {cleanup_interval}"
            )
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.cleanup_interval = cleanup_interval
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._operations = 0
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    @classmethod
    def from_config(
        cls,
        config: LabelPlacementConfig = DEFAULT_CONFIG,
        clock: Callable[[], float] = time.monotonic,
    ) -> MeasurementCache:
        return cls(
            ttl_seconds=config.cache_ttl_seconds,
            max_entries=config.cache_max_entries,
            cleanup_interval=config.cache_cleanup_interval,
            clock=clock,
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not self._expired(entry, self._clock())

    def _expired(self, entry: _Entry, now: float) -> bool:
        return now - entry.created > self.ttl_seconds

    def get_or_compute(self, key: str, compute: Callable[[], T]) -> T:
        """Return the cached value for *key*, computing it on a miss.

        Exceptions from *compute* propagate and nothing is stored.
        """
        self._operations += 1
        now = self._clock()
        if self._operations % self.cleanup_interval == 0:
            self.purge_expired(now)

        entry = self._entries.get(key)
        if entry is not None:
            if not self._expired(entry, now):
                self.hits += 1
                return entry.value
            self._discard(key)

        self.misses += 1
        value = compute()
        self._store(key, value, now)
        return value

    def _discard(self, key: str) -> None:
        self._entries.pop(key, None)

    def _store(self, key: str, value: Any, now: float) -> None:
        try:
            self._entries[key] = _Entry(value=value, created=now)
            if len(self._entries) > self.max_entries:
                self._evict_oldest()
        except Exception:
            logger.debug("Measurement cache store failed, bypassing", exc_info=True)

    def _evict_oldest(self) -> None:
        # dicts keep insertion order and entries are never updated in
        # place, so the first keys are the oldest.
        n = max(1, math.ceil(len(self._entries) * CACHE_EVICT_FRACTION))
        for key in list(self._entries)[:n]:
            del self._entries[key]
        self.evictions += n
        logger.debug("Evicted %d measurement cache entries", n)

    def purge_expired(self, now: float | None = None) -> int:
        """Remove every expired entry; return how many were removed."""
        if now is None:
            now = self._clock()
        expired = [k for k, e in self._entries.items() if self._expired(e, now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()
        self._operations = 0
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def stats(self) -> dict[str, float]:
        lookups = self.hits + self.misses
        return {
            "size": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": self.hits / lookups if lookups else 0.0,
        }
