"""Session-scoped classification cache."""

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

from payee_ml.data_models import ClassificationResult

from .normalizer import normalize


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    size: int = 0


class ClassificationCache:
    """Normalized name -> result, with TTL expiry and oldest-first eviction.

    One instance per run/session; pass it to the classifier explicitly.
    Writes are at-most-once per key: the first stored result stays until it
    expires. All access happens on one event loop, so no locking is needed.
    """

    def __init__(
        self,
        ttl_seconds: float = 86400.0,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, ClassificationResult]] = (
            OrderedDict()
        )
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, name: str) -> ClassificationResult | None:
        key = normalize(name)
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None
        stored_at, result = entry
        if self._clock() - stored_at > self._ttl:
            del self._entries[key]
            self._misses += 1
            return None
        self._hits += 1
        return result

    def set_if_absent(self, name: str, result: ClassificationResult) -> bool:
        """Store ``result`` unless a live entry exists. Returns True if stored."""
        key = normalize(name)
        if not key:
            return False
        existing = self._entries.get(key)
        if existing is not None and self._clock() - existing[0] <= self._ttl:
            return False
        self._entries[key] = (self._clock(), result)
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)
        return True

    def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def stats(self) -> CacheStats:
        return CacheStats(hits=self._hits, misses=self._misses, size=len(self._entries))
