"""In-memory LRU cache with TTL expiration.

Process-level cache for provider lookups that rarely change, such as
geocoded addresses. Keys are normalized (whitespace collapsed, lowercased)
unless the cache is built with ``normalize_keys=False``.
"""

import time
from collections import OrderedDict
from typing import Generic, TypeVar

V = TypeVar("V")


class LRUCache(Generic[V]):
    """TTL-aware LRU cache."""

    def __init__(
        self,
        max_size: int = 100,
        ttl_seconds: int = 86400,
        normalize_keys: bool = True,
    ) -> None:
        self._cache: OrderedDict[str, tuple[float, V]] = OrderedDict()
        self._max_size = max_size
        self._ttl = ttl_seconds
        self._normalize_keys = normalize_keys

    @staticmethod
    def normalize_key(key: str) -> str:
        return " ".join(key.split()).lower()

    def _key(self, key: str) -> str:
        return self.normalize_key(key) if self._normalize_keys else key

    def get(self, key: str) -> V | None:
        key = self._key(key)
        if key not in self._cache:
            return None
        ts, value = self._cache[key]
        if time.monotonic() - ts > self._ttl:
            del self._cache[key]
            return None
        self._cache.move_to_end(key)
        return value

    def set(self, key: str, value: V) -> None:
        key = self._key(key)
        if key in self._cache:
            self._cache.move_to_end(key)
        self._cache[key] = (time.monotonic(), value)
        if len(self._cache) > self._max_size:
            self._cache.popitem(last=False)

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
