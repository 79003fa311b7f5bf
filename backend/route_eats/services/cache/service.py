"""Cache for place details.

``CacheService`` is the async interface the API depends on;
``RedisCacheService`` keeps JSON-encoded values in Redis with a TTL.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import redis.asyncio as redis

from route_eats import config

logger = logging.getLogger(__name__)


class CacheService(ABC):
    """Async key/value cache with expiry."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Cached value for ``key``, None on a miss."""
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Store a JSON-serializable value; the service default TTL applies when none is given."""
        pass

    @abstractmethod
    async def invalidate(self, pattern: str) -> int:
        """Drop every key matching a glob pattern such as ``place:*``.

        Returns:
            How many keys were removed.
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        pass

    @staticmethod
    def build_place_key(place_id: str, language_code: str = "en") -> str:
        """Key for a place's details in one language.

        Example:
            >>> CacheService.build_place_key("ChIJN1t_tDeuEmsRUsoyG83frY4", "EN")
            'place:en:ChIJN1t_tDeuEmsRUsoyG83frY4'
        """
        return f"place:{language_code.lower()}:{place_id}"


class RedisCacheService(CacheService):
    """Place details kept in Redis as JSON strings.

    The client is created on first use, so building the service never
    opens a connection.
    """

    def __init__(self, redis_url: str | None = None, default_ttl: int | None = None) -> None:
        self._redis_url = redis_url or config.REDIS_URL
        self._ttl = default_ttl or config.PLACE_DETAILS_TTL_SECONDS
        self._client: redis.Redis | None = None

    @property
    def default_ttl(self) -> int:
        return self._ttl

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.Redis.from_url(self._redis_url, decode_responses=True)
            logger.info(f"[CACHE] Using Redis at {self._redis_url}")
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get(self, key: str) -> Any | None:
        raw = await self.client.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        await self.client.set(key, json.dumps(value), ex=ttl_seconds or self._ttl)

    async def invalidate(self, pattern: str) -> int:
        keys = [key async for key in self.client.scan_iter(match=pattern, count=100)]
        removed = await self.client.delete(*keys) if keys else 0
        logger.info(f"[CACHE] Invalidated {removed} keys matching {pattern}")
        return removed

    async def delete(self, key: str) -> bool:
        return await self.client.delete(key) == 1
