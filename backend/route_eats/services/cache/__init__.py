"""Async cache for provider responses."""

from .service import CacheService, RedisCacheService

__all__ = ["CacheService", "RedisCacheService"]
