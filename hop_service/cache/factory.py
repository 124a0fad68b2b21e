"""
Factory for creating cache instances.
Simple, clean factory with singleton caching.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from .strategies import CacheStrategy, RedisCache, InMemoryCache
from hop_service.config import settings

logger = logging.getLogger(__name__)


class CacheBackend(Enum):
    """Available cache backends"""
    REDIS = "redis"
    MEMORY = "memory"
    NONE = "none"


class CacheFactory:
    """
    Simple factory for creating cache instances.

    Uses Singleton Pattern - creates instance once, reuses it.
    Gets configuration from settings (not passed as parameters).

    A backend that cannot be built results in no cache at all (None):
    the service keeps running against the database only.
    """

    _instance: Optional[CacheStrategy] = None
    _initialized: bool = False

    @classmethod
    async def create(cls, backend: CacheBackend) -> Optional[CacheStrategy]:
        """
        Create or return cached cache instance.

        Args:
            backend: Type of cache backend (from enum)

        Returns:
            Singleton cache instance, or None when the cache is absent
        """
        if cls._initialized:
            return cls._instance

        if backend == CacheBackend.REDIS:
            cls._instance = await cls._connect_redis()

        elif backend == CacheBackend.MEMORY:
            cls._instance = InMemoryCache()
            logger.info("In-memory cache initialized")

        elif backend == CacheBackend.NONE:
            cls._instance = None
            logger.info("Cache disabled, serving from the database only")

        else:
            raise ValueError(f"Unknown cache backend: {backend}")

        cls._initialized = True
        return cls._instance

    @classmethod
    async def _connect_redis(cls) -> Optional[CacheStrategy]:
        try:
            redis_client = redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=settings.cache_timeout,
                socket_timeout=settings.cache_timeout,
            )
        except ValueError as e:
            logger.warning("Invalid Redis URL (%s), continuing without cache", e)
            return None

        try:
            # Test connection immediately
            await asyncio.wait_for(redis_client.ping(), timeout=settings.cache_timeout)
        except (RedisError, OSError, asyncio.TimeoutError) as e:
            logger.warning("Redis connection failed (%s), continuing without cache", e)
            await redis_client.aclose()
            return None

        logger.info("Redis cache initialized at %s", settings.redis_url)
        return RedisCache(redis_client)

    @classmethod
    def get_instance(cls) -> Optional[CacheStrategy]:
        """Return the cache built by create(), None if absent or not built yet"""
        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
        cls._initialized = False
