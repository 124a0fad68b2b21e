"""
Cache strategies using Strategy Pattern.
Allows switching between different cache backends (Redis, In-Memory).

A missing cache is represented by ``None``, not by a strategy. See
``CacheAsideAccessor`` for how callers treat an absent or failing cache.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from redis.exceptions import RedisError

from hop_service.exceptions import CacheUnavailableError

logger = logging.getLogger(__name__)


class CacheStrategy(ABC):
    """
    Abstract base class for cache strategies.

    One fallible read/write pair. Backends raise CacheUnavailableError
    when they cannot serve a request; they never swallow errors
    themselves.

    All methods are async because cache operations involve I/O (network for Redis).
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Get value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found

        Raises:
            CacheUnavailableError: backend could not be reached
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Set value in cache. Entries never expire.

        Args:
            key: Cache key
            value: Value to cache

        Raises:
            CacheUnavailableError: backend could not be reached
        """
        pass

    async def close(self) -> None:
        """Release backend resources"""
        return None


class RedisCache(CacheStrategy):
    """
    Redis cache implementation on top of redis.asyncio.

    - Distributed caching (multiple servers can share cache)
    - Non-blocking I/O
    - Connect and command timeouts are set on the client by CacheFactory
    """

    def __init__(self, redis_client):
        """
        Initialize Redis cache.

        Args:
            redis_client: redis.asyncio.Redis instance (decode_responses=True)
        """
        self.redis = redis_client

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.redis.get(key)
        except (RedisError, OSError) as e:
            raise CacheUnavailableError(f"Redis get failed: {e}") from e

    async def set(self, key: str, value: str) -> None:
        try:
            await self.redis.set(key, value)
        except (RedisError, OSError) as e:
            raise CacheUnavailableError(f"Redis set failed: {e}") from e

    async def close(self) -> None:
        try:
            await self.redis.aclose()
        except (RedisError, OSError) as e:
            logger.warning("Error while closing Redis client: %s", e)


class InMemoryCache(CacheStrategy):
    """
    In-memory cache implementation using Python dict.

    Pros:
    - Very fast (no network overhead)
    - Simple (no external dependencies)
    - Good for development and testing

    Cons:
    - Not distributed (each server has its own cache)
    - Lost on restart

    Note: Async for interface consistency, but operations are instant.
    """

    def __init__(self):
        self._cache: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self._cache.get(key)

    async def set(self, key: str, value: str) -> None:
        self._cache[key] = value

    def __len__(self) -> int:
        return len(self._cache)
