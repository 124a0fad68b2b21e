"""
Cache module for the link shortener.
Implements Strategy Pattern for flexible cache backends and a
cache-aside accessor that tolerates a missing or broken cache.
"""

from .strategies import CacheStrategy, RedisCache, InMemoryCache
from .factory import CacheFactory, CacheBackend
from .accessor import CacheAsideAccessor

__all__ = [
    "CacheStrategy",
    "RedisCache",
    "InMemoryCache",
    "CacheFactory",
    "CacheBackend",
    "CacheAsideAccessor",
]
