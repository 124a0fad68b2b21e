"""
FastAPI dependencies for dependency injection.

This module provides the process-wide cache accessor and key generator
that are injected into services and routes.

Pattern: Dependency Injection
- Loose coupling between components
- Easy to test (override with app.dependency_overrides)
- Flexible (swap implementations via config)
"""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from hop_service.cache.accessor import CacheAsideAccessor
from hop_service.cache.factory import CacheFactory, CacheBackend
from hop_service.config import settings
from hop_service.database.connection import get_db
from hop_service.services.key_generator import KeyGenerator, SecureRandomKeyGenerator
from hop_service.services.link_service import LinkService

logger = logging.getLogger(__name__)

_cache_accessor: Optional[CacheAsideAccessor] = None


async def init_cache_accessor() -> CacheAsideAccessor:
    """
    Build the cache backend and the accessor wrapping it (startup).

    An unusable backend yields an accessor without cache, never an error.
    """
    global _cache_accessor
    try:
        backend = CacheBackend(settings.cache_backend)
    except ValueError:
        logger.warning("Unknown cache backend %r, continuing without cache", settings.cache_backend)
        cache = None
    else:
        cache = await CacheFactory.create(backend)
    _cache_accessor = CacheAsideAccessor(cache, timeout=settings.cache_timeout)
    return _cache_accessor


async def close_cache_accessor() -> None:
    """Drain pending cache writes and close the backend (shutdown)"""
    global _cache_accessor
    if _cache_accessor is not None:
        await _cache_accessor.close()
        _cache_accessor = None
    CacheFactory.clear_instance()


def get_cache_accessor() -> CacheAsideAccessor:
    """
    Get the cache accessor (singleton).

    Before startup has run, an accessor without cache is used so that
    every lookup falls through to the database.
    """
    global _cache_accessor
    if _cache_accessor is None:
        _cache_accessor = CacheAsideAccessor(None, timeout=settings.cache_timeout)
    return _cache_accessor


@lru_cache()
def get_key_generator() -> KeyGenerator:
    """
    Get key generator instance (singleton).

    @lru_cache ensures this is called only once.
    """
    return SecureRandomKeyGenerator(length=settings.key_length)


def get_link_service(
    db: Session = Depends(get_db),
    cache: CacheAsideAccessor = Depends(get_cache_accessor),
    key_generator: KeyGenerator = Depends(get_key_generator),
) -> LinkService:
    """
    Get LinkService with all dependencies injected.

    - Controller depends on service
    - Service depends on infrastructure (db, cache, key generator)
    """
    return LinkService(
        db=db,
        cache=cache,
        key_generator=key_generator,
        max_attempts=settings.max_key_attempts,
    )
