"""
Cache-aside access to an optional cache backend.

The accessor is the only place that talks to a CacheStrategy. It treats
"no cache configured" and "cache configured but failing" the same way:
reads report a miss and writes are dropped, so callers always fall
through to the database.
"""

import asyncio
import logging
from typing import Optional, Set

from hop_service.cache.strategies import CacheStrategy
from hop_service.exceptions import CacheUnavailableError

logger = logging.getLogger(__name__)


class CacheAsideAccessor:
    """
    Best-effort fast path in front of the link store.

    - get(): cache lookup bounded by ``timeout``; any failure is a miss
    - populate(): fire-and-forget write, never awaited by the request
    - drain(): wait for in-flight writes (shutdown and tests)
    """

    def __init__(self, cache: Optional[CacheStrategy] = None, timeout: float = 0.5):
        self.cache = cache
        self.timeout = timeout
        self._pending: Set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return self.cache is not None

    @property
    def pending(self) -> int:
        """Number of cache writes still in flight"""
        return len(self._pending)

    async def get(self, key: str) -> Optional[str]:
        """
        Look up a cached URL.

        Returns:
            The cached URL, or None on miss, absent cache, error or timeout
        """
        if self.cache is None:
            return None

        try:
            return await asyncio.wait_for(self.cache.get(key), timeout=self.timeout)
        except (CacheUnavailableError, asyncio.TimeoutError) as e:
            logger.warning("Cache read for %s failed, falling back to store: %s", key, str(e) or "timeout")
            return None

    def populate(self, key: str, url: str) -> Optional[asyncio.Task]:
        """
        Schedule ``key -> url`` to be written to the cache.

        Must be called from a running event loop. Returns immediately;
        the write runs on its own and its failure is only logged.

        Returns:
            The scheduled task, or None when no cache is configured
        """
        if self.cache is None:
            return None

        task = asyncio.get_running_loop().create_task(self._write(key, url))
        # Keep a strong reference until the task is done
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _write(self, key: str, url: str) -> None:
        try:
            await asyncio.wait_for(self.cache.set(key, url), timeout=self.timeout)
        except (CacheUnavailableError, asyncio.TimeoutError) as e:
            logger.warning("Cache write for %s dropped: %s", key, str(e) or "timeout")
        except Exception:
            # Nobody awaits this task, so this is the last place to see the error
            logger.exception("Unexpected error while caching %s", key)
        else:
            logger.debug("Cached %s", key)

    async def drain(self) -> None:
        """Wait until every scheduled cache write has finished"""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self) -> None:
        """Finish in-flight writes and release the backend"""
        await self.drain()
        if self.cache is not None:
            await self.cache.close()
