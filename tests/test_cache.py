"""
Tests for cache backends, the cache factory and the cache-aside accessor.
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from hop_service.cache import factory as cache_factory
from hop_service.cache.accessor import CacheAsideAccessor
from hop_service.cache.factory import CacheBackend, CacheFactory
from hop_service.cache.strategies import InMemoryCache, RedisCache
from hop_service.config import settings
from hop_service.dependencies import close_cache_accessor, init_cache_accessor
from hop_service.exceptions import CacheUnavailableError
from tests.fakes import FailingCache, SlowCache


@pytest.fixture(autouse=True)
def fresh_factory():
    CacheFactory.clear_instance()
    yield
    CacheFactory.clear_instance()


def fake_redis_client(ping=None):
    client = MagicMock()
    client.ping = ping or AsyncMock(return_value=True)
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.aclose = AsyncMock()
    return client


class TestRedisCache:
    """Test the Redis backend against a mocked client"""

    def test_get_returns_value(self):
        """Values come back as stored"""
        client = fake_redis_client()
        client.get = AsyncMock(return_value="https://example.com/")

        value = asyncio.run(RedisCache(client).get("AbCdEfG"))

        assert value == "https://example.com/"
        client.get.assert_awaited_once_with("AbCdEfG")

    def test_set_stores_without_expiry(self):
        """Entries are written without a TTL"""
        client = fake_redis_client()

        asyncio.run(RedisCache(client).set("AbCdEfG", "https://example.com/"))

        client.set.assert_awaited_once_with("AbCdEfG", "https://example.com/")

    @pytest.mark.parametrize("error", [
        RedisConnectionError("connection refused"),
        RedisTimeoutError("timed out"),
        OSError("network unreachable"),
    ])
    def test_errors_become_cache_unavailable(self, error):
        """Backend failures are reported as CacheUnavailableError"""
        client = fake_redis_client()
        client.get = AsyncMock(side_effect=error)
        client.set = AsyncMock(side_effect=error)
        cache = RedisCache(client)

        with pytest.raises(CacheUnavailableError):
            asyncio.run(cache.get("AbCdEfG"))
        with pytest.raises(CacheUnavailableError):
            asyncio.run(cache.set("AbCdEfG", "https://example.com/"))

    def test_close_releases_client(self):
        client = fake_redis_client()

        asyncio.run(RedisCache(client).close())

        client.aclose.assert_awaited_once()


class TestCacheFactory:
    """Test backend selection and startup failure policy"""

    def test_memory_backend(self):
        """Memory backend builds an in-process cache"""
        cache = asyncio.run(CacheFactory.create(CacheBackend.MEMORY))
        assert isinstance(cache, InMemoryCache)

    def test_none_backend(self):
        """The none backend means no cache at all"""
        assert asyncio.run(CacheFactory.create(CacheBackend.NONE)) is None

    def test_singleton(self):
        """The factory builds the backend once"""
        first = asyncio.run(CacheFactory.create(CacheBackend.MEMORY))
        second = asyncio.run(CacheFactory.create(CacheBackend.MEMORY))

        assert first is second
        assert CacheFactory.get_instance() is first

    def test_redis_backend_when_reachable(self, monkeypatch):
        """A successful ping yields a Redis cache"""
        client = fake_redis_client()
        monkeypatch.setattr(cache_factory.redis, "from_url", lambda *args, **kwargs: client)

        cache = asyncio.run(CacheFactory.create(CacheBackend.REDIS))

        assert isinstance(cache, RedisCache)
        client.ping.assert_awaited_once()

    def test_redis_backend_uses_bounded_timeouts(self, monkeypatch):
        """The Redis client is built with sub-second socket timeouts"""
        captured = {}

        def from_url(url, **kwargs):
            captured.update(kwargs)
            return fake_redis_client()

        monkeypatch.setattr(cache_factory.redis, "from_url", from_url)

        asyncio.run(CacheFactory.create(CacheBackend.REDIS))

        assert 0 < captured["socket_timeout"] < 1
        assert 0 < captured["socket_connect_timeout"] < 1

    def test_unreachable_redis_disables_cache(self, monkeypatch):
        """Startup continues without cache when Redis cannot be reached"""
        client = fake_redis_client(ping=AsyncMock(side_effect=RedisConnectionError("refused")))
        monkeypatch.setattr(cache_factory.redis, "from_url", lambda *args, **kwargs: client)

        cache = asyncio.run(CacheFactory.create(CacheBackend.REDIS))

        assert cache is None
        client.aclose.assert_awaited_once()

    @pytest.mark.parametrize("backend", ["valkey", "Redis", "memcached"])
    def test_unknown_backend_disables_cache(self, monkeypatch, backend):
        """A misconfigured backend name starts the service without cache"""
        monkeypatch.setattr(settings, "cache_backend", backend)

        accessor = asyncio.run(init_cache_accessor())
        try:
            assert accessor.enabled is False
            assert asyncio.run(accessor.get("AbCdEfG")) is None
        finally:
            asyncio.run(close_cache_accessor())

    def test_invalid_redis_url_disables_cache(self, monkeypatch):
        """A Redis URL that cannot be parsed starts the service without cache"""
        monkeypatch.setattr(settings, "cache_backend", "redis")
        monkeypatch.setattr(settings, "redis_url", "not-a-redis-url")

        accessor = asyncio.run(init_cache_accessor())
        try:
            assert accessor.enabled is False
        finally:
            asyncio.run(close_cache_accessor())


class TestCacheAsideAccessor:
    """Test that absent and failing caches look the same to callers"""

    def test_absent_cache(self):
        """No backend: reads miss, writes are not scheduled"""
        accessor = CacheAsideAccessor(None)

        async def scenario():
            return await accessor.get("AbCdEfG"), accessor.populate("AbCdEfG", "https://example.com/")

        value, task = asyncio.run(scenario())

        assert value is None
        assert task is None
        assert accessor.enabled is False

    def test_failing_cache_reads_as_miss(self):
        """A backend error is a miss, never an exception"""
        accessor = CacheAsideAccessor(FailingCache())

        assert asyncio.run(accessor.get("AbCdEfG")) is None

    def test_failing_cache_write_is_discarded(self):
        """A failed background write is logged and dropped"""
        cache = FailingCache()
        accessor = CacheAsideAccessor(cache)

        async def scenario():
            task = accessor.populate("AbCdEfG", "https://example.com/")
            await accessor.drain()
            return task

        task = asyncio.run(scenario())

        assert cache.set_calls == 1
        assert task.done()
        assert task.exception() is None

    def test_slow_cache_times_out(self):
        """Reads slower than the timeout count as a miss"""
        cache = SlowCache(delay=1.0)
        asyncio.run(InMemoryCache.set(cache, "AbCdEfG", "https://example.com/"))
        accessor = CacheAsideAccessor(cache, timeout=0.05)

        assert asyncio.run(accessor.get("AbCdEfG")) is None

    def test_slow_write_times_out(self):
        """Writes slower than the timeout are dropped"""
        cache = SlowCache(delay=1.0)
        accessor = CacheAsideAccessor(cache, timeout=0.05)

        async def scenario():
            accessor.populate("AbCdEfG", "https://example.com/")
            await accessor.drain()

        asyncio.run(scenario())

        assert len(cache) == 0
        assert accessor.pending == 0

    def test_populate_then_get(self):
        """A finished write is visible to reads"""
        accessor = CacheAsideAccessor(InMemoryCache())

        async def scenario():
            accessor.populate("AbCdEfG", "https://example.com/")
            await accessor.drain()
            return await accessor.get("AbCdEfG")

        assert asyncio.run(scenario()) == "https://example.com/"

    def test_close_drains_and_closes(self):
        """Closing waits for pending writes before releasing the backend"""
        cache = InMemoryCache()
        cache.close = AsyncMock()
        accessor = CacheAsideAccessor(cache)

        async def scenario():
            accessor.populate("AbCdEfG", "https://example.com/")
            await accessor.close()

        asyncio.run(scenario())

        assert asyncio.run(cache.get("AbCdEfG")) == "https://example.com/"
        cache.close.assert_awaited_once()
