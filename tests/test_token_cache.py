"""Tests for the courier token lookaside cache."""

from __future__ import annotations

import asyncio

from redis.exceptions import ConnectionError as RedisConnectionError

from utils.token_cache import TokenCache


class FakeRedis:
    """In-memory stand-in for redis.asyncio.Redis."""

    def __init__(self, fail: bool = False):
        self.store = {}
        self.ttls = {}
        self.fail = fail

    async def get(self, key):
        if self.fail:
            raise RedisConnectionError("connection refused")
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self.fail:
            raise RedisConnectionError("connection refused")
        self.store[key] = value.encode("utf-8")
        self.ttls[key] = ex

    async def delete(self, key):
        if self.fail:
            raise RedisConnectionError("connection refused")
        self.store.pop(key, None)
        self.ttls.pop(key, None)


class TokenIssuer:
    def __init__(self, token="token-1"):
        self.calls = 0
        self.token = token

    async def __call__(self):
        self.calls += 1
        return self.token


class TestTokenCache:
    """Tests for cache hits, misses and backend failures."""

    def test_key_format(self) -> None:
        assert TokenCache.build_key("Shiprocket", 42) == "channel:token:shiprocket:42"

    def test_miss_generates_and_stores(self) -> None:
        redis_client = FakeRedis()
        issuer = TokenIssuer()
        cache = TokenCache(redis_client)

        token = asyncio.run(cache.get_or_create("shiprocket", 42, issuer))

        assert token == "token-1"
        assert issuer.calls == 1
        assert redis_client.store["channel:token:shiprocket:42"] == b"token-1"
        assert redis_client.ttls["channel:token:shiprocket:42"] == 86400

    def test_hit_skips_generation(self) -> None:
        redis_client = FakeRedis()
        issuer = TokenIssuer()
        cache = TokenCache(redis_client)

        async def fetch_twice():
            first = await cache.get_or_create("shiprocket", 42, issuer)
            second = await cache.get_or_create("shiprocket", 42, issuer)
            return first, second

        assert asyncio.run(fetch_twice()) == ("token-1", "token-1")
        assert issuer.calls == 1

    def test_default_ttl_for_other_sources(self) -> None:
        redis_client = FakeRedis()
        cache = TokenCache(redis_client)

        asyncio.run(cache.get_or_create("delhivery", 7, TokenIssuer()))

        assert redis_client.ttls["channel:token:delhivery:7"] == 3600

    def test_ttl_override_from_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("TOKEN_TTL_DELHIVERY", "120")
        redis_client = FakeRedis()
        cache = TokenCache(redis_client)

        asyncio.run(cache.get_or_create("delhivery", 7, TokenIssuer()))

        assert redis_client.ttls["channel:token:delhivery:7"] == 120

    def test_backend_failure_fails_open(self) -> None:
        issuer = TokenIssuer()
        cache = TokenCache(FakeRedis(fail=True))

        token = asyncio.run(cache.get_or_create("shiprocket", 42, issuer))

        assert token == "token-1"
        assert issuer.calls == 1

    def test_failed_generation_is_not_cached(self) -> None:
        redis_client = FakeRedis()
        cache = TokenCache(redis_client)

        token = asyncio.run(cache.get_or_create("shiprocket", 42, TokenIssuer(None)))

        assert token is None
        assert redis_client.store == {}

    def test_invalidate(self) -> None:
        redis_client = FakeRedis()
        cache = TokenCache(redis_client)

        async def create_and_invalidate():
            await cache.get_or_create("shiprocket", 42, TokenIssuer())
            await cache.invalidate("shiprocket", 42)

        asyncio.run(create_and_invalidate())

        assert redis_client.store == {}

    def test_invalidate_tolerates_backend_failure(self) -> None:
        asyncio.run(TokenCache(FakeRedis(fail=True)).invalidate("shiprocket", 42))
