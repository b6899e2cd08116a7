from typing import Awaitable, Callable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from context_manager.context import context_user_data
from logger import logger

from settings import REDIS_URL, get_token_ttl


TOKEN_KEY_FORMAT = "channel:token:{source}:{account_id}"


def get_redis_client() -> redis.Redis:
    return redis.from_url(REDIS_URL)


class TokenCache:
    """
    Lookaside cache for courier API tokens.

    Check the cache, on a miss generate a token and store it with the TTL of
    the source. Cache backend failures fail open: the token is still
    generated, only caching is skipped. Concurrent misses for the same key
    are not coalesced, so token issuers must tolerate duplicate generation.
    """

    def __init__(self, redis_client):
        # redis.asyncio.Redis (or any client exposing async get / set(ex=))
        self.redis_client = redis_client

    @staticmethod
    def build_key(source: str, account_id) -> str:
        return TOKEN_KEY_FORMAT.format(source=source.lower(), account_id=account_id)

    async def get_or_create(
        self,
        source: str,
        account_id,
        generate_token: Callable[[], Awaitable[Optional[str]]],
    ) -> Optional[str]:
        key = self.build_key(source, account_id)

        cached = await self._get(key)
        if cached:
            return cached

        token = await generate_token()

        if token:
            await self._set(key, token, get_token_ttl(source))

        return token

    async def invalidate(self, source: str, account_id):
        key = self.build_key(source, account_id)
        try:
            await self.redis_client.delete(key)
        except RedisError as e:
            logger.warning(
                extra=context_user_data.get(),
                msg="Token cache delete failed for {}: {}".format(key, str(e)),
            )

    async def _get(self, key: str) -> Optional[str]:
        try:
            value = await self.redis_client.get(key)
        except RedisError as e:
            logger.warning(
                extra=context_user_data.get(),
                msg="Token cache read failed for {}: {}".format(key, str(e)),
            )
            return None

        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def _set(self, key: str, token: str, ttl: int):
        try:
            await self.redis_client.set(key, token, ex=ttl)
        except RedisError as e:
            logger.warning(
                extra=context_user_data.get(),
                msg="Token cache write failed for {}: {}".format(key, str(e)),
            )
