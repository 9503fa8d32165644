"""Redis-backed TTL store for revocation entries and single-use tokens."""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from redis import Redis

logger = logging.getLogger(__name__)


class RedisEphemeralStore:
    """Thin Redis wrapper implementing the ephemeral store contract.

    Command timeouts belong to the connection, not to callers: every command
    is bounded by ``socket_timeout``.
    """

    def __init__(
        self,
        redis_url: str | None = None,
        *,
        socket_timeout: float = 5.0,
        client: aioredis.Redis | None = None,
    ) -> None:
        if client is None and not redis_url:
            raise ValueError("redis_url or client is required")
        self.redis_url = redis_url
        self.client = client or aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )

    def verify_connection(self) -> None:
        """Assert Redis connectivity before serving requests."""
        if not self.redis_url:
            return
        # A short-lived synchronous client keeps the async client off the
        # temporary startup event loop.
        sync_client = Redis.from_url(self.redis_url, decode_responses=True)
        try:
            sync_client.ping()
        finally:
            sync_client.close()

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        await self.client.set(key, value, ex=max(1, int(ttl_seconds)))

    async def get(self, key: str) -> str | None:
        return await self.client.get(key)

    async def delete(self, key: str) -> None:
        await self.client.delete(key)

    async def get_and_delete(self, key: str) -> str | None:
        # GETDEL is atomic per key, so only one concurrent caller sees the value.
        return await self.client.getdel(key)

    async def close(self) -> None:
        await self.client.aclose()
        logger.info("Redis connection closed")
