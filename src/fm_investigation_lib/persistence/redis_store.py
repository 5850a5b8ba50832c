"""Redis backend for the key-value port, with Sentinel support.

Supports both deployment shapes the services run in:
- Standalone Redis (development/self-hosted)
- Redis Sentinel (HA/Kubernetes), failover handled by the Sentinel client
"""

import logging
from typing import Optional

from redis.asyncio import Redis
from redis.asyncio.sentinel import Sentinel

from fm_investigation_lib.config import RedisSettings
from fm_investigation_lib.persistence.kv_store import KeyValueStore
from fm_investigation_lib.utils import storage_connect_retry

logger = logging.getLogger(__name__)


@storage_connect_retry
async def _verify_connection(client: Redis) -> None:
    await client.ping()


async def connect_redis(
    settings: Optional[RedisSettings] = None,
    health_check_interval: int = 30,
) -> Redis:
    """Create and verify a Redis client from ``settings``.

    Args:
        settings: Connection settings (defaults read from REDIS_* env vars)
        health_check_interval: Connection health check interval in seconds

    Returns:
        Async Redis client with ``decode_responses`` enabled

    Raises:
        ValueError: If Sentinel mode is configured without sentinel hosts
        redis.exceptions.ConnectionError: If the server is unreachable after retries
    """
    settings = settings or RedisSettings()

    if settings.mode == "sentinel":
        sentinels = settings.sentinels
        if not sentinels:
            raise ValueError(
                "REDIS_SENTINEL_HOSTS is required for Sentinel mode "
                f"(got {settings.sentinel_hosts!r})"
            )

        logger.info(
            f"Connecting to Redis Sentinel: master={settings.master_set}, sentinels={sentinels}"
        )
        sentinel = Sentinel(
            sentinels,
            sentinel_kwargs={"password": settings.password} if settings.password else {},
            socket_keepalive=True,
            health_check_interval=health_check_interval,
        )
        client = sentinel.master_for(
            settings.master_set,
            db=settings.db,
            password=settings.password,
            decode_responses=True,
            socket_keepalive=True,
            health_check_interval=health_check_interval,
        )
    else:
        logger.info(f"Connecting to standalone Redis: {settings.host}:{settings.port}/{settings.db}")
        client = Redis(
            host=settings.host,
            port=settings.port,
            db=settings.db,
            password=settings.password,
            decode_responses=True,
            socket_keepalive=True,
            health_check_interval=health_check_interval,
            socket_connect_timeout=5,
        )

    await _verify_connection(client)
    logger.info(f"Redis connection verified ({settings.mode})")
    return client


class RedisKeyValueStore(KeyValueStore):
    """Key-value port backed by a ``redis.asyncio`` client.

    Usage:
        store = await RedisKeyValueStore.connect()
        await store.set("skanyxx-investigation-history", "[]")
    """

    def __init__(self, client: Redis):
        self.client = client

    @classmethod
    async def connect(cls, settings: Optional[RedisSettings] = None) -> "RedisKeyValueStore":
        client = await connect_redis(settings)
        return cls(client)

    async def get(self, key: str) -> Optional[str]:
        value = await self.client.get(key)
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        await self.client.set(key, value)

    async def delete(self, key: str) -> None:
        await self.client.delete(key)

    async def close(self) -> None:
        await self.client.aclose()
