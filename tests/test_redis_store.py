# =============================================================================
# Unit Tests: Redis key-value backend
# =============================================================================
#
# Uses AsyncMock in place of redis.asyncio clients; no Redis server needed.
# =============================================================================

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from fm_investigation_lib.config import RedisSettings
from fm_investigation_lib.models import Investigation
from fm_investigation_lib.persistence import RedisKeyValueStore, connect_redis
from fm_investigation_lib.store import InvestigationStore


def _run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


class TestRedisKeyValueStore:
    def test_get_set_delete_delegate_to_client(self):
        client = AsyncMock()
        client.get.return_value = "value"
        store = RedisKeyValueStore(client)

        async def scenario():
            await store.set("k", "v")
            value = await store.get("k")
            await store.delete("k")
            return value

        assert _run(scenario()) == "value"
        client.set.assert_awaited_once_with("k", "v")
        client.get.assert_awaited_once_with("k")
        client.delete.assert_awaited_once_with("k")

    def test_bytes_are_decoded(self):
        client = AsyncMock()
        client.get.return_value = b'{"a": 1}'
        assert _run(RedisKeyValueStore(client).get("k")) == '{"a": 1}'

    def test_missing_key(self):
        client = AsyncMock()
        client.get.return_value = None
        assert _run(RedisKeyValueStore(client).get("k")) is None

    def test_close(self):
        client = AsyncMock()
        _run(RedisKeyValueStore(client).close())
        client.aclose.assert_awaited_once()

    def test_store_persists_through_redis(self):
        client = AsyncMock()
        store = InvestigationStore(RedisKeyValueStore(client))
        inv = Investigation(name="Prod", agents=["k8s-agent"])
        store.set_active(inv)
        _run(store.flush())

        key, payload = client.set.await_args.args
        assert key == "skanyxx-active-investigation"
        assert inv.id in payload


class TestConnectRedis:
    def test_standalone(self):
        settings = RedisSettings(mode="standalone", host="redis", port=6380, db=2)
        with patch("fm_investigation_lib.persistence.redis_store.Redis") as redis_cls:
            redis_cls.return_value.ping = AsyncMock()
            client = _run(connect_redis(settings))

        assert client is redis_cls.return_value
        kwargs = redis_cls.call_args.kwargs
        assert kwargs["host"] == "redis"
        assert kwargs["port"] == 6380
        assert kwargs["db"] == 2
        assert kwargs["decode_responses"] is True
        client.ping.assert_awaited_once()

    def test_sentinel(self):
        settings = RedisSettings(
            mode="sentinel", sentinel_hosts="s1:26379,s2:26380", master_set="primary"
        )
        with patch("fm_investigation_lib.persistence.redis_store.Sentinel") as sentinel_cls:
            master = MagicMock()
            master.ping = AsyncMock()
            sentinel_cls.return_value.master_for.return_value = master
            client = _run(connect_redis(settings))

        assert client is master
        assert sentinel_cls.call_args.args[0] == [("s1", 26379), ("s2", 26380)]
        assert sentinel_cls.return_value.master_for.call_args.args[0] == "primary"

    def test_sentinel_requires_hosts(self, monkeypatch):
        monkeypatch.delenv("REDIS_SENTINEL_HOSTS", raising=False)
        with pytest.raises(ValueError):
            _run(connect_redis(RedisSettings(mode="sentinel")))
