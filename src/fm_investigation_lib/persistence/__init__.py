"""
Persistence for the active investigation and history.

Key-value port with in-memory and Redis backends, the JSON codec, and the
trailing-debounce writer used by the store.
"""

from fm_investigation_lib.persistence.codec import (
    decode_history,
    decode_investigation,
    encode_history,
    encode_investigation,
)
from fm_investigation_lib.persistence.debounce import DebouncedWriter
from fm_investigation_lib.persistence.kv_store import InMemoryKeyValueStore, KeyValueStore
from fm_investigation_lib.persistence.redis_store import RedisKeyValueStore, connect_redis

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "connect_redis",
    "DebouncedWriter",
    "encode_investigation",
    "decode_investigation",
    "encode_history",
    "decode_history",
]
