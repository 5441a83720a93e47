"""Store module - Storage backends for caching."""

from shardcache_core.store.backend import StorageBackend, StoredValue
from shardcache_core.store.memory import MemoryStore
from shardcache_core.store.redis import RedisConfig, RedisStore, accelerated_available

__all__ = [
    "StorageBackend",
    "StoredValue",
    "MemoryStore",
    "RedisConfig",
    "RedisStore",
    "accelerated_available",
]
