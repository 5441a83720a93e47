"""ShardCache - Client-Side Sharded Cache.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

One logical cache in front of one or more cache servers, with:
- CRC-based key sharding across a fixed server list
- Namespaces with nested scoping
- Two-tier caching (primary + backup)
- Self-healing deserialization of corrupt entries
- Advisory locks built on atomic add
- Batch read/populate helpers

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                       ShardCache System                         │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐             │
    │  │  Registry   │  │   Cache     │  │   Backup    │   FACADE    │
    │  │  by scope   │──│  get/set    │──│   Cache     │   LAYER     │
    │  └─────────────┘  └──────┬──────┘  └─────────────┘             │
    │                          │                                      │
    │  ┌──────────────┐  ┌─────┴───────┐  ┌─────────────┐            │
    │  │  Serializer  │  │ ShardRouter │  │  KeyCodec   │   ROUTING  │
    │  │ pickle/json  │  │  crc32 % n  │  │ prefix/md5  │   LAYER    │
    │  └──────────────┘  └─────┬───────┘  └─────────────┘            │
    │                          │                                      │
    │  ┌───────────────────────┴───────────────────────┐             │
    │  │              Storage Backends                  │   STORAGE   │
    │  │        ┌────────┐        ┌────────┐            │   LAYER     │
    │  │        │ Memory │        │ Redis  │            │             │
    │  │        └────────┘        └────────┘            │             │
    │  └───────────────────────────────────────────────┘             │
    └─────────────────────────────────────────────────────────────────┘

Example Usage:
    from shardcache_core import Cache, CacheRegistry

    # Simple in-process cache
    cache = Cache()
    cache.set("user:1", {"name": "John"}, expiry=300)
    user = cache.get("user:1")

    # Sharded across Redis servers, with a local backup tier
    cache = Cache(
        servers=["cache-1:6379", "cache-2:6379"],
        namespace="app",
        backup=Cache(),
    )

    # Fetch what's missing, cache it, return everything
    users = cache.get_some(["user:1", "user:2"], load_users)

    # Named caches loaded from YAML
    from shardcache_core.config import load_registry

    caches = load_registry("config/shardcache.yml", environment="production")
    caches["sessions"].get("sid:42")
"""

__version__ = "1.0.0"
__author__ = "BlackRoad OS"

from shardcache_core.errors import (
    CacheError,
    CacheConnectionError,
    ServerError,
    ClientError,
    UnmarshalError,
    ConfigurationError,
    LockTimeoutError,
)
from shardcache_core.cache.entry import CacheEntry
from shardcache_core.cache.keys import KeyCodec
from shardcache_core.cache.expiry import parse_expiry
from shardcache_core.cache.options import (
    ReadOptions,
    WriteOptions,
    BatchOptions,
    FlushOptions,
    LockOptions,
    WriteErrorPolicy,
)
from shardcache_core.cache.cache import (
    Cache,
    CacheConfig,
    CacheStats,
    BackendFamily,
    register_backend_family,
)
from shardcache_core.store.backend import StorageBackend
from shardcache_core.store.memory import MemoryStore
from shardcache_core.store.redis import RedisStore, RedisConfig
from shardcache_core.cluster.router import ShardRouter
from shardcache_core.protocol.serializer import (
    Serializer,
    JSONSerializer,
    PickleSerializer,
    MsgPackSerializer,
)
from shardcache_core.registry import CacheRegistry

__all__ = [
    # Cache
    "Cache",
    "CacheConfig",
    "CacheStats",
    "CacheEntry",
    "BackendFamily",
    "register_backend_family",
    "KeyCodec",
    "parse_expiry",
    # Options
    "ReadOptions",
    "WriteOptions",
    "BatchOptions",
    "FlushOptions",
    "LockOptions",
    "WriteErrorPolicy",
    # Storage
    "StorageBackend",
    "MemoryStore",
    "RedisStore",
    "RedisConfig",
    # Cluster
    "ShardRouter",
    # Protocol
    "Serializer",
    "JSONSerializer",
    "PickleSerializer",
    "MsgPackSerializer",
    # Registry
    "CacheRegistry",
    # Errors
    "CacheError",
    "CacheConnectionError",
    "ServerError",
    "ClientError",
    "UnmarshalError",
    "ConfigurationError",
    "LockTimeoutError",
]
