"""Cache module - Facade, keys, expiry and per-call options.

This module provides the main cache interface and the value types it
passes to storage backends.
"""

from shardcache_core.cache.entry import CacheEntry
from shardcache_core.cache.keys import MAX_KEY_LENGTH, KeyCodec
from shardcache_core.cache.expiry import EXPIRY_SECONDS_LIMIT, parse_expiry
from shardcache_core.cache.options import (
    LOCK_TIMEOUT,
    WRITE_LOCK_WAIT,
    BatchOptions,
    FlushOptions,
    LockOptions,
    ReadOptions,
    WriteErrorPolicy,
    WriteOptions,
)
from shardcache_core.cache.cache import (
    BackendFamily,
    Cache,
    CacheConfig,
    CacheStats,
    register_backend_family,
)

__all__ = [
    "CacheEntry",
    "KeyCodec",
    "MAX_KEY_LENGTH",
    "EXPIRY_SECONDS_LIMIT",
    "parse_expiry",
    "LOCK_TIMEOUT",
    "WRITE_LOCK_WAIT",
    "BatchOptions",
    "FlushOptions",
    "LockOptions",
    "ReadOptions",
    "WriteErrorPolicy",
    "WriteOptions",
    "BackendFamily",
    "Cache",
    "CacheConfig",
    "CacheStats",
    "register_backend_family",
]
