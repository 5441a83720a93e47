"""ShardCache Redis Store - Remote Protocol Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import contextlib
import logging
import random
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Union

import msgpack
import redis
import redis.utils

from shardcache_core.cache.entry import CacheEntry
from shardcache_core.cache.expiry import EXPIRY_SECONDS_LIMIT
from shardcache_core.errors import CacheConnectionError, ConfigurationError, ServerError, UnmarshalError
from shardcache_core.store.backend import StorageBackend, StoredValue, _coerce_like

logger = logging.getLogger(__name__)


def accelerated_available() -> bool:
    """Check whether redis-py can use the hiredis C parser."""
    return bool(getattr(redis.utils, "HIREDIS_AVAILABLE", False))


@dataclass
class RedisConfig:
    """Redis connection configuration.

    Attributes:
        host: Redis host
        port: Redis port
        db: Redis database number
        password: Redis password
        socket_timeout: Socket timeout
        socket_connect_timeout: Connection timeout
        max_connections: Connection pool size
        weight: Server weight from the descriptor (carried, not used for routing)
        accelerated: Expect the hiredis parser to be available
    """

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0
    max_connections: int = 10
    weight: int = 1
    accelerated: bool = False

    @classmethod
    def from_descriptor(cls, descriptor: Union[str, Mapping[str, Any]], **defaults: Any) -> "RedisConfig":
        """Build a config from "host:port[:weight]" or a mapping.

        Args:
            descriptor: Server descriptor
            **defaults: Values applied before the descriptor's own

        Returns:
            RedisConfig instance
        """
        config = cls(**defaults)
        if isinstance(descriptor, str):
            parts = descriptor.split(":")
            changes: Dict[str, Any] = {"host": parts[0] or config.host}
            if len(parts) > 1 and parts[1]:
                changes["port"] = int(parts[1])
            if len(parts) > 2 and parts[2]:
                changes["weight"] = int(parts[2])
            return replace(config, **changes)

        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(descriptor) - known)
        if unknown:
            raise ConfigurationError(f"Unknown server option(s): {', '.join(unknown)}")
        return replace(config, **dict(descriptor))


class RedisStore(StorageBackend):
    """Redis storage backend.

    Values are stored in a msgpack envelope ``[value, flags, cas]`` so
    flags and CAS tokens survive the round trip. Conditional writes map
    onto native SET NX/XX; CAS, counters and append/prepend run as
    WATCH/MULTI transactions.

    Example:
        store = RedisStore(RedisConfig(host="redis.local", port=6379))
        store.set("key", b"data", expiry=60)
        entry = store.get("key")
    """

    def __init__(self, config: Optional[RedisConfig] = None):
        """Initialize Redis store.

        Args:
            config: Redis configuration
        """
        super().__init__()
        self.config = config or RedisConfig()
        self._client: Optional[Any] = None
        self._pool: Optional[Any] = None

    @property
    def name(self) -> str:
        return f"{self.config.host}:{self.config.port}"

    def _ensure_connected(self) -> Any:
        """Ensure Redis connection exists.

        Returns:
            Redis client
        """
        if self._client is not None:
            return self._client

        self._pool = redis.ConnectionPool(
            host=self.config.host,
            port=self.config.port,
            db=self.config.db,
            password=self.config.password,
            socket_timeout=self.config.socket_timeout,
            socket_connect_timeout=self.config.socket_connect_timeout,
            max_connections=self.config.max_connections,
            decode_responses=False,  # We handle serialization
        )
        self._client = redis.Redis(connection_pool=self._pool)
        logger.info(f"Connected to Redis at {self.config.host}:{self.config.port}")
        return self._client

    @contextlib.contextmanager
    def _translate_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            logger.error(f"Redis {operation} error on {self.name}: {e}")
            raise CacheConnectionError(e) from e
        except redis.exceptions.ResponseError as e:
            logger.error(f"Redis {operation} rejected by {self.name}: {e}")
            raise ServerError(str(e)) from e

    @staticmethod
    def _pack(value: StoredValue, flags: int) -> bytes:
        if not isinstance(value, (bytes, str)):
            value = str(value)
        return msgpack.packb([value, flags, random.getrandbits(63)], use_bin_type=True)

    @staticmethod
    def _unpack(key: str, data: bytes) -> CacheEntry:
        try:
            value, flags, cas = msgpack.unpackb(data, raw=False)
        except (ValueError, TypeError, msgpack.UnpackException) as e:
            raise UnmarshalError(key, f"Corrupt envelope for key '{key}': {e}") from e
        return CacheEntry(value=value, flags=flags, cas=cas)

    @staticmethod
    def _expiry_args(expiry: Optional[int]) -> Dict[str, Any]:
        if expiry is None:
            return {"keepttl": True}
        if expiry == 0:
            return {}
        if expiry > EXPIRY_SECONDS_LIMIT:
            return {"exat": int(expiry)}
        return {"ex": int(expiry)}

    def get(self, key: str, cas: bool = False) -> Optional[CacheEntry]:
        storage_key = self.cache_key(key)
        with self._translate_errors("get"):
            data = self._ensure_connected().get(storage_key)
        if data is None:
            return None
        entry = self._unpack(key, data)
        return entry if cas else entry.copy(cas=None)

    def get_many(self, keys: Iterable[str], cas: bool = False) -> Dict[str, CacheEntry]:
        keys = list(keys)
        if not keys:
            return {}
        with self._translate_errors("mget"):
            values = self._ensure_connected().mget([self.cache_key(k) for k in keys])

        result = {}
        for key, data in zip(keys, values):
            if data is None:
                continue
            try:
                entry = self._unpack(key, data)
            except UnmarshalError as e:
                logger.error(f"Dropping unreadable entry in mget: {e}")
                self.delete(key)
                continue
            result[key] = entry if cas else entry.copy(cas=None)
        return result

    def set(self, key: str, value: StoredValue, expiry: Optional[int] = 0, flags: int = 0) -> StoredValue:
        storage_key = self.cache_key(key)
        with self._translate_errors("set"):
            self._ensure_connected().set(storage_key, self._pack(value, flags), **self._expiry_args(expiry))
        return value

    def add(self, key: str, value: StoredValue, expiry: Optional[int] = 0, flags: int = 0) -> Optional[StoredValue]:
        storage_key = self.cache_key(key)
        with self._translate_errors("add"):
            stored = self._ensure_connected().set(
                storage_key, self._pack(value, flags), nx=True, **self._expiry_args(expiry)
            )
        return value if stored else None

    def replace(self, key: str, value: StoredValue, expiry: Optional[int] = 0, flags: int = 0) -> Optional[StoredValue]:
        storage_key = self.cache_key(key)
        with self._translate_errors("replace"):
            stored = self._ensure_connected().set(
                storage_key, self._pack(value, flags), xx=True, **self._expiry_args(expiry)
            )
        return value if stored else None

    def cas(
        self,
        key: str,
        value: StoredValue,
        cas: Optional[int],
        expiry: Optional[int] = 0,
        flags: int = 0,
    ) -> Optional[StoredValue]:
        def swap(entry: Optional[CacheEntry]) -> Optional[bytes]:
            if entry is None or cas is None or entry.cas != cas:
                return None
            return self._pack(value, flags)

        stored = self._transact(key, swap, "cas", expiry)
        return value if stored is not None else None

    def incr(self, key: str, amount: int = 1) -> Optional[int]:
        result: List[int] = []

        def bump(entry: Optional[CacheEntry]) -> Optional[bytes]:
            if entry is None:
                return None
            text = entry.value.decode("utf-8", "replace") if isinstance(entry.value, bytes) else entry.value
            if not (text.isascii() and text.isdigit()):
                return None
            result.append(max(int(text) + amount, 0))
            return self._pack(_coerce_like(str(result[0]), entry.value), entry.flags)

        self._transact(key, bump, "incr")
        return result[0] if result else None

    def append(self, key: str, value: StoredValue) -> bool:
        def concat(entry: Optional[CacheEntry]) -> Optional[bytes]:
            if entry is None:
                return None
            return self._pack(entry.value + _coerce_like(value, entry.value), entry.flags)

        return self._transact(key, concat, "append") is not None

    def prepend(self, key: str, value: StoredValue) -> bool:
        def concat(entry: Optional[CacheEntry]) -> Optional[bytes]:
            if entry is None:
                return None
            return self._pack(_coerce_like(value, entry.value) + entry.value, entry.flags)

        return self._transact(key, concat, "prepend") is not None

    def _transact(
        self,
        key: str,
        compute: Callable[[Optional[CacheEntry]], Optional[bytes]],
        operation: str,
        expiry: Optional[int] = None,
    ) -> Optional[bytes]:
        """Read-modify-write a key under WATCH.

        ``compute`` receives the current entry and returns the new payload,
        or None to leave the key untouched.
        """
        storage_key = self.cache_key(key)

        def body(pipe: Any) -> Optional[bytes]:
            data = pipe.get(storage_key)
            payload = compute(self._unpack(key, data) if data is not None else None)
            if payload is not None:
                pipe.multi()
                pipe.set(storage_key, payload, **self._expiry_args(expiry))
            return payload

        with self._translate_errors(operation):
            return self._ensure_connected().transaction(body, storage_key, value_from_callable=True)

    def delete(self, key: str) -> bool:
        storage_key = self.cache_key(key)
        with self._translate_errors("delete"):
            return self._ensure_connected().delete(storage_key) > 0

    def flush_all(self, delay: int = 0) -> None:
        if delay:
            raise ServerError("flush_all not supported with delay")
        with self._translate_errors("flush_all"):
            self._ensure_connected().flushdb()

    def stats(self) -> Dict[str, Any]:
        with self._translate_errors("info"):
            return dict(self._ensure_connected().info())

    def clone(self) -> "RedisStore":
        """Create a detached store with its own connection pool."""
        store = RedisStore(self.config)
        store.prefix = self.prefix
        return store

    def close(self) -> None:
        """Close Redis connection."""
        if self._pool:
            self._pool.disconnect()
            self._pool = None
            self._client = None

    def __repr__(self) -> str:
        return f"RedisStore(host={self.config.host}, port={self.config.port})"


__all__ = ["RedisStore", "RedisConfig", "accelerated_available"]
