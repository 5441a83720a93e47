"""ShardCache Cache - Sharded, Namespaced, Two-Tier Cache Facade.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import contextlib
import logging
import re
import socket
import threading
import time
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import (
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from shardcache_core.cache.entry import CacheEntry
from shardcache_core.cache.expiry import parse_expiry
from shardcache_core.cache.keys import KeyCodec
from shardcache_core.cache.options import (
    LOCK_TIMEOUT,
    BatchOptions,
    FlushOptions,
    LockOptions,
    ReadOptions,
    WriteErrorPolicy,
    WriteOptions,
)
from shardcache_core.cluster.router import HASH_FUNCTIONS, ShardRouter
from shardcache_core.errors import (
    CacheError,
    ConfigurationError,
    LockTimeoutError,
    UnmarshalError,
)
from shardcache_core.protocol.serializer import Serializer, get_serializer
from shardcache_core.store.backend import StorageBackend
from shardcache_core.store.memory import MemoryStore
from shardcache_core.store.redis import RedisConfig, RedisStore, accelerated_available

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([-+]?\d+)")


class BackendFamily(Enum):
    """Kinds of backend a descriptor can be turned into."""

    PROTOCOL = auto()      # Remote server over its wire protocol
    LOCAL = auto()         # In-process MemoryStore
    ACCELERATED = auto()   # Protocol client with a native response parser
    SEGMENTED = auto()     # Splits oversized values into chunks (supplied externally)


BackendFactory = Callable[[Union[str, Mapping[str, Any]]], StorageBackend]

_family_factories: Dict[BackendFamily, BackendFactory] = {}
_accelerated_warning_issued = False


def register_backend_family(family: BackendFamily, factory: BackendFactory) -> None:
    """Register the factory used for server descriptors of a family.

    Args:
        family: Backend family
        factory: Callable turning a descriptor into a backend
    """
    _family_factories[family] = factory


def _protocol_backend(descriptor: Union[str, Mapping[str, Any]]) -> StorageBackend:
    return RedisStore(RedisConfig.from_descriptor(descriptor))


def _accelerated_backend(descriptor: Union[str, Mapping[str, Any]]) -> StorageBackend:
    global _accelerated_warning_issued
    if not accelerated_available():
        if not _accelerated_warning_issued:
            _accelerated_warning_issued = True
            logger.warning(
                "hiredis is not installed; the accelerated backend family falls back "
                "to the pure-Python protocol parser. Install shardcache[accelerated] "
                "for faster performance."
            )
        return _protocol_backend(descriptor)
    return RedisStore(RedisConfig.from_descriptor(descriptor, accelerated=True))


register_backend_family(BackendFamily.LOCAL, lambda descriptor: MemoryStore())
register_backend_family(BackendFamily.PROTOCOL, _protocol_backend)
register_backend_family(BackendFamily.ACCELERATED, _accelerated_backend)


@dataclass
class CacheConfig:
    """Cache construction options.

    Attributes:
        default_expiry: Expiry applied when a write names none (0 = never)
        namespace: Initial namespace
        backup: Second-tier cache consulted on misses and written first
        hash_with_prefix: Whether the namespace participates in shard hashing
        servers: Backend descriptors: instances, StorageBackend classes,
            "local", "host:port[:weight]" strings or mappings
        server: Single backend descriptor, used when servers is empty
        family: Family used to build string/mapping descriptors
        hash: Shard hash function; only "crc" unless family is ACCELERATED
        serializer: Serializer name or instance (default pickle)
    """

    default_expiry: Any = 0
    namespace: Optional[str] = None
    backup: Optional["Cache"] = None
    hash_with_prefix: bool = True
    servers: Optional[Sequence[Any]] = None
    server: Any = None
    family: BackendFamily = BackendFamily.PROTOCOL
    hash: str = "crc"
    serializer: Union[str, Serializer, None] = None

    def __post_init__(self) -> None:
        if isinstance(self.family, str):
            try:
                self.family = BackendFamily[self.family.upper()]
            except KeyError:
                raise ConfigurationError(f"Unknown backend family: {self.family}") from None

        if self.hash not in HASH_FUNCTIONS:
            raise ConfigurationError(f"Unsupported hash function: {self.hash}")
        if self.hash != "crc" and self.family is not BackendFamily.ACCELERATED:
            raise ConfigurationError("only CRC hashing is supported unless the accelerated family is used")

        parse_expiry(self.default_expiry)

    def descriptors(self) -> List[Any]:
        """Get the backend descriptors in routing order."""
        if self.servers:
            return list(self.servers)
        if self.server is not None:
            return [self.server]
        return ["local"]


@dataclass
class CacheStats:
    """Facade statistics.

    Attributes:
        hits: Single-key reads answered by this tier
        misses: Single-key reads this tier could not answer
        sets: Successful set/write calls
        deletes: Delete calls
        unmarshal_errors: Corrupt entries discarded
    """

    hits: int = 0
    misses: int = 0
    sets: int = 0
    deletes: int = 0
    unmarshal_errors: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def reset(self) -> None:
        """Reset statistics."""
        self.hits = 0
        self.misses = 0
        self.sets = 0
        self.deletes = 0
        self.unmarshal_errors = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "deletes": self.deletes,
            "unmarshal_errors": self.unmarshal_errors,
            "hit_rate": self.hit_rate,
        }


class Cache:
    """Client-side cache facade over one or more backends.

    Features:
    - CRC-based sharding across a fixed backend list
    - Namespaces applied to every backend (and the backup) at once
    - Two-tier caching: backup written first, read on miss
    - Serialization with self-healing of corrupt entries
    - Advisory locks and batch read/populate helpers

    Example:
        cache = Cache(servers=["cache-1:6379", "cache-2:6379"], namespace="app")

        cache.set("user:1", {"name": "Ada"}, expiry=300)
        user = cache.get("user:1")

        with cache.in_namespace("v2"):
            cache.set("user:1", {"name": "Ada", "v": 2})

        cache.with_lock("report", build_report)
    """

    def __init__(self, config: Optional[CacheConfig] = None, **options: Any):
        """Initialize cache.

        Args:
            config: Cache configuration
            **options: CacheConfig fields, applied over ``config``
        """
        if config is None:
            config = CacheConfig(**options)
        elif options:
            config = replace(config, **options)
        self.config = config

        self._backends: Tuple[StorageBackend, ...] = tuple(
            self._build_backend(descriptor) for descriptor in config.descriptors()
        )
        self._router = ShardRouter(self._backends, hash_function=config.hash)
        self._single = self._backends[0] if len(self._backends) == 1 and config.backup is None else None

        if isinstance(config.serializer, Serializer):
            self._serializer = config.serializer
        else:
            try:
                self._serializer = get_serializer(config.serializer)
            except KeyError:
                raise ConfigurationError(f"Unknown serializer format: {config.serializer}") from None

        self._lock = threading.RLock()
        self._stats = CacheStats()
        self._namespace: Optional[str] = None
        self.namespace = config.namespace

    def _build_backend(self, descriptor: Any) -> StorageBackend:
        backend = self._new_backend(descriptor)
        backend.attached = True
        return backend

    def _new_backend(self, descriptor: Any) -> StorageBackend:
        if isinstance(descriptor, StorageBackend):
            # The prefix lives on the backend, so each facade needs its own.
            return descriptor.clone() if descriptor.attached else descriptor
        if isinstance(descriptor, type) and issubclass(descriptor, StorageBackend):
            return descriptor()
        if descriptor == "local":
            return MemoryStore()
        if isinstance(descriptor, (str, Mapping)):
            factory = _family_factories.get(self.config.family)
            if factory is None:
                raise ConfigurationError(f"No backend registered for family {self.config.family.name}")
            return factory(descriptor)
        raise ConfigurationError(f"Unsupported server descriptor: {descriptor!r}")

    @property
    def servers(self) -> Tuple[StorageBackend, ...]:
        """Get the backends in routing order."""
        return self._backends

    @property
    def backup(self) -> Optional["Cache"]:
        """Get the backup tier, if any."""
        return self.config.backup

    @property
    def default_expiry(self) -> Any:
        return self.config.default_expiry

    @property
    def namespace(self) -> Optional[str]:
        """Get the current namespace."""
        return self._namespace

    @namespace.setter
    def namespace(self, namespace: Optional[str]) -> None:
        """Set the namespace on every backend, then on the backup."""
        with self._lock:
            self._namespace = namespace or None
            prefix = KeyCodec.prefix_for(self._namespace) or None
            for backend in self._backends:
                backend.prefix = prefix
            if self.backup is not None:
                self.backup.namespace = self._namespace

    @contextlib.contextmanager
    def in_namespace(self, namespace: str) -> Iterator["Cache"]:
        """Temporarily nest the namespace.

        Args:
            namespace: Segment appended to the current namespace

        Yields:
            This cache
        """
        old_namespace = self.namespace
        self.namespace = f"{old_namespace}:{namespace}" if old_namespace else namespace
        try:
            yield self
        finally:
            self.namespace = old_namespace

    def get(self, keys: Any, options: Optional[ReadOptions] = None, **kwargs: Any) -> Any:
        """Get a value, or a dict of values for a list of keys.

        Args:
            keys: Key, or list of keys
            options: Read options
            **kwargs: ReadOptions fields (raw, cas, meta, expiry)

        Returns:
            Value, CacheEntry (meta) or None; dict for a list of keys
        """
        opts = ReadOptions.build(options, **kwargs)
        if isinstance(keys, (list, tuple)):
            return self.get_multi([KeyCodec.normalize(k) for k in keys], opts)

        key = KeyCodec.normalize(keys)
        backend = self._backend_for(key)
        try:
            if opts.expiry is not None:
                entry = backend.gets(key)
                if entry is not None:
                    backend.cas(key, entry.value, entry.cas, parse_expiry(opts.expiry), entry.flags)
                    if not opts.cas:
                        entry = entry.copy(cas=None)
            else:
                entry = backend.get(key, opts.cas)
        except UnmarshalError as e:
            self._discard(key, e)
            return None

        if entry is None:
            self._stats.misses += 1
            if self.backup is not None:
                return self.backup.get(key, opts)
            return None

        if not opts.raw:
            try:
                entry = entry.copy(value=self._unmarshal(key, entry.value))
            except UnmarshalError:
                return None

        self._stats.hits += 1
        return entry if opts.meta else entry.value

    def get_multi(self, keys: Sequence[Any], options: Optional[ReadOptions] = None, **kwargs: Any) -> Dict[str, Any]:
        """Get several keys with one batched read per backend.

        Keys whose values cannot be deserialized are left out of the result.

        Args:
            keys: Keys to read
            options: Read options (expiry is ignored)

        Returns:
            Dict of key -> value (or CacheEntry under meta)
        """
        opts = ReadOptions.build(options, **kwargs)
        keys = [KeyCodec.normalize(k) for k in keys]
        if not keys:
            return {}

        if self._single is not None:
            groups = {self._single: keys}
        else:
            groups = self._router.group((key, self._routing_key(key)) for key in keys)

        results: Dict[str, Any] = {}
        for backend, backend_keys in groups.items():
            for key, entry in backend.get_many(backend_keys, opts.cas).items():
                if not opts.raw:
                    try:
                        entry = entry.copy(value=self._unmarshal(key, entry.value))
                    except UnmarshalError:
                        continue
                results[key] = entry if opts.meta else entry.value

        if self.backup is not None:
            missing = [key for key in keys if key not in results]
            if missing:
                results.update(self.backup.get_multi(missing, opts))
        return results

    def read(self, key: Any, options: Optional[ReadOptions] = None, **kwargs: Any) -> Any:
        """Get a raw value, skipping deserialization."""
        return self.get(key, ReadOptions.build(options, **{**kwargs, "raw": True}))

    def read_multi(self, *keys: Any) -> Dict[str, Any]:
        """Get several raw values."""
        return self.get_multi(keys, raw=True)

    def count(self, key: Any) -> Optional[int]:
        """Read a raw counter value as an integer.

        Returns:
            Leading integer of the stored text (0 if none), or None on a miss
        """
        value = self.get(key, raw=True)
        if value is None:
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        match = _LEADING_INT.match(str(value))
        return int(match.group(1)) if match else 0

    def set(self, key: Any, value: Any, options: Any = None, **kwargs: Any) -> Any:
        """Store a value unconditionally.

        Args:
            key: Cache key
            value: Value to store
            options: WriteOptions, a mapping, or a bare expiry
            **kwargs: WriteOptions fields (raw, expiry, flags)

        Returns:
            The value
        """
        opts = self._write_options(options, kwargs)
        key = KeyCodec.normalize(key)
        if self.backup is not None:
            self.backup.set(key, value, opts)

        self._backend_for(key).set(key, self._marshal(value, opts), self._expiry(opts), opts.flags)
        self._stats.sets += 1
        return value

    def write(self, key: Any, value: Any, options: Any = None, **kwargs: Any) -> Any:
        """Store a raw value, skipping serialization."""
        opts = self._write_options(options, kwargs)
        return self.set(key, value, replace(opts, raw=True))

    def add(self, key: Any, value: Any, options: Any = None, **kwargs: Any) -> Any:
        """Store only if the key is absent.

        Returns:
            The value, or None if the key already existed
        """
        opts = self._write_options(options, kwargs)
        key = KeyCodec.normalize(key)
        if self.backup is not None:
            self.backup.add(key, value, opts)

        stored = self._backend_for(key).add(key, self._marshal(value, opts), self._expiry(opts), opts.flags)
        return value if stored is not None else None

    def replace(self, key: Any, value: Any, options: Any = None, **kwargs: Any) -> Any:
        """Store only if the key is present.

        Returns:
            The value, or None if the key was absent
        """
        opts = self._write_options(options, kwargs)
        key = KeyCodec.normalize(key)
        if self.backup is not None:
            self.backup.replace(key, value, opts)

        stored = self._backend_for(key).replace(key, self._marshal(value, opts), self._expiry(opts), opts.flags)
        return value if stored is not None else None

    def cas(self, key: Any, value: Any, options: Any = None, **kwargs: Any) -> Any:
        """Store only if the entry still carries the given CAS token.

        Returns:
            The value, or None if the token is stale or the key is absent
        """
        opts = self._write_options(options, kwargs)
        key = KeyCodec.normalize(key)
        if self.backup is not None:
            self.backup.cas(key, value, opts)

        stored = self._backend_for(key).cas(
            key, self._marshal(value, opts), opts.cas, self._expiry(opts), opts.flags
        )
        return value if stored is not None else None

    def append(self, key: Any, value: Union[str, bytes]) -> bool:
        """Append raw data to an existing value."""
        key = KeyCodec.normalize(key)
        if self.backup is not None:
            self.backup.append(key, value)
        return self._backend_for(key).append(key, value)

    def prepend(self, key: Any, value: Union[str, bytes]) -> bool:
        """Prepend raw data to an existing value."""
        key = KeyCodec.normalize(key)
        if self.backup is not None:
            self.backup.prepend(key, value)
        return self._backend_for(key).prepend(key, value)

    def incr(self, key: Any, amount: int = 1) -> Optional[int]:
        """Increment a raw decimal counter.

        Returns:
            New value, or None if the key is absent or not numeric
        """
        if amount < 0:
            return self.decr(key, -amount)

        key = KeyCodec.normalize(key)
        if self.backup is not None:
            self.backup.incr(key, amount)
        return self._backend_for(key).incr(key, amount)

    def decr(self, key: Any, amount: int = 1) -> Optional[int]:
        """Decrement a raw decimal counter, flooring at zero."""
        if amount < 0:
            return self.incr(key, -amount)

        key = KeyCodec.normalize(key)
        if self.backup is not None:
            self.backup.decr(key, amount)
        return self._backend_for(key).decr(key, amount)

    def delete(self, key: Any) -> bool:
        """Delete a key from the backup and the primary.

        Returns:
            True if the primary held the key
        """
        key = KeyCodec.normalize(key)
        if self.backup is not None:
            self.backup.delete(key)
        self._stats.deletes += 1
        return self._backend_for(key).delete(key)

    def update(
        self,
        key: Any,
        transform: Callable[[Any], Any],
        options: Any = None,
        **kwargs: Any,
    ) -> Any:
        """Read-modify-write a key with optimistic concurrency.

        The transform receives the current value (None when absent). A
        present key is written back with CAS, so a concurrent writer makes
        this call return None instead of being overwritten; it is not
        retried.

        Returns:
            The new value, or None if the write lost
        """
        opts = self._write_options(options, kwargs)
        key = KeyCodec.normalize(key)
        entry = self.get(key, raw=opts.raw, cas=True, meta=True)
        if entry is not None:
            return self.cas(key, transform(entry.value), replace(opts, cas=entry.cas))
        return self.add(key, transform(None), opts)

    def get_or_add(
        self,
        key: Any,
        value: Any = None,
        factory: Optional[Callable[[], Any]] = None,
        options: Any = None,
        **kwargs: Any,
    ) -> Any:
        """Get a value, adding it on a miss.

        If another caller adds first, their value is returned.
        """
        opts = self._write_options(options, kwargs)
        found = self.get(key, raw=opts.raw)
        if found is not None:
            return found

        added = self.add(key, factory() if factory is not None else value, opts)
        if added is not None:
            return added
        return self.get(key, raw=opts.raw)

    def get_or_set(
        self,
        key: Any,
        value: Any = None,
        factory: Optional[Callable[[], Any]] = None,
        options: Any = None,
        **kwargs: Any,
    ) -> Any:
        """Get a value, setting it on a miss."""
        opts = self._write_options(options, kwargs)
        found = self.get(key, raw=opts.raw)
        if found is not None:
            return found
        return self.set(key, factory() if factory is not None else value, opts)

    def add_or_get(self, key: Any, value: Any, options: Any = None, **kwargs: Any) -> Any:
        """Add a value, or get the existing one if the add loses."""
        opts = self._write_options(options, kwargs)
        added = self.add(key, value, opts)
        if added is not None:
            return added
        return self.get(key, raw=opts.raw)

    def get_some(
        self,
        keys: Sequence[Any],
        fetch: Callable[[List[str]], Mapping[Any, Any]],
        options: Optional[BatchOptions] = None,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """Batch read with fetch-and-populate for the misses.

        Args:
            keys: Keys wanted
            fetch: Called once with the missing keys; returns key -> value
            options: Batch options
            **kwargs: BatchOptions fields

        Returns:
            Dict of key -> value for every cached or fetched key
        """
        opts = BatchOptions.build(options, **kwargs)
        keys = [KeyCodec.normalize(k) for k in keys]

        results = {} if opts.disable else self.get_multi(keys, opts.read_options())
        if opts.validation is not None:
            results = {
                key: result
                for key, result in results.items()
                if opts.validation(key, result.value if opts.meta else result)
            }

        missing = [key for key in keys if key not in results]
        if not missing:
            return results

        for key, value in fetch(missing).items():
            key = KeyCodec.normalize(key)
            if not (opts.disable or opts.disable_write):
                try:
                    self.set(key, value, raw=opts.raw)
                except CacheError as e:
                    if opts.write_errors is WriteErrorPolicy.RAISE:
                        raise
                    logger.warning(
                        f"Cache error in get_some: {type(e).__name__} {e} on key '{key}' "
                        f"while storing value: {value!r}"
                    )
            results[key] = CacheEntry(value=value) if opts.meta else value
        return results

    def lock_key(self, key: Any) -> str:
        """Get the key a lock marker is stored under."""
        return f"lock:{KeyCodec.normalize(key)}"

    def lock(self, key: Any, options: Optional[LockOptions] = None, **kwargs: Any) -> bool:
        """Try to take the advisory lock for a key.

        Returns:
            True if acquired, False if someone else holds it
        """
        opts = LockOptions.build(options, **kwargs)
        expiry = opts.expiry if opts.expiry is not None else LOCK_TIMEOUT
        return self.add(self.lock_key(key), socket.gethostname(), raw=True, expiry=expiry) is not None

    def unlock(self, key: Any) -> bool:
        """Release the advisory lock for a key."""
        return self.delete(self.lock_key(key))

    def locked(self, key: Any) -> bool:
        """Check whether the advisory lock for a key is held."""
        return self.get(self.lock_key(key), raw=True) is not None

    def with_lock(
        self,
        key: Any,
        body: Callable[[], Any],
        options: Optional[LockOptions] = None,
        **kwargs: Any,
    ) -> Any:
        """Run ``body`` while holding the advisory lock for a key.

        Retries every ``interval`` seconds until acquired. With ``ignore``
        the body is skipped if the lock is taken; with ``timeout`` a
        LockTimeoutError is raised once the deadline passes.

        Returns:
            Body result, or None if skipped
        """
        opts = LockOptions.build(options, **kwargs)
        deadline = None if opts.timeout is None else time.monotonic() + opts.timeout

        attempts = 0
        while not self.lock(key, opts):
            if opts.ignore:
                return None

            wait = opts.interval
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise LockTimeoutError(self.lock_key(key), opts.timeout)
                wait = min(wait, remaining)

            attempts += 1
            logger.debug(f"Lock {self.lock_key(key)!r} busy, retry {attempts} in {wait:.2f}s")
            time.sleep(wait)

        try:
            return body()
        finally:
            if not opts.keep:
                self.unlock(key)

    def flush_all(self, options: Optional[FlushOptions] = None, **kwargs: Any) -> None:
        """Flush every backend, optionally staggered.

        Args:
            options: Flush options
            **kwargs: FlushOptions fields (delay, interval)
        """
        opts = FlushOptions.build(options, **kwargs)
        delay = opts.delay
        for backend in self._backends:
            logger.debug(f"Flushing {backend.name} with delay {delay}s")
            backend.flush_all(delay)
            delay += opts.interval

    clear = flush_all

    def stats(self, field: Optional[str] = None) -> Any:
        """Get backend statistics.

        Args:
            field: Single stat to collect from every backend

        Returns:
            Dict of backend name -> stats, or a list of one field's values
        """
        if field is not None:
            return [backend.stats().get(field) for backend in self._backends]
        return {backend.name: backend.stats() for backend in self._backends}

    def get_stats(self) -> CacheStats:
        """Get facade statistics."""
        return self._stats

    def reset_stats(self) -> None:
        """Reset facade statistics."""
        self._stats.reset()

    def clone(self) -> "Cache":
        """Create a cache with the same settings over cloned backends.

        The backup tier is not carried over.
        """
        return Cache(
            replace(
                self.config,
                namespace=self.namespace,
                backup=None,
                servers=[backend.clone() for backend in self._backends],
                server=None,
            )
        )

    def reset(self) -> None:
        """Close every backend that holds resources."""
        for backend in self._backends:
            backend.close()

    def _routing_key(self, key: str) -> str:
        return KeyCodec.routing_key(key, self._namespace, self.config.hash_with_prefix)

    def _backend_for(self, key: str) -> StorageBackend:
        if self._single is not None:
            return self._single
        return self._router.backend_for(self._routing_key(key))

    def _write_options(self, options: Any, overrides: Dict[str, Any]) -> WriteOptions:
        # A bare value in the options slot is an expiry.
        if options is not None and not isinstance(options, (WriteOptions, Mapping)):
            return WriteOptions.build(None, expiry=options, **overrides)
        return WriteOptions.build(options, **overrides)

    def _expiry(self, opts: WriteOptions) -> int:
        expiry = parse_expiry(opts.expiry)
        if expiry is None:
            expiry = parse_expiry(self.config.default_expiry)
        return expiry or 0

    def _marshal(self, value: Any, opts: WriteOptions) -> Any:
        return value if opts.raw else self._serializer.dumps(value)

    def _unmarshal(self, key: str, data: Any) -> Any:
        try:
            return self._serializer.unmarshal(data)
        except Exception as e:
            error = UnmarshalError(key, f"{type(e).__name__} {e}")
            self._discard(key, error, data)
            raise error from e

    def _discard(self, key: str, error: Exception, data: Any = None) -> None:
        """Log and delete an entry that cannot be read back."""
        preview = repr(data[:64]) if isinstance(data, (bytes, str)) else repr(data)
        logger.error(f"Cache read error: {error} on key '{key}' while unmarshalling value: {preview}")
        self._stats.unmarshal_errors += 1
        self.delete(key)

    def __getitem__(self, key: Any) -> Any:
        return self.get(key)

    def __setitem__(self, key: Any, value: Any) -> None:
        self.set(key, value)

    def __repr__(self) -> str:
        return f"<Cache: {len(self._backends)} servers, ns: {self.namespace!r}>"


__all__ = [
    "Cache",
    "CacheConfig",
    "CacheStats",
    "BackendFamily",
    "register_backend_family",
]
