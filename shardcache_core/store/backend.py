"""ShardCache Storage Backend - Backend Capability Contract.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import copy
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional, Union

from shardcache_core.cache.entry import CacheEntry
from shardcache_core.cache.keys import KeyCodec

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"^\d+$")

StoredValue = Union[bytes, str]


def _coerce_like(value: Any, like: StoredValue) -> StoredValue:
    """Coerce value to the same text/bytes type as an existing payload."""
    if isinstance(like, bytes):
        if isinstance(value, bytes):
            return value
        return str(value).encode("utf-8")
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class StorageBackend(ABC):
    """Abstract cache backend.

    A backend needs only ``get``, ``set`` and ``delete`` (plus ``flush_all``,
    ``stats`` and ``name``); every other operation has a default built from
    those primitives. Backends with native support override the defaults:
    - MemoryStore: In-process dictionary with real CAS tokens
    - RedisStore: Redis server via redis-py

    Keys passed in are raw facade keys; each backend canonicalizes them
    with ``cache_key`` so the namespace prefix and long-key digest are
    applied in exactly one place.

    A backend carries the prefix of the one facade it is attached to.
    Facades built over an already attached backend work on a clone.
    """

    def __init__(self) -> None:
        self.prefix: Optional[str] = None
        self.attached = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Get a name identifying this backend in stats output."""
        pass

    @abstractmethod
    def get(self, key: str, cas: bool = False) -> Optional[CacheEntry]:
        """Get entry by key.

        Args:
            key: Cache key
            cas: Include a CAS token in the result

        Returns:
            CacheEntry or None
        """
        pass

    @abstractmethod
    def set(self, key: str, value: StoredValue, expiry: Optional[int] = 0, flags: int = 0) -> StoredValue:
        """Store a value unconditionally.

        Args:
            key: Cache key
            value: Payload
            expiry: Normalized expiry; 0 never expires, None keeps the current one
            flags: Opaque flags

        Returns:
            The stored value
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete entry.

        Args:
            key: Cache key

        Returns:
            True if the key existed
        """
        pass

    @abstractmethod
    def flush_all(self, delay: int = 0) -> None:
        """Remove every entry.

        Args:
            delay: Seconds before the flush takes effect
        """
        pass

    @abstractmethod
    def stats(self) -> Dict[str, Any]:
        """Get backend statistics.

        Returns:
            Mapping of stat name to value
        """
        pass

    # Default implementations based on get and set.

    def get_many(self, keys: Iterable[str], cas: bool = False) -> Dict[str, CacheEntry]:
        """Get multiple entries.

        Args:
            keys: List of keys
            cas: Include CAS tokens

        Returns:
            Dict of key -> entry, missing keys omitted
        """
        result = {}
        for key in keys:
            entry = self.get(key, cas)
            if entry is not None:
                result[key] = entry
        return result

    def gets(self, key: str) -> Optional[CacheEntry]:
        """Get entry with its CAS token."""
        return self.get(key, cas=True)

    def add(self, key: str, value: StoredValue, expiry: Optional[int] = 0, flags: int = 0) -> Optional[StoredValue]:
        """Store only if the key is absent.

        Returns:
            The value, or None if the key already exists
        """
        if self.get(key) is not None:
            return None
        return self.set(key, value, expiry, flags)

    def replace(self, key: str, value: StoredValue, expiry: Optional[int] = 0, flags: int = 0) -> Optional[StoredValue]:
        """Store only if the key is present.

        Returns:
            The value, or None if the key is absent
        """
        if self.get(key) is None:
            return None
        return self.set(key, value, expiry, flags)

    def cas(
        self,
        key: str,
        value: StoredValue,
        cas: Optional[int],
        expiry: Optional[int] = 0,
        flags: int = 0,
    ) -> Optional[StoredValue]:
        """Compare-and-swap.

        Without native CAS support this degrades to a plain set.
        """
        logger.debug(f"{self.name} has no native CAS, storing {key} unconditionally")
        return self.set(key, value, expiry, flags)

    def append(self, key: str, value: StoredValue) -> bool:
        """Append to an existing value.

        Returns:
            False if the key is absent
        """
        existing = self.get(key)
        if existing is None:
            return False
        self.set(key, existing.value + _coerce_like(value, existing.value), None, existing.flags)
        return True

    def prepend(self, key: str, value: StoredValue) -> bool:
        """Prepend to an existing value.

        Returns:
            False if the key is absent
        """
        existing = self.get(key)
        if existing is None:
            return False
        self.set(key, _coerce_like(value, existing.value) + existing.value, None, existing.flags)
        return True

    def incr(self, key: str, amount: int = 1) -> Optional[int]:
        """Increment a decimal counter, clamping at zero.

        Returns:
            New value, or None if the key is absent or not numeric
        """
        existing = self.get(key)
        if existing is None:
            return None

        text = existing.value
        if isinstance(text, bytes):
            text = text.decode("utf-8", errors="replace")
        if not _DIGITS.match(text):
            return None

        value = max(int(text) + amount, 0)
        self.set(key, _coerce_like(str(value), existing.value), None, existing.flags)
        return value

    def decr(self, key: str, amount: int = 1) -> Optional[int]:
        """Decrement a decimal counter, flooring at zero."""
        return self.incr(key, -amount)

    def clear(self) -> None:
        """Remove every entry immediately."""
        self.flush_all()

    def close(self) -> None:
        """Release held resources. Nothing to release by default."""

    def clone(self) -> "StorageBackend":
        """Create a detached backend over the same storage."""
        backend = copy.copy(self)
        backend.attached = False
        return backend

    def cache_key(self, key: str) -> str:
        """Canonicalize a key for storage.

        Args:
            key: Raw key

        Returns:
            Prefixed (and possibly digested) key
        """
        return KeyCodec.storage_key(key, self.prefix)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


__all__ = ["StorageBackend", "StoredValue"]
