"""ShardCache Memory Store - In-Process Reference Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from typing import Any, Dict, Optional

from shardcache_core.cache.entry import CacheEntry
from shardcache_core.cache.expiry import resolve_deadline
from shardcache_core.errors import ServerError
from shardcache_core.store.backend import StorageBackend, StoredValue

logger = logging.getLogger(__name__)


class MemoryStore(StorageBackend):
    """In-memory storage backend.

    Keeps entries in a dictionary with a parallel expiry map. Expired
    entries are evicted lazily, on the next read of that key; there is no
    background sweeper.

    Features:
    - O(1) get/set/delete operations
    - Thread-safe with RLock
    - Real CAS tokens (one per write)

    Example:
        store = MemoryStore()
        store.set("key", "data", expiry=60)
        entry = store.get("key")
    """

    def __init__(self) -> None:
        super().__init__()
        self._data: Dict[str, CacheEntry] = {}
        self._expiry: Dict[str, float] = {}
        self._lock = threading.RLock()
        self._cas_counter = itertools.count(1)

    @property
    def name(self) -> str:
        return f"local:{id(self)}"

    def stats(self) -> Dict[str, Any]:
        """Get store statistics.

        ``curr_items`` may include entries that have expired but not yet
        been read.
        """
        with self._lock:
            return {
                "curr_items": len(self._data),
                "expiry_count": len(self._expiry),
            }

    def flush_all(self, delay: int = 0) -> None:
        if delay:
            raise ServerError("flush_all not supported with delay")
        with self._lock:
            self._data.clear()
            self._expiry.clear()

    def get(self, key: str, cas: bool = False) -> Optional[CacheEntry]:
        key = self.cache_key(key)
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return None
            return entry.copy() if cas else entry.copy(cas=None)

    def set(self, key: str, value: StoredValue, expiry: Optional[int] = 0, flags: int = 0) -> StoredValue:
        key = self.cache_key(key)
        with self._lock:
            self._store(key, value, expiry, flags)
        return value

    def add(self, key: str, value: StoredValue, expiry: Optional[int] = 0, flags: int = 0) -> Optional[StoredValue]:
        storage_key = self.cache_key(key)
        with self._lock:
            if self._live_entry(storage_key) is not None:
                return None
            self._store(storage_key, value, expiry, flags)
        return value

    def replace(self, key: str, value: StoredValue, expiry: Optional[int] = 0, flags: int = 0) -> Optional[StoredValue]:
        storage_key = self.cache_key(key)
        with self._lock:
            if self._live_entry(storage_key) is None:
                return None
            self._store(storage_key, value, expiry, flags)
        return value

    def cas(
        self,
        key: str,
        value: StoredValue,
        cas: Optional[int],
        expiry: Optional[int] = 0,
        flags: int = 0,
    ) -> Optional[StoredValue]:
        storage_key = self.cache_key(key)
        with self._lock:
            entry = self._live_entry(storage_key)
            if entry is None or cas is None or entry.cas != cas:
                return None
            self._store(storage_key, value, expiry, flags)
        return value

    def incr(self, key: str, amount: int = 1) -> Optional[int]:
        with self._lock:
            return super().incr(key, amount)

    def append(self, key: str, value: StoredValue) -> bool:
        with self._lock:
            return super().append(key, value)

    def prepend(self, key: str, value: StoredValue) -> bool:
        with self._lock:
            return super().prepend(key, value)

    def delete(self, key: str) -> bool:
        key = self.cache_key(key)
        with self._lock:
            existed = self._live_entry(key) is not None
            self._data.pop(key, None)
            self._expiry.pop(key, None)
            return existed

    def _live_entry(self, key: str) -> Optional[CacheEntry]:
        """Get the stored entry, evicting it first if it has expired."""
        deadline = self._expiry.get(key)
        if deadline is not None and time.time() > deadline:
            self._data.pop(key, None)
            self._expiry.pop(key, None)
            return None
        return self._data.get(key)

    def _store(self, key: str, value: StoredValue, expiry: Optional[int], flags: int) -> None:
        if not isinstance(value, (bytes, str)):
            value = str(value)
        self._data[key] = CacheEntry(value=value, flags=flags, cas=next(self._cas_counter))

        # None keeps whatever expiry the key already had.
        if expiry is None:
            return
        deadline = resolve_deadline(expiry)
        if deadline is None:
            self._expiry.pop(key, None)
        else:
            self._expiry[key] = deadline

    def __repr__(self) -> str:
        return f"MemoryStore(entries={len(self._data)})"


__all__ = ["MemoryStore"]
