"""ShardCache Registry - Named Cache Instances.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterator, List

from shardcache_core.cache.cache import Cache
from shardcache_core.errors import ConfigurationError
from shardcache_core.store.memory import MemoryStore

logger = logging.getLogger(__name__)

DEFAULT_SCOPE = "default"


class CacheRegistry:
    """Maps scope names to Cache instances.

    A ``"default"`` scope over an in-process MemoryStore always exists.
    Lookups for unregistered scopes resolve to the fallback scope, which
    starts out as ``"default"``.

    Build one registry at process start and pass it to whatever needs a
    cache:

        caches = CacheRegistry()
        caches["sessions"] = Cache(servers=["cache-1:6379"])
        caches.fallback = "sessions"

        caches["sessions"].get("sid:42")
        caches["unknown"]          # -> the "sessions" cache
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._caches: Dict[str, Cache] = {DEFAULT_SCOPE: Cache(servers=[MemoryStore()])}
        self._fallback = DEFAULT_SCOPE

    @property
    def fallback(self) -> str:
        """Get the scope used for unregistered names."""
        return self._fallback

    @fallback.setter
    def fallback(self, scope: str) -> None:
        with self._lock:
            if str(scope) not in self._caches:
                raise ConfigurationError(f"Cannot fall back to unregistered cache scope {scope!r}")
            self._fallback = str(scope)

    def names(self) -> List[str]:
        """List registered scope names."""
        with self._lock:
            return list(self._caches)

    def reset(self) -> None:
        """Reset every registered cache."""
        with self._lock:
            caches = list(self._caches.values())
        for cache in caches:
            cache.reset()

    def __getitem__(self, scope: str) -> Cache:
        with self._lock:
            cache = self._caches.get(str(scope))
            if cache is None:
                cache = self._caches[self._fallback]
            return cache

    def __setitem__(self, scope: str, cache: Cache) -> None:
        with self._lock:
            self._caches[str(scope)] = cache
        logger.debug(f"Registered cache scope {scope!r}: {cache!r}")

    def __contains__(self, scope: object) -> bool:
        return str(scope) in self._caches

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._caches)

    def __repr__(self) -> str:
        return f"CacheRegistry(scopes={self.names()}, fallback={self._fallback!r})"


__all__ = ["CacheRegistry", "DEFAULT_SCOPE"]
