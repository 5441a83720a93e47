"""ShardCache Router - Modulo Shard Selection.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import hashlib
import logging
import zlib
from typing import Dict, Iterable, List, Sequence, Tuple

from shardcache_core.errors import ConfigurationError
from shardcache_core.store.backend import StorageBackend

logger = logging.getLogger(__name__)

HASH_FUNCTIONS = ("crc", "md5")


class ShardRouter:
    """Maps keys onto a fixed, ordered set of backends.

    The shard index is ``((checksum(key) >> 16) & 0x7FFF) % len(backends)``,
    matching the layout used by existing memcached client deployments.
    This is plain modulo routing; adding or removing a backend remaps most
    keys.

    Example:
        router = ShardRouter([store_a, store_b, store_c])
        backend = router.backend_for("app:user:1")
    """

    def __init__(
        self,
        backends: Sequence[StorageBackend],
        hash_function: str = "crc",
    ):
        """Initialize router.

        Args:
            backends: Ordered backends; the order is part of the routing
            hash_function: "crc" (default) or "md5"
        """
        if not backends:
            raise ConfigurationError("at least one backend is required")
        if hash_function not in HASH_FUNCTIONS:
            raise ConfigurationError(f"Unsupported hash function: {hash_function}")

        self._backends: Tuple[StorageBackend, ...] = tuple(backends)
        self.hash_function = hash_function
        logger.debug(f"Routing over {len(self._backends)} backends with {hash_function} hashing")

    @property
    def backends(self) -> Tuple[StorageBackend, ...]:
        """Get the backends in routing order."""
        return self._backends

    def checksum(self, key: str) -> int:
        """Compute the 32-bit checksum of a routing key.

        Args:
            key: Routing key

        Returns:
            Unsigned 32-bit checksum
        """
        data = key.encode("utf-8")
        if self.hash_function == "md5":
            return int.from_bytes(hashlib.md5(data).digest()[:4], "big")
        return zlib.crc32(data) & 0xFFFFFFFF

    def index_for(self, key: str) -> int:
        """Get the shard index for a routing key.

        Args:
            key: Routing key

        Returns:
            Index into ``backends``
        """
        return ((self.checksum(key) >> 16) & 0x7FFF) % len(self._backends)

    def backend_for(self, key: str) -> StorageBackend:
        """Get the backend responsible for a routing key."""
        return self._backends[self.index_for(key)]

    def group(self, keys: Iterable[Tuple[str, str]]) -> Dict[StorageBackend, List[str]]:
        """Group keys by backend.

        Args:
            keys: (key, routing_key) pairs

        Returns:
            Dict of backend -> keys, in first-seen order
        """
        grouped: Dict[StorageBackend, List[str]] = {}
        for key, routing_key in keys:
            grouped.setdefault(self.backend_for(routing_key), []).append(key)
        return grouped

    def get_key_distribution(self, keys: Iterable[str]) -> Dict[str, int]:
        """Get distribution of routing keys across backends.

        Args:
            keys: Routing keys to check

        Returns:
            Dict of backend name -> key count
        """
        distribution: Dict[str, int] = {}
        for key in keys:
            name = self.backend_for(key).name
            distribution[name] = distribution.get(name, 0) + 1
        return distribution

    def __len__(self) -> int:
        return len(self._backends)

    def __repr__(self) -> str:
        return f"ShardRouter(backends={len(self._backends)}, hash={self.hash_function})"


__all__ = ["ShardRouter", "HASH_FUNCTIONS"]
