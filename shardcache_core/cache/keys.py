"""ShardCache Keys - Key Codec for Routing and Storage.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Both the facade (when picking a shard) and every backend (when building
the key it actually stores under) go through this module, so the two
never disagree about what a namespaced key looks like.
"""

from __future__ import annotations

import hashlib
from typing import Any, Optional

from shardcache_core.errors import ClientError

MAX_KEY_LENGTH = 250


def _byte_length(key: str) -> int:
    return len(key.encode("utf-8"))


class KeyCodec:
    """Builds routing keys and on-wire storage keys.

    Example:
        KeyCodec.storage_key("user:1", "app:")   # "app:user:1"
        KeyCodec.routing_key("user:1", "app", hash_with_prefix=True)
    """

    max_length = MAX_KEY_LENGTH

    @staticmethod
    def normalize(key: Any) -> str:
        """Convert an arbitrary key object to its string form.

        Args:
            key: Key object (str, bytes, int, ...)

        Returns:
            String key
        """
        if isinstance(key, str):
            return key
        if isinstance(key, (bytes, bytearray)):
            return bytes(key).decode("utf-8")
        return str(key)

    @staticmethod
    def prefix_for(namespace: Optional[str]) -> str:
        """Get the storage prefix for a namespace.

        Args:
            namespace: Namespace or None

        Returns:
            "<namespace>:" or empty string
        """
        return f"{namespace}:" if namespace else ""

    @staticmethod
    def routing_key(
        key: str,
        namespace: Optional[str] = None,
        hash_with_prefix: bool = True,
    ) -> str:
        """Get the key used for shard selection.

        The routing key is never digested, even when the storage key is.

        Args:
            key: Raw key
            namespace: Current namespace
            hash_with_prefix: Whether the namespace participates in hashing

        Returns:
            Routing key
        """
        if hash_with_prefix and namespace:
            return f"{namespace}:{key}"
        return key

    @classmethod
    def storage_key(cls, key: str, prefix: Optional[str] = None) -> str:
        """Get the canonical key a backend stores under.

        Args:
            key: Raw key
            prefix: Namespace prefix

        Returns:
            Prefixed key, or its MD5 digest when longer than the limit

        Raises:
            ClientError: If the key is empty or still too long
        """
        if len(key) == 0:
            raise ClientError("length zero key not permitted")

        key = f"{prefix or ''}{key}"
        if _byte_length(key) > cls.max_length:
            key = hashlib.md5(key.encode("utf-8")).hexdigest()
        if _byte_length(key) > cls.max_length:
            raise ClientError(f"key too long {key!r}")
        return key


__all__ = ["KeyCodec", "MAX_KEY_LENGTH"]
