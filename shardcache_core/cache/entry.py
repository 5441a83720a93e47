"""ShardCache Entry - Stored Value with Flags and CAS Token.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional


@dataclass
class CacheEntry:
    """A value as held by a backend.

    Attributes:
        value: Stored payload (bytes or text); the facade swaps in the
            deserialized value when returning metadata to callers
        flags: Opaque 32-bit tag, carried but never interpreted
        cas: Version token for optimistic writes, if the backend issued one
    """

    value: Any
    flags: int = 0
    cas: Optional[int] = None

    def copy(self, **changes: Any) -> "CacheEntry":
        """Return a shallow copy, optionally with fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation
        """
        return {"value": self.value, "flags": self.flags, "cas": self.cas}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheEntry":
        """Create from dictionary.

        Args:
            data: Dictionary data

        Returns:
            CacheEntry instance
        """
        return cls(
            value=data["value"],
            flags=data.get("flags", 0),
            cas=data.get("cas"),
        )

    def __repr__(self) -> str:
        return f"CacheEntry(value={self.value!r}, flags={self.flags}, cas={self.cas})"


__all__ = ["CacheEntry"]
