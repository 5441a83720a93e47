"""ShardCache Options - Per-Call Option Structures.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Every facade operation takes one of these dataclasses. Callers may pass an
instance, a plain mapping, keyword overrides, or any combination; the result
is built and validated once at the call boundary by ``build``.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum, auto
from typing import Any, Callable, Mapping, Optional, TypeVar

from shardcache_core.cache.expiry import parse_expiry
from shardcache_core.errors import ConfigurationError

LOCK_TIMEOUT = 5
WRITE_LOCK_WAIT = 1.0

T = TypeVar("T", bound="CallOptions")


class WriteErrorPolicy(Enum):
    """What get_some does when storing a fetched value fails."""

    WARN = auto()    # Log a warning and keep going
    RAISE = auto()   # Propagate, aborting the whole call


class CallOptions:
    """Shared construction logic for per-call option dataclasses."""

    @classmethod
    def build(cls: type[T], options: Any = None, **overrides: Any) -> T:
        """Build options from an instance, a mapping and/or keywords.

        Args:
            options: Existing instance, mapping of fields, or None
            **overrides: Field overrides

        Returns:
            Validated options instance

        Raises:
            ConfigurationError: On unknown fields or invalid values
        """
        if options is None:
            base = cls()
        elif isinstance(options, cls):
            base = options
        elif isinstance(options, Mapping):
            overrides = {**options, **overrides}
            base = cls()
        else:
            raise ConfigurationError(
                f"{cls.__name__} expects an instance or a mapping, got {type(options).__name__}"
            )

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigurationError(f"Unknown {cls.__name__} option(s): {', '.join(unknown)}")

        return replace(base, **overrides) if overrides else base


@dataclass(frozen=True)
class ReadOptions(CallOptions):
    """Options for get/read.

    Attributes:
        raw: Skip deserialization
        cas: Request a CAS token with the value
        meta: Return the full CacheEntry instead of the bare value
        expiry: Refresh the entry's expiry as part of the read
    """

    raw: bool = False
    cas: bool = False
    meta: bool = False
    expiry: Any = None

    def __post_init__(self) -> None:
        parse_expiry(self.expiry)


@dataclass(frozen=True)
class WriteOptions(CallOptions):
    """Options for set/add/replace/cas.

    Attributes:
        raw: Store the value as given, without serialization
        expiry: Relative seconds, datetime, date or timedelta
        flags: Opaque 32-bit tag stored with the value
        cas: CAS token (cas only)
    """

    raw: bool = False
    expiry: Any = None
    flags: int = 0
    cas: Optional[int] = None

    def __post_init__(self) -> None:
        parse_expiry(self.expiry)
        if not 0 <= int(self.flags) <= 0xFFFFFFFF:
            raise ConfigurationError(f"flags must fit in 32 bits, got {self.flags}")


@dataclass(frozen=True)
class BatchOptions(CallOptions):
    """Options for get_some.

    Attributes:
        raw: Skip (de)serialization
        cas: Request CAS tokens on the batch read
        meta: Return CacheEntry objects
        disable: Skip both the cache read and the cache write
        disable_write: Read from cache but never store fetched values
        validation: Predicate (key, value) -> bool; failing hits count as missing
        write_errors: Policy for store failures of fetched values
    """

    raw: bool = False
    cas: bool = False
    meta: bool = False
    disable: bool = False
    disable_write: bool = False
    validation: Optional[Callable[[str, Any], bool]] = None
    write_errors: WriteErrorPolicy = WriteErrorPolicy.WARN

    def __post_init__(self) -> None:
        if not isinstance(self.write_errors, WriteErrorPolicy):
            raise ConfigurationError(f"write_errors must be a WriteErrorPolicy, got {self.write_errors!r}")

    def read_options(self) -> ReadOptions:
        """Get the read options for the batch read phase."""
        return ReadOptions(raw=self.raw, cas=self.cas, meta=self.meta)


@dataclass(frozen=True)
class FlushOptions(CallOptions):
    """Options for flush_all.

    Attributes:
        delay: Seconds before the first backend flushes
        interval: Extra seconds added per subsequent backend
    """

    delay: int = 0
    interval: int = 0

    def __post_init__(self) -> None:
        if self.delay < 0 or self.interval < 0:
            raise ConfigurationError("flush delay and interval must be non-negative")


@dataclass(frozen=True)
class LockOptions(CallOptions):
    """Options for lock/with_lock.

    Attributes:
        expiry: Lock lifetime; defaults to LOCK_TIMEOUT seconds
        interval: Seconds between acquisition attempts
        timeout: Give up with LockTimeoutError after this many seconds
        ignore: Return immediately instead of waiting when contended
        keep: Leave the lock held after the body finishes
    """

    expiry: Any = None
    interval: float = WRITE_LOCK_WAIT
    timeout: Optional[float] = None
    ignore: bool = False
    keep: bool = False

    def __post_init__(self) -> None:
        parse_expiry(self.expiry)
        if self.interval < 0:
            raise ConfigurationError("lock retry interval must be non-negative")
        if self.timeout is not None and self.timeout < 0:
            raise ConfigurationError("lock timeout must be non-negative")


__all__ = [
    "LOCK_TIMEOUT",
    "WRITE_LOCK_WAIT",
    "WriteErrorPolicy",
    "CallOptions",
    "ReadOptions",
    "WriteOptions",
    "BatchOptions",
    "FlushOptions",
    "LockOptions",
]
