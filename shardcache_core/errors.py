"""ShardCache Errors - Exception Hierarchy.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from typing import Optional


class CacheError(Exception):
    """Base exception for all cache errors."""

    def __init__(self, message: str = "") -> None:
        self.message = message
        super().__init__(message)


class CacheConnectionError(CacheError):
    """Raised when a backend is unreachable or the transport fails.

    Wraps the underlying cause so callers can inspect it.
    """

    def __init__(self, cause: "BaseException | str") -> None:
        if isinstance(cause, str):
            self.cause: Optional[BaseException] = None
            super().__init__(cause)
        else:
            self.cause = cause
            super().__init__(f"({type(cause).__name__}) {cause}")
            self.__cause__ = cause


class ServerError(CacheError):
    """Raised when a backend rejects an otherwise well-formed request."""


class ClientError(CacheError):
    """Raised for malformed requests, such as an empty or oversized key."""


class UnmarshalError(CacheError):
    """Raised when stored bytes cannot be decoded back into a value."""

    def __init__(self, key: str, message: str = "") -> None:
        self.key = key
        super().__init__(message or f"Could not unmarshal value for key '{key}'")


class ConfigurationError(CacheError, ValueError):
    """Raised immediately for invalid configuration or option values."""


class LockTimeoutError(CacheError):
    """Raised when a lock cannot be acquired before the caller's deadline."""

    def __init__(self, key: str, timeout: float) -> None:
        self.key = key
        self.timeout = timeout
        super().__init__(f"Failed to acquire lock '{key}' within {timeout:.1f}s.")


__all__ = [
    "CacheError",
    "CacheConnectionError",
    "ServerError",
    "ClientError",
    "UnmarshalError",
    "ConfigurationError",
    "LockTimeoutError",
]
