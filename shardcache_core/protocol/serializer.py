"""ShardCache Serializer - Value Marshalling.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

The facade marshals every non-raw value with ``dumps`` before it reaches a
backend and unmarshals it with ``loads`` on the way out. Backends may hand
payloads back as text, so ``loads`` accepts both ``bytes`` and ``str``.
Any exception raised by ``loads`` marks the stored entry as corrupt.
"""

from __future__ import annotations

import json
import logging
import pickle
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

import msgpack

logger = logging.getLogger(__name__)

Payload = Union[bytes, str]


class Serializer(ABC):
    """Marshals cache values to and from bytes."""

    #: Name used to select the serializer in configuration
    format_name: str = ""

    #: Codec for turning text payloads back into bytes
    text_encoding: str = "latin-1"

    @abstractmethod
    def dumps(self, value: Any) -> bytes:
        """Marshal a value for storage."""

    @abstractmethod
    def loads(self, data: bytes) -> Any:
        """Unmarshal stored bytes."""

    def unmarshal(self, data: Payload) -> Any:
        """Unmarshal a payload that may have come back as text."""
        if isinstance(data, str):
            data = data.encode(self.text_encoding)
        return self.loads(data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(format={self.format_name!r})"


class PickleSerializer(Serializer):
    """Pickle marshalling; any Python object, trusted caches only."""

    format_name = "pickle"

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL):
        self.protocol = protocol

    def dumps(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=self.protocol)

    def loads(self, data: bytes) -> Any:
        return pickle.loads(data)


class JSONSerializer(Serializer):
    """JSON marshalling.

    Readable by non-Python clients sharing the cache. Tuples come back as
    lists, and values JSON cannot express are stored by their ``str()``.
    """

    format_name = "json"
    text_encoding = "utf-8"

    def dumps(self, value: Any) -> bytes:
        return json.dumps(value, default=str).encode("utf-8")

    def loads(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))


class MsgPackSerializer(Serializer):
    """MessagePack marshalling; compact, keeps bytes and text distinct."""

    format_name = "msgpack"

    def dumps(self, value: Any) -> bytes:
        return msgpack.packb(value, use_bin_type=True)

    def loads(self, data: bytes) -> Any:
        return msgpack.unpackb(data, raw=False)


DEFAULT_FORMAT = PickleSerializer.format_name

_serializers: Dict[str, Serializer] = {}


def register_serializer(serializer: Serializer) -> None:
    """Make a serializer selectable by its format name."""
    if serializer.format_name in _serializers:
        logger.debug(f"Replacing serializer for format {serializer.format_name!r}")
    _serializers[serializer.format_name] = serializer


def available_formats() -> List[str]:
    """List selectable format names."""
    return sorted(_serializers)


def get_serializer(format_name: Optional[str] = None) -> Serializer:
    """Get a serializer by format name.

    Args:
        format_name: Format name, or None for pickle

    Returns:
        Serializer instance

    Raises:
        KeyError: If no serializer has that name
    """
    name = format_name or DEFAULT_FORMAT
    try:
        return _serializers[name]
    except KeyError:
        raise KeyError(f"Unknown serializer format: {name}") from None


for _serializer in (PickleSerializer(), JSONSerializer(), MsgPackSerializer()):
    register_serializer(_serializer)


__all__ = [
    "Serializer",
    "PickleSerializer",
    "JSONSerializer",
    "MsgPackSerializer",
    "DEFAULT_FORMAT",
    "register_serializer",
    "available_formats",
    "get_serializer",
]
