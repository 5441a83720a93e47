"""Protocol module - Value marshalling."""

from shardcache_core.protocol.serializer import (
    DEFAULT_FORMAT,
    JSONSerializer,
    MsgPackSerializer,
    PickleSerializer,
    Serializer,
    available_formats,
    get_serializer,
    register_serializer,
)

__all__ = [
    "DEFAULT_FORMAT",
    "JSONSerializer",
    "MsgPackSerializer",
    "PickleSerializer",
    "Serializer",
    "available_formats",
    "get_serializer",
    "register_serializer",
]
