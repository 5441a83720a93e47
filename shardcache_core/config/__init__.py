"""Config module - Registry bootstrap."""

from shardcache_core.config.loader import (
    ENVIRONMENT_VARIABLE,
    build_registry,
    cache_config_from_options,
    load_registry,
)

__all__ = [
    "ENVIRONMENT_VARIABLE",
    "build_registry",
    "cache_config_from_options",
    "load_registry",
]
