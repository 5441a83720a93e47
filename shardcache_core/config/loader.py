"""ShardCache Config Loader - Registry Bootstrap from YAML.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

The file maps scope names to Cache options, optionally nested under an
environment name, with a shared ``defaults`` block:

    defaults:
      namespace: app
      default_expiry: 300

    production:
      sessions:
        servers: ["cache-1:6379", "cache-2:6379"]
      reports:
        servers: ["cache-3:6379"]
        disabled: true

A block that names ``servers`` (or ``server``) directly configures the
``"default"`` scope instead.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from shardcache_core.cache.cache import BackendFamily, Cache, CacheConfig
from shardcache_core.errors import ConfigurationError
from shardcache_core.registry import DEFAULT_SCOPE, CacheRegistry

logger = logging.getLogger(__name__)

ENVIRONMENT_VARIABLE = "SHARDCACHE_ENV"

_CONFIG_FIELDS = set(CacheConfig.__dataclass_fields__)


def cache_config_from_options(options: Mapping[str, Any]) -> CacheConfig:
    """Convert a plain option mapping into a CacheConfig.

    Besides the CacheConfig fields this accepts ``native: true`` (the
    accelerated family), ``segment_large_values: true`` (the segmented
    family) and a nested ``backup`` mapping, which becomes its own Cache.

    Args:
        options: Option mapping, as read from YAML

    Returns:
        CacheConfig instance

    Raises:
        ConfigurationError: On unknown options or values
    """
    options = dict(options)
    options.pop("disabled", None)

    native = bool(options.pop("native", False))
    segmented = bool(options.pop("segment_large_values", False))
    if segmented:
        options["family"] = BackendFamily.SEGMENTED
    elif native:
        options["family"] = BackendFamily.ACCELERATED

    backup = options.get("backup")
    if isinstance(backup, Mapping):
        options["backup"] = Cache(cache_config_from_options(backup))

    if isinstance(options.get("hash"), str):
        options["hash"] = options["hash"].lstrip(":")

    unknown = sorted(set(options) - _CONFIG_FIELDS)
    if unknown:
        raise ConfigurationError(f"Unknown cache option(s): {', '.join(unknown)}")
    return CacheConfig(**options)


def build_registry(
    mapping: Optional[Mapping[str, Any]],
    registry: Optional[CacheRegistry] = None,
    environment: Optional[str] = None,
) -> CacheRegistry:
    """Populate a registry from a configuration mapping.

    Args:
        mapping: Parsed configuration
        registry: Registry to populate (a new one by default)
        environment: Environment block to use, if the mapping is split by environment

    Returns:
        The populated registry
    """
    registry = registry if registry is not None else CacheRegistry()
    config = dict(mapping or {})
    defaults = dict(config.pop("defaults", None) or {})

    block = config.get(environment) if environment is not None else config
    if block and not isinstance(block, Mapping):
        raise ConfigurationError(f"Cache configuration must be a mapping, got {type(block).__name__}")
    if not block or block.get("disabled"):
        logger.info(f"No cache configuration for environment {environment!r}")
        return registry

    if "servers" in block or "server" in block:
        registry[DEFAULT_SCOPE] = Cache(cache_config_from_options({**defaults, **block}))
        logger.info(f"Registered cache scope {DEFAULT_SCOPE!r}")
        return registry

    for scope, options in block.items():
        if not options or (isinstance(options, Mapping) and options.get("disabled")):
            logger.info(f"Skipping disabled cache scope {scope!r}")
            continue
        if not isinstance(options, Mapping):
            raise ConfigurationError(f"Options for cache scope {scope!r} must be a mapping")
        registry[scope] = Cache(cache_config_from_options({**defaults, **options}))
        logger.info(f"Registered cache scope {scope!r}")
    return registry


def load_registry(
    path: Union[str, Path],
    environment: Optional[str] = None,
    registry: Optional[CacheRegistry] = None,
) -> CacheRegistry:
    """Load a registry from a YAML file.

    Args:
        path: YAML file path; a missing file leaves only the default scope
        environment: Environment block to use (defaults to $SHARDCACHE_ENV)
        registry: Registry to populate

    Returns:
        The populated registry
    """
    registry = registry if registry is not None else CacheRegistry()
    if environment is None:
        environment = os.environ.get(ENVIRONMENT_VARIABLE)

    path = Path(path)
    if not path.exists():
        logger.info(f"Cache config {path} not found; using the default scope only")
        return registry

    with open(path, "r") as f:
        data: Dict[str, Any] = yaml.safe_load(f) or {}
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Cache config {path} must contain a mapping")
    return build_registry(data, registry, environment)


__all__ = [
    "ENVIRONMENT_VARIABLE",
    "build_registry",
    "load_registry",
    "cache_config_from_options",
]
