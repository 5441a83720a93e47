"""Tests for CacheRegistry and the YAML bootstrap loader.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from unittest.mock import MagicMock

import pytest

from shardcache_core.cache.cache import BackendFamily, Cache
from shardcache_core.config.loader import (
    build_registry,
    cache_config_from_options,
    load_registry,
)
from shardcache_core.errors import ConfigurationError
from shardcache_core.registry import CacheRegistry
from shardcache_core.store.memory import MemoryStore


class TestCacheRegistry:
    """Tests for CacheRegistry."""

    def test_default_scope(self):
        """Test a local default scope always exists."""
        registry = CacheRegistry()

        assert "default" in registry
        assert isinstance(registry["default"].servers[0], MemoryStore)
        assert registry.names() == ["default"]

    def test_register_and_lookup(self):
        """Test scopes resolve to their cache."""
        registry = CacheRegistry()
        sessions = Cache()
        registry["sessions"] = sessions

        assert registry["sessions"] is sessions
        assert "sessions" in registry
        assert len(registry) == 2

    def test_unknown_scope_uses_fallback(self):
        """Test unknown names resolve to the fallback scope."""
        registry = CacheRegistry()
        sessions = Cache()
        registry["sessions"] = sessions

        assert registry["missing"] is registry["default"]

        registry.fallback = "sessions"
        assert registry.fallback == "sessions"
        assert registry["missing"] is sessions

    def test_fallback_must_be_registered(self):
        """Test the fallback cannot name an unregistered scope."""
        registry = CacheRegistry()

        with pytest.raises(ConfigurationError):
            registry.fallback = "missing"

        assert registry.fallback == "default"
        assert registry["elsewhere"] is registry["default"]

    def test_registries_are_independent(self):
        """Test two registries do not share scopes."""
        first = CacheRegistry()
        second = CacheRegistry()
        first["sessions"] = Cache()

        assert "sessions" not in second
        assert first["default"] is not second["default"]

    def test_reset(self):
        """Test reset resets every cache."""
        registry = CacheRegistry()
        cache = MagicMock(spec=Cache)
        registry["remote"] = cache

        registry.reset()
        cache.reset.assert_called_once_with()


class TestCacheConfigFromOptions:
    """Tests for option mapping conversion."""

    def test_plain_options(self):
        """Test CacheConfig fields pass through."""
        config = cache_config_from_options(
            {"servers": ["local"], "namespace": "app", "default_expiry": 60, "disabled": False}
        )

        assert config.servers == ["local"]
        assert config.namespace == "app"
        assert config.default_expiry == 60

    def test_family_flags(self):
        """Test native and segmented flags choose the family."""
        assert cache_config_from_options({"native": True}).family is BackendFamily.ACCELERATED
        assert (
            cache_config_from_options({"native": True, "segment_large_values": True}).family
            is BackendFamily.SEGMENTED
        )
        assert cache_config_from_options({"family": "local"}).family is BackendFamily.LOCAL

    def test_symbol_hash_name(self):
        """Test a leading colon on the hash name is ignored."""
        assert cache_config_from_options({"hash": ":crc"}).hash == "crc"

    def test_nested_backup(self):
        """Test a backup mapping becomes its own cache."""
        config = cache_config_from_options({"servers": ["local"], "backup": {"servers": ["local"]}})

        assert isinstance(config.backup, Cache)

    def test_unknown_option(self):
        """Test unknown options raise."""
        with pytest.raises(ConfigurationError):
            cache_config_from_options({"ttl": 10})


class TestBuildRegistry:
    """Tests for registry bootstrap from a mapping."""

    def test_scopes(self):
        """Test each scope becomes a cache with defaults merged."""
        registry = build_registry(
            {
                "defaults": {"namespace": "app"},
                "sessions": {"servers": ["local"]},
                "reports": {"servers": ["local", "local"], "namespace": "reports"},
            }
        )

        assert registry["sessions"].namespace == "app"
        assert registry["reports"].namespace == "reports"
        assert len(registry["reports"].servers) == 2

    def test_environment_block(self):
        """Test only the named environment is used."""
        mapping = {
            "production": {"sessions": {"servers": ["local"]}},
            "test": {"other": {"servers": ["local"]}},
        }

        registry = build_registry(mapping, environment="production")

        assert "sessions" in registry
        assert "other" not in registry

    def test_missing_environment(self):
        """Test an absent environment leaves only the default scope."""
        registry = build_registry({"production": {"sessions": {"servers": ["local"]}}}, environment="staging")

        assert registry.names() == ["default"]

    def test_direct_servers_configure_default(self):
        """Test a block naming servers configures the default scope."""
        registry = build_registry({"production": {"servers": ["local"], "namespace": "main"}}, environment="production")

        assert registry["default"].namespace == "main"
        assert registry.names() == ["default"]

    def test_disabled(self):
        """Test disabled and empty scopes are skipped."""
        registry = build_registry(
            {
                "sessions": {"servers": ["local"], "disabled": True},
                "empty": {},
                "reports": {"servers": ["local"]},
            }
        )

        assert "sessions" not in registry
        assert "empty" not in registry
        assert "reports" in registry

    def test_disabled_environment(self):
        """Test a disabled environment registers nothing."""
        registry = build_registry(
            {"production": {"disabled": True, "sessions": {"servers": ["local"]}}},
            environment="production",
        )

        assert "sessions" not in registry

    def test_populates_given_registry(self):
        """Test an existing registry is populated in place."""
        registry = CacheRegistry()

        assert build_registry({"sessions": {"servers": ["local"]}}, registry) is registry
        assert "sessions" in registry

    def test_invalid_scope(self):
        """Test non-mapping scope options raise."""
        with pytest.raises(ConfigurationError):
            build_registry({"sessions": ["local"]})


class TestLoadRegistry:
    """Tests for YAML loading."""

    def test_load_yaml(self, tmp_path):
        """Test scopes are read from a YAML file."""
        path = tmp_path / "shardcache.yml"
        path.write_text(
            "defaults:\n"
            "  default_expiry: 300\n"
            "production:\n"
            "  sessions:\n"
            "    servers: [local]\n"
            "    namespace: sessions\n"
        )

        registry = load_registry(path, environment="production")

        assert registry["sessions"].namespace == "sessions"
        assert registry["sessions"].default_expiry == 300

    def test_environment_variable(self, tmp_path, monkeypatch):
        """Test the environment defaults to SHARDCACHE_ENV."""
        path = tmp_path / "shardcache.yml"
        path.write_text("staging:\n  sessions:\n    servers: [local]\n")
        monkeypatch.setenv("SHARDCACHE_ENV", "staging")

        assert "sessions" in load_registry(path)

    def test_missing_file(self, tmp_path):
        """Test a missing file yields only the default scope."""
        registry = load_registry(tmp_path / "absent.yml")

        assert registry.names() == ["default"]

    def test_non_mapping_file(self, tmp_path):
        """Test a YAML document that is not a mapping raises."""
        path = tmp_path / "shardcache.yml"
        path.write_text("- local\n- local\n")

        with pytest.raises(ConfigurationError):
            load_registry(path)
