"""Tests for key codec and expiry normalization.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import hashlib
import time
from datetime import date, datetime, timedelta

import pytest

from shardcache_core.cache.expiry import EXPIRY_SECONDS_LIMIT, parse_expiry, resolve_deadline
from shardcache_core.cache.keys import KeyCodec
from shardcache_core.errors import ClientError, ConfigurationError


class TestKeyCodec:
    """Tests for KeyCodec."""

    def test_normalize(self):
        """Test keys are converted to strings."""
        assert KeyCodec.normalize("key") == "key"
        assert KeyCodec.normalize(b"key") == "key"
        assert KeyCodec.normalize(12) == "12"

    def test_prefix_for(self):
        """Test namespace prefixes."""
        assert KeyCodec.prefix_for("app") == "app:"
        assert KeyCodec.prefix_for(None) == ""

    def test_routing_key(self):
        """Test the namespace joins the routing key only when asked."""
        assert KeyCodec.routing_key("k", "app") == "app:k"
        assert KeyCodec.routing_key("k", "app", hash_with_prefix=False) == "k"
        assert KeyCodec.routing_key("k", None) == "k"

    def test_storage_key(self):
        """Test storage keys carry the prefix."""
        assert KeyCodec.storage_key("k", "app:") == "app:k"
        assert KeyCodec.storage_key("k") == "k"

    def test_storage_key_at_limit(self):
        """Test a key of exactly the limit is kept verbatim."""
        key = "k" * 250
        assert KeyCodec.storage_key(key) == key

    def test_long_key_digest(self):
        """Test keys over the limit are replaced by their MD5 digest."""
        key = "k" * 251
        expected = hashlib.md5(("app:" + key).encode("utf-8")).hexdigest()

        assert KeyCodec.storage_key(key, "app:") == expected

    def test_length_counts_bytes(self):
        """Test the limit applies to the UTF-8 encoding."""
        key = "é" * 200
        assert len(KeyCodec.storage_key(key)) == 32

    def test_empty_key(self):
        """Test empty keys are rejected."""
        with pytest.raises(ClientError):
            KeyCodec.storage_key("", "app:")


class TestParseExpiry:
    """Tests for expiry normalization."""

    def test_none(self):
        """Test None passes through."""
        assert parse_expiry(None) is None

    def test_seconds(self):
        """Test relative seconds up to the limit."""
        assert parse_expiry(0) == 0
        assert parse_expiry(60) == 60
        assert parse_expiry(EXPIRY_SECONDS_LIMIT) == EXPIRY_SECONDS_LIMIT

    def test_fractional_seconds_round_up(self):
        """Test fractional seconds round up instead of meaning never."""
        assert parse_expiry(0.5) == 1
        assert parse_expiry(59.1) == 60
        assert parse_expiry(60.0) == 60

    def test_seconds_over_limit(self):
        """Test seconds beyond 30 days raise."""
        with pytest.raises(ConfigurationError):
            parse_expiry(EXPIRY_SECONDS_LIMIT + 1)

    def test_datetime(self):
        """Test datetimes become epoch seconds."""
        moment = datetime(2030, 1, 1, 12, 0, 0)
        assert parse_expiry(moment) == int(moment.timestamp())

    def test_date(self):
        """Test dates become local midnight epoch seconds."""
        day = date(2030, 1, 1)
        assert parse_expiry(day) == int(time.mktime(day.timetuple()))

    def test_timedelta(self):
        """Test timedeltas become absolute deadlines."""
        before = int(time.time())
        result = parse_expiry(timedelta(days=60))

        assert before + 60 * 86400 - 1 <= result <= int(time.time()) + 60 * 86400 + 1

    def test_unsupported(self):
        """Test other types raise."""
        with pytest.raises(ConfigurationError):
            parse_expiry("10")
        with pytest.raises(ConfigurationError):
            parse_expiry(True)


class TestResolveDeadline:
    """Tests for deadline resolution."""

    def test_never(self):
        """Test 0 and None never expire."""
        assert resolve_deadline(0) is None
        assert resolve_deadline(None) is None

    def test_relative_and_absolute(self):
        """Test relative seconds are added to now, larger values are epochs."""
        assert resolve_deadline(10, now=1000.0) == 1010.0
        assert resolve_deadline(1_900_000_000, now=1000.0) == 1_900_000_000.0
