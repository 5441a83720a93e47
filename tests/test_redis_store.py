"""Tests for RedisStore.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from unittest.mock import MagicMock

import msgpack
import pytest
import redis

from shardcache_core.errors import (
    CacheConnectionError,
    ConfigurationError,
    ServerError,
    UnmarshalError,
)
from shardcache_core.store.redis import RedisConfig, RedisStore


def envelope(value, flags=0, cas=1):
    return msgpack.packb([value, flags, cas], use_bin_type=True)


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def store(client):
    store = RedisStore(RedisConfig(host="cache-1", port=6379))
    store._client = client
    return store


@pytest.fixture
def pipe(client):
    """Run WATCH transactions against a mock pipeline."""
    pipe = MagicMock()

    def transaction(func, *watches, value_from_callable=False):
        return func(pipe)

    client.transaction.side_effect = transaction
    return pipe


class TestRedisConfig:
    """Tests for server descriptors."""

    def test_from_string(self):
        """Test host:port:weight parsing."""
        config = RedisConfig.from_descriptor("cache-2:6380:3")

        assert config.host == "cache-2"
        assert config.port == 6380
        assert config.weight == 3

    def test_from_host_only(self):
        """Test the default port is kept."""
        assert RedisConfig.from_descriptor("cache-2").port == 6379

    def test_from_mapping(self):
        """Test mapping descriptors."""
        config = RedisConfig.from_descriptor({"host": "cache-3", "db": 2})

        assert config.host == "cache-3"
        assert config.db == 2

    def test_unknown_mapping_key(self):
        """Test unknown descriptor options raise."""
        with pytest.raises(ConfigurationError):
            RedisConfig.from_descriptor({"hostname": "cache-3"})


class TestRedisStore:
    """Tests for RedisStore against a mock client."""

    def test_name(self, store):
        """Test the backend name is host:port."""
        assert store.name == "cache-1:6379"

    def test_set_packs_envelope(self, store, client):
        """Test set stores value and flags with a relative expiry."""
        assert store.set("key", b"data", expiry=60, flags=5) == b"data"

        args, kwargs = client.set.call_args
        assert args[0] == "key"
        value, flags, cas = msgpack.unpackb(args[1], raw=False)
        assert (value, flags) == (b"data", 5)
        assert isinstance(cas, int)
        assert kwargs == {"ex": 60}

    def test_expiry_arguments(self, store, client):
        """Test never, keep and absolute expiry forms."""
        store.set("a", "x", expiry=0)
        assert client.set.call_args[1] == {}

        store.set("b", "x", expiry=None)
        assert client.set.call_args[1] == {"keepttl": True}

        store.set("c", "x", expiry=1_900_000_000)
        assert client.set.call_args[1] == {"exat": 1_900_000_000}

    def test_prefixed_keys(self, store, client):
        """Test the namespace prefix is applied to storage keys."""
        store.prefix = "app:"
        client.get.return_value = None

        store.get("key")
        client.get.assert_called_once_with("app:key")

    def test_get(self, store, client):
        """Test get unpacks the envelope."""
        client.get.return_value = envelope("value", flags=2, cas=77)

        entry = store.get("key")
        assert entry.value == "value"
        assert entry.flags == 2
        assert entry.cas is None
        assert store.gets("key").cas == 77

    def test_get_miss(self, store, client):
        """Test get returns None on a miss."""
        client.get.return_value = None

        assert store.get("key") is None

    def test_get_corrupt(self, store, client):
        """Test undecodable envelopes raise UnmarshalError."""
        client.get.return_value = msgpack.packb("oops")

        with pytest.raises(UnmarshalError) as exc_info:
            store.get("key")
        assert exc_info.value.key == "key"

    def test_get_many(self, store, client):
        """Test get_many uses one MGET and drops corrupt entries."""
        client.mget.return_value = [envelope("a"), None, msgpack.packb("oops")]
        client.delete.return_value = 1

        result = store.get_many(["k1", "k2", "k3"])

        client.mget.assert_called_once_with(["k1", "k2", "k3"])
        assert {k: e.value for k, e in result.items()} == {"k1": "a"}
        client.delete.assert_called_once_with("k3")

    def test_add_and_replace(self, store, client):
        """Test add and replace map onto NX and XX."""
        client.set.return_value = True
        assert store.add("key", "v") == "v"
        assert client.set.call_args[1]["nx"] is True

        client.set.return_value = None
        assert store.replace("key", "v") is None
        assert client.set.call_args[1]["xx"] is True

    def test_delete(self, store, client):
        """Test delete reports whether the key existed."""
        client.delete.return_value = 1
        assert store.delete("key")

        client.delete.return_value = 0
        assert not store.delete("key")

    def test_cas(self, store, pipe):
        """Test cas only writes when the token matches."""
        pipe.get.return_value = envelope("old", cas=42)

        assert store.cas("key", "new", 41) is None
        pipe.set.assert_not_called()

        assert store.cas("key", "new", 42, expiry=30) == "new"
        args, kwargs = pipe.set.call_args
        assert msgpack.unpackb(args[1], raw=False)[0] == "new"
        assert kwargs == {"ex": 30}

    def test_incr(self, store, pipe):
        """Test incr inside a transaction keeps the ttl."""
        pipe.get.return_value = envelope(b"10")

        assert store.incr("key", 5) == 15
        args, kwargs = pipe.set.call_args
        assert msgpack.unpackb(args[1], raw=False)[0] == b"15"
        assert kwargs == {"keepttl": True}

    def test_incr_non_numeric(self, store, pipe):
        """Test incr ignores non-numeric values."""
        pipe.get.return_value = envelope("abc")

        assert store.incr("key") is None
        pipe.set.assert_not_called()

    def test_append(self, store, pipe):
        """Test append concatenates in place."""
        pipe.get.return_value = envelope("ab", flags=3)

        assert store.append("key", "c")
        value, flags, _ = msgpack.unpackb(pipe.set.call_args[0][1], raw=False)
        assert (value, flags) == ("abc", 3)

    def test_prepend_missing(self, store, pipe):
        """Test prepend on a missing key."""
        pipe.get.return_value = None

        assert not store.prepend("key", "x")

    def test_connection_error(self, store, client):
        """Test transport failures become CacheConnectionError."""
        client.get.side_effect = redis.exceptions.ConnectionError("refused")

        with pytest.raises(CacheConnectionError) as exc_info:
            store.get("key")
        assert isinstance(exc_info.value.cause, redis.exceptions.ConnectionError)
        assert "(ConnectionError) refused" in str(exc_info.value)

    def test_response_error(self, store, client):
        """Test rejected commands become ServerError."""
        client.set.side_effect = redis.exceptions.ResponseError("OOM")

        with pytest.raises(ServerError):
            store.set("key", "value")

    def test_flush_all(self, store, client):
        """Test flush_all flushes the database and rejects delays."""
        store.flush_all()
        client.flushdb.assert_called_once()

        with pytest.raises(ServerError):
            store.flush_all(delay=10)

    def test_clone(self, store):
        """Test clones share config and prefix but not the connection."""
        store.prefix = "app:"
        clone = store.clone()

        assert clone.config is store.config
        assert clone.prefix == "app:"
        assert clone._client is None

    def test_close(self, store):
        """Test close drops the pool."""
        pool = MagicMock()
        store._pool = pool

        store.close()
        pool.disconnect.assert_called_once()
        assert store._client is None
