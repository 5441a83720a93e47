"""Tests for advisory locks.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import socket
import threading
import time

import pytest

from shardcache_core.cache.cache import Cache
from shardcache_core.errors import LockTimeoutError


@pytest.fixture
def cache():
    return Cache()


class TestLocks:
    """Tests for lock, unlock and locked."""

    def test_lock_unlock(self, cache):
        """Test a lock can be taken once until released."""
        assert cache.lock("job")
        assert not cache.lock("job")
        assert cache.locked("job")

        assert cache.unlock("job")
        assert not cache.locked("job")
        assert cache.lock("job")

    def test_lock_marker(self, cache):
        """Test the marker is the hostname under lock:<key>."""
        cache.lock("job")

        assert cache.lock_key("job") == "lock:job"
        assert cache.read("lock:job") == socket.gethostname()

    def test_lock_expires(self, cache, monkeypatch):
        """Test a held lock lapses after its expiry."""
        now = [1_700_000_000.0]
        monkeypatch.setattr(time, "time", lambda: now[0])

        assert cache.lock("job")
        now[0] += 6
        assert cache.lock("job")

    def test_lock_custom_expiry(self, cache, monkeypatch):
        """Test the lock lifetime can be set per call."""
        now = [1_700_000_000.0]
        monkeypatch.setattr(time, "time", lambda: now[0])

        assert cache.lock("job", expiry=60)
        now[0] += 30
        assert cache.locked("job")


class TestWithLock:
    """Tests for with_lock."""

    def test_runs_body_and_releases(self, cache):
        """Test the body result is returned and the lock released."""
        assert cache.with_lock("job", lambda: cache.locked("job")) is True
        assert not cache.locked("job")

    def test_releases_on_error(self, cache):
        """Test the lock is released when the body raises."""

        def body():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            cache.with_lock("job", body)
        assert not cache.locked("job")

    def test_keep(self, cache):
        """Test keep leaves the lock held."""
        cache.with_lock("job", lambda: None, keep=True)

        assert cache.locked("job")

    def test_ignore(self, cache):
        """Test ignore skips the body when the lock is taken."""
        cache.lock("job")
        calls = []

        assert cache.with_lock("job", lambda: calls.append(1), ignore=True) is None
        assert calls == []
        assert cache.locked("job")

    def test_timeout(self, cache):
        """Test a deadline raises LockTimeoutError."""
        cache.lock("job")

        with pytest.raises(LockTimeoutError) as exc_info:
            cache.with_lock("job", lambda: None, interval=0.01, timeout=0.05)
        assert exc_info.value.key == "lock:job"
        assert cache.locked("job")

    def test_retries_until_released(self, cache, monkeypatch):
        """Test contention waits one interval per retry."""
        cache.lock("job")
        sleeps = []

        def fake_sleep(seconds):
            sleeps.append(seconds)
            cache.unlock("job")

        monkeypatch.setattr(time, "sleep", fake_sleep)

        assert cache.with_lock("job", lambda: "done") == "done"
        assert sleeps == [1.0]
        assert not cache.locked("job")

    def test_blocks_another_thread_until_released(self, cache):
        """Test a second thread runs its body only after the holder unlocks."""
        cache.lock("job")
        started = threading.Event()
        finished = threading.Event()

        def contend():
            started.set()
            cache.with_lock("job", finished.set, interval=0.01)

        worker = threading.Thread(target=contend)
        worker.start()
        assert started.wait(1.0)

        assert not finished.wait(0.1)

        cache.unlock("job")
        worker.join(2.0)
        assert finished.is_set()
        assert not cache.locked("job")

    def test_locks_are_namespaced(self, cache):
        """Test lock markers live in the current namespace."""
        cache.namespace = "a"
        cache.lock("job")

        cache.namespace = "b"
        assert not cache.locked("job")
