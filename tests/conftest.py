"""
Pytest fixtures for radcache tests.

Tests run against FakeRedis, an in-memory double for the subset of the
redis.Redis API the accessor uses. It records every physical key it sees.
"""

import time

import pytest
from redis.exceptions import ConnectionError

from radcache import CacheOptions, RadCache


class FakeRedis:
    """In-memory stand-in for redis.Redis (bytes responses, PX expiry)."""

    def __init__(self):
        self._data: dict[str, bytes] = {}
        self._expires: dict[str, float] = {}
        self.commands: list[tuple[str, tuple[str, ...]]] = []

    def _purge(self, name: str) -> None:
        deadline = self._expires.get(name)
        if deadline is not None and time.monotonic() >= deadline:
            self._data.pop(name, None)
            self._expires.pop(name, None)

    def set(self, name, value, ex=None, px=None):
        self.commands.append(("SET", (name,)))
        if isinstance(value, str):
            value = value.encode("utf-8")
        self._data[name] = value
        self._expires.pop(name, None)
        if ex is not None:
            self._expires[name] = time.monotonic() + ex
        if px is not None:
            self._expires[name] = time.monotonic() + px / 1000
        return True

    def get(self, name):
        self.commands.append(("GET", (name,)))
        self._purge(name)
        return self._data.get(name)

    def delete(self, *names):
        self.commands.append(("DEL", names))
        removed = 0
        for name in names:
            self._purge(name)
            if self._data.pop(name, None) is not None:
                removed += 1
            self._expires.pop(name, None)
        return removed

    def exists(self, *names):
        self.commands.append(("EXISTS", names))
        for name in names:
            self._purge(name)
        return sum(1 for name in names if name in self._data)

    def ttl(self, name):
        self.commands.append(("TTL", (name,)))
        self._purge(name)
        if name not in self._data:
            return -2
        deadline = self._expires.get(name)
        if deadline is None:
            return -1
        return int(round(deadline - time.monotonic()))

    def ping(self):
        return True

    def info(self, section=None):
        if section == "memory":
            return {"used_memory_human": "1.00M"}
        if section == "clients":
            return {"connected_clients": 1}
        return {}

    @property
    def physical_keys(self) -> list[str]:
        return [key for _, keys in self.commands for key in keys]


class BrokenRedis:
    """Client whose every command fails with a connection error."""

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise ConnectionError("Error 111 connecting to localhost:6379. Connection refused.")

        return fail


class RecordingSink:
    """Diagnostic sink that keeps every reported error."""

    def __init__(self):
        self.errors: list = []

    def error(self, value):
        self.errors.append(value)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def cache(fake_redis, sink):
    """Accessor with a "test_" prefix over FakeRedis."""
    return RadCache.create(CacheOptions(prefix="test_"), client=fake_redis, sink=sink)


@pytest.fixture
def broken_cache(sink):
    return RadCache.create_default(client=BrokenRedis(), sink=sink)
