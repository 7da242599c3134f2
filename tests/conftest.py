# tests/conftest.py

import pytest


class InMemoryRedis:
    """
    Just enough of the redis.asyncio hash API for the config repository.
    Values are stored as strings, the way a client with decode_responses=True returns them.
    """

    def __init__(self):
        self.hashes: dict[str, dict[str, str]] = {}
        self.available = True

    async def hset(self, name, key=None, value=None, mapping=None):
        fields = dict(mapping or {})
        if key is not None:
            fields[key] = value
        bucket = self.hashes.setdefault(name, {})
        added = len(set(fields) - set(bucket))
        bucket.update({k: str(v) for k, v in fields.items()})
        return added

    async def hget(self, name, key):
        return self.hashes.get(name, {}).get(key)

    async def hmget(self, name, keys, *args):
        bucket = self.hashes.get(name, {})
        return [bucket.get(k) for k in [*keys, *args]]

    async def delete(self, *names):
        return sum(1 for name in names if self.hashes.pop(name, None) is not None)

    async def ping(self):
        if not self.available:
            raise ConnectionError("Redis is down")
        return True


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    """A fresh, empty in-memory stand-in for the Redis client per test."""
    return InMemoryRedis()
