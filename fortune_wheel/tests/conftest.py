import pytest
import fakeredis

from fortune_wheel.access import AccessControl
from fortune_wheel.models import Slice
from fortune_wheel.store import InMemoryWheelStore, RedisWheelStore


@pytest.fixture(scope="session")
def redis_client():
    return fakeredis.FakeStrictRedis(decode_responses=True)


@pytest.fixture(autouse=True)
def _patch_shared_redis(monkeypatch, redis_client):
    # store.py resolves get_redis by name, so patch it there
    import fortune_wheel.store as store_mod

    def _get():
        return redis_client

    monkeypatch.setattr(store_mod, "get_redis", _get, raising=True)
    # Clear DB before each test for isolation
    redis_client.flushdb()
    yield
    redis_client.flushdb()


@pytest.fixture(params=["redis", "memory"])
def store(request):
    if request.param == "redis":
        return RedisWheelStore()
    return InMemoryWheelStore()


@pytest.fixture
def access(store):
    return AccessControl(store)


@pytest.fixture
def make_slices():
    def _make(*labels):
        return [Slice(id=f"s{i}", label=label, color="#6366F1") for i, label in enumerate(labels)]
    return _make


class StubRandom:
    """Fixed draws: chosen index, spin count, offset."""

    def __init__(self, index, spins, offset=0.0):
        self.index = index
        self.spins = spins
        self.offset = offset

    def randrange(self, n):
        return self.index

    def randint(self, a, b):
        return self.spins

    def uniform(self, a, b):
        return self.offset


@pytest.fixture
def stub_random():
    return StubRandom
