import fakeredis
import pytest

from fortune_wheel.access import AccessControl
from fortune_wheel.errors import StoreUnavailable, WheelNotFound
from fortune_wheel.store import InMemoryWheelStore, RedisWheelStore


def test_create_and_fetch_public_view(store, make_slices):
    wheel_id = store.create("Lunch", make_slices("Pizza", "Sushi"), "deadbeef")
    wheel = store.fetch(wheel_id)
    assert wheel.id == wheel_id
    assert wheel.title == "Lunch"
    assert [s.label for s in wheel.slices] == ["Pizza", "Sushi"]
    assert wheel.created_at and wheel.updated_at
    assert "edit_key_hash" not in wheel.model_dump()


def test_fetch_record_includes_hash(store, make_slices):
    wheel_id = store.create(None, make_slices("A", "B"), "deadbeef")
    record = store.fetch_record(wheel_id)
    assert record.edit_key_hash == "deadbeef"
    assert record.edit_key_created_at is not None
    assert record.title is None


def test_fetch_missing_returns_none(store):
    assert store.fetch("404") is None
    assert store.fetch_record("404") is None


def test_ids_are_distinct(store, make_slices):
    ids = {store.create(None, make_slices("A", "B"), "h") for _ in range(5)}
    assert len(ids) == 5


def test_wheel_hash_key_never_holds_secret(redis_client, make_slices):
    store = RedisWheelStore()
    wheel_id = store.create("T", make_slices("A", "B"), "secret-digest")
    data = redis_client.hgetall(f"wheel:{wheel_id}")
    assert "secret-digest" not in data.values()
    assert redis_client.hget(f"wheel:{wheel_id}:edit_key", "hash") == "secret-digest"


def test_patch_replaces_title_and_slices_keeps_hash(store, make_slices):
    ac = AccessControl(store)
    wheel_id = store.create("Old", make_slices("A", "B"), ac.hash_secret("k"))
    before = store.fetch_record(wheel_id)
    fields = store.patch(ac.verify(wheel_id, "k"), title="New", slices=make_slices("C", "D", "E"))
    assert fields["title"] == "New"
    after = store.fetch_record(wheel_id)
    assert after.title == "New"
    assert [s.label for s in after.slices] == ["C", "D", "E"]
    assert after.edit_key_hash == before.edit_key_hash
    assert after.created_at == before.created_at
    assert after.id == wheel_id


def test_patch_after_document_vanished():
    store = InMemoryWheelStore()
    ac = AccessControl(store)
    wheel_id = store.create(None, [], ac.hash_secret("k"))
    verified = ac.verify(wheel_id, "k")
    store._docs.clear()
    with pytest.raises(WheelNotFound):
        store.patch(verified, title="x")


def test_redis_errors_surface_as_store_unavailable(make_slices):
    server = fakeredis.FakeServer()
    server.connected = False
    store = RedisWheelStore(fakeredis.FakeStrictRedis(server=server, decode_responses=True))
    with pytest.raises(StoreUnavailable) as exc:
        store.create(None, make_slices("A", "B"), "h")
    assert exc.value.code == "STORE_UNAVAILABLE"
    with pytest.raises(StoreUnavailable):
        store.fetch("1")


def test_get_redis_reads_environment(monkeypatch):
    from fortune_wheel import redis_client

    redis_client.get_redis.cache_clear()
    monkeypatch.setenv("REDIS_URL", "redis://cache.internal:6380/2")
    try:
        kwargs = redis_client.get_redis().connection_pool.connection_kwargs
        assert kwargs["host"] == "cache.internal"
        assert kwargs["port"] == 6380
        assert kwargs["db"] == 2
    finally:
        redis_client.get_redis.cache_clear()

    monkeypatch.delenv("REDIS_URL")
    monkeypatch.setenv("REDIS_PORT", "6390")
    try:
        assert redis_client.get_redis().connection_pool.connection_kwargs["port"] == 6390
    finally:
        redis_client.get_redis.cache_clear()


def test_patch_with_only_slices_keeps_title(store, make_slices):
    ac = AccessControl(store)
    wheel_id = store.create("Lunch", make_slices("A", "B"), ac.hash_secret("k"))
    fields = store.patch(ac.verify(wheel_id, "k"), slices=make_slices("C", "D"))
    assert "title" not in fields
    wheel = store.fetch(wheel_id)
    assert wheel.title == "Lunch"
    assert [s.label for s in wheel.slices] == ["C", "D"]


def test_patch_with_only_title_keeps_slices(store, make_slices):
    ac = AccessControl(store)
    wheel_id = store.create("Lunch", make_slices("A", "B"), ac.hash_secret("k"))
    store.patch(ac.verify(wheel_id, "k"), title="Dinner")
    wheel = store.fetch(wheel_id)
    assert wheel.title == "Dinner"
    assert [s.label for s in wheel.slices] == ["A", "B"]


def test_patch_title_none_clears_title(store, make_slices):
    ac = AccessControl(store)
    wheel_id = store.create("Lunch", make_slices("A", "B"), ac.hash_secret("k"))
    store.patch(ac.verify(wheel_id, "k"), title=None)
    assert store.fetch(wheel_id).title is None


@pytest.mark.parametrize("field, raw", [("slices", "{not json"), ("title", "[1,"), ("slices", '[{"id": "a"}]')])
def test_corrupt_document_surfaces_as_store_unavailable(redis_client, make_slices, field, raw):
    store = RedisWheelStore()
    wheel_id = store.create("T", make_slices("A", "B"), "h")
    redis_client.hset(f"wheel:{wheel_id}", field, raw)
    with pytest.raises(StoreUnavailable) as exc:
        store.fetch(wheel_id)
    assert exc.value.code == "STORE_UNAVAILABLE"
    assert exc.value.wheel_id == wheel_id
