# feedagg/tests/test_cache.py
import json

import pytest

from feedagg.storage.cache import (
    CacheUnavailableError,
    JsonFileStore,
    MemoryStore,
    build_store,
)

from conftest import FakeClock


@pytest.fixture(params=["memory", "json"])
def kv(request, tmp_path, clock):
    if request.param == "memory":
        return MemoryStore(clock=clock)
    return JsonFileStore(str(tmp_path / "cache.json"), clock=clock)


def test_round_trip(kv):
    value = '{"lastUpdate": "2024-01-01T00:00:00+00:00", "feeds": [], "items": []}'
    kv.put("k", value, 60)
    assert kv.get("k") == value


def test_missing_key(kv):
    assert kv.get("nope") is None


def test_expires_lazily(kv, clock):
    kv.put("k", "v", 60)
    clock.advance(59)
    assert kv.get("k") == "v"
    clock.advance(1)
    assert kv.get("k") is None


def test_put_overwrites_and_resets_expiry(kv, clock):
    kv.put("k", "old", 10)
    clock.advance(5)
    kv.put("k", "new", 10)
    clock.advance(8)
    assert kv.get("k") == "new"


def test_json_store_put_prunes_expired_entries(tmp_path, clock):
    path = tmp_path / "cache.json"
    store = JsonFileStore(str(path), clock=clock)
    store.put("aggregated:dynamic:https://a.test", "a", 10)
    store.put("aggregated:dynamic:https://b.test", "b", 100)
    clock.advance(10)
    store.put("aggregated:fixed", "f", 60)

    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert set(on_disk) == {"aggregated:dynamic:https://b.test", "aggregated:fixed"}
    assert store.get("aggregated:dynamic:https://b.test") == "b"


def test_json_store_survives_restart(tmp_path, clock):
    path = str(tmp_path / "data" / "cache.json")
    JsonFileStore(path, clock=clock).put("k", "v", 60)
    assert JsonFileStore(path, clock=clock).get("k") == "v"


def test_json_store_corrupted_file_reads_empty(tmp_path, clock):
    path = tmp_path / "cache.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileStore(str(path), clock=clock)
    assert store.get("k") is None
    store.put("k", "v", 60)
    assert store.get("k") == "v"


def test_json_store_unavailable(tmp_path):
    # a directory cannot be opened as the cache file
    store = JsonFileStore(str(tmp_path), clock=FakeClock())
    with pytest.raises(CacheUnavailableError):
        store.get("k")
    with pytest.raises(CacheUnavailableError):
        store.put("k", "v", 60)


def test_build_store(tmp_path):
    assert isinstance(build_store("memory"), MemoryStore)
    assert isinstance(build_store("JSON", str(tmp_path / "c.json")), JsonFileStore)
    with pytest.raises(ValueError):
        build_store("redis")
    with pytest.raises(ValueError):
        build_store("json")
