from __future__ import annotations

from redis.exceptions import ConnectionError as RedisConnectionError

from app.core import cache
from app.services.app_state import RedisStateStorage


class FakeRedis:
    def __init__(self, fail: bool = False) -> None:
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.fail = fail

    def get(self, key: str):
        if self.fail:
            raise RedisConnectionError("down")
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail:
            raise RedisConnectionError("down")
        self.values[key] = value

    def setex(self, key: str, ttl: int, value: str) -> None:
        self.set(key, value)
        self.ttls[key] = ttl


def test_cached_json_loads_once(monkeypatch) -> None:
    fake = FakeRedis()
    monkeypatch.setattr(cache, "get_redis", lambda: fake)
    calls: list[int] = []

    def loader() -> dict:
        calls.append(1)
        return {"city": "서울"}

    assert cache.cached_json("geo:test", 60, loader) == {"city": "서울"}
    assert cache.cached_json("geo:test", 60, loader) == {"city": "서울"}
    assert len(calls) == 1
    assert fake.ttls["geo:test"] == 60


def test_cached_json_does_not_store_failures(monkeypatch) -> None:
    fake = FakeRedis()
    monkeypatch.setattr(cache, "get_redis", lambda: fake)

    assert cache.cached_json("geo:none", 60, lambda: None) is None
    assert "geo:none" not in fake.values


def test_redis_outage_degrades_to_loader(monkeypatch) -> None:
    monkeypatch.setattr(cache, "get_redis", lambda: FakeRedis(fail=True))

    assert cache.cached_json("geo:down", 60, lambda: {"ok": True}) == {"ok": True}
    assert cache.store_json("geo:down", {"ok": True}) is False


def test_state_storage_round_trips_single_entry(monkeypatch) -> None:
    fake = FakeRedis()
    monkeypatch.setattr(cache, "get_redis", lambda: fake)
    storage = RedisStateStorage()

    storage.save({"options": {"transportation": "walking"}, "location": None})

    assert list(fake.values) == ["weatherwear-storage"]
    assert storage.load() == {"options": {"transportation": "walking"}, "location": None}
