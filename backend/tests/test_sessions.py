from __future__ import annotations

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from files_manager.common.cache import MemoryCache, RedisCache
from files_manager.common.errors import InfrastructureFailure
from files_manager.common.sessions import SessionStore


class FakeClock:
    def __init__(self) -> None:
        self.now = 1_000_000.0

    def __call__(self) -> float:
        return self.now


class UnreachableRedis:
    def get(self, key):
        raise RedisConnectionError("connection refused")

    def set(self, key, value, ex=None):
        raise RedisConnectionError("connection refused")

    def delete(self, key):
        raise RedisConnectionError("connection refused")

    def ping(self):
        raise RedisConnectionError("connection refused")


def test_issued_token_resolves_until_ttl_elapses():
    clock = FakeClock()
    store = SessionStore(MemoryCache(clock=clock), ttl_seconds=60 * 60 * 24)

    token = store.issue(7)
    assert store.resolve(token) == 7

    clock.now += 60 * 60 * 24 - 1
    assert store.resolve(token) == 7

    clock.now += 1
    assert store.resolve(token) is None


def test_tokens_are_unique_and_bound_to_their_user():
    store = SessionStore(MemoryCache(), ttl_seconds=60)

    first = store.issue(1)
    second = store.issue(1)
    other = store.issue(2)

    assert len({first, second, other}) == 3
    assert store.resolve(first) == 1
    assert store.resolve(second) == 1
    assert store.resolve(other) == 2


def test_unknown_and_empty_tokens_resolve_to_nothing():
    store = SessionStore(MemoryCache(), ttl_seconds=60)

    assert store.resolve("never-issued") is None
    assert store.resolve("") is None
    assert store.resolve(None) is None


def test_revoke_is_idempotent():
    store = SessionStore(MemoryCache(), ttl_seconds=60)
    token = store.issue(3)

    assert store.revoke(token) is True
    assert store.resolve(token) is None
    assert store.revoke(token) is False


def test_revoking_one_session_keeps_the_others():
    store = SessionStore(MemoryCache(), ttl_seconds=60)
    laptop = store.issue(5)
    phone = store.issue(5)

    store.revoke(laptop)

    assert store.resolve(laptop) is None
    assert store.resolve(phone) == 5


def test_unreachable_cache_is_an_infrastructure_failure():
    store = SessionStore(RedisCache(UnreachableRedis()), ttl_seconds=60)

    with pytest.raises(InfrastructureFailure):
        store.resolve("some-token")
    with pytest.raises(InfrastructureFailure):
        store.issue(1)
    assert store.cache.is_alive() is False


def test_unreachable_cache_returns_503_not_401(app, client, monkeypatch):
    monkeypatch.setitem(app.extensions, "session_store", SessionStore(RedisCache(UnreachableRedis()), ttl_seconds=60))

    response = client.get("/users/me", headers={"X-Token": "whatever"})
    assert response.status_code == 503
    assert response.get_json()["error"]["code"] == "INFRASTRUCTURE_FAILURE"
