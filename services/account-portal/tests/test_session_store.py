"""Tests for the in-memory and Redis-backed session stores."""

from __future__ import annotations

import time

import fakeredis
import pytest

from app.security.redis_session_store import RedisSessionStore
from app.security.session_store import MemorySessionStore


@pytest.fixture()
def redis_client() -> fakeredis.FakeStrictRedis:
    client = fakeredis.FakeStrictRedis()
    client.flushall()
    return client


@pytest.fixture(params=["memory", "redis"])
def store(request, redis_client):
    if request.param == "memory":
        return MemorySessionStore()
    return RedisSessionStore(redis_client, key_prefix="test")


def test_round_trips_session_data(store):
    store.save("abc", {"account_id": "acct-1", "_flashes": [["info", "hello"]]}, ttl_seconds=60)
    assert store.load("abc") == {"account_id": "acct-1", "_flashes": [["info", "hello"]]}


def test_missing_session_is_none(store):
    assert store.load("missing") is None


def test_delete_removes_session(store):
    store.save("abc", {"account_id": "acct-1"}, ttl_seconds=60)
    store.delete("abc")
    store.delete("abc")
    assert store.load("abc") is None


def test_entries_expire(store):
    store.save("abc", {"account_id": "acct-1"}, ttl_seconds=1)
    time.sleep(1.1)
    assert store.load("abc") is None


def test_memory_store_returns_copies():
    store = MemorySessionStore()
    store.save("abc", {"_flashes": [["info", "one"]]}, ttl_seconds=60)

    loaded = store.load("abc")
    loaded["_flashes"].append(["info", "two"])

    assert store.load("abc") == {"_flashes": [["info", "one"]]}


def test_redis_store_uses_prefixed_keys_with_ttl(redis_client):
    store = RedisSessionStore(redis_client, key_prefix="test")
    store.save("abc", {"account_id": "acct-1"}, ttl_seconds=120)

    assert redis_client.exists("test:abc") == 1
    assert 0 < redis_client.ttl("test:abc") <= 120


def test_redis_store_discards_corrupt_payload(redis_client):
    store = RedisSessionStore(redis_client, key_prefix="test")
    redis_client.set("test:abc", b"not json")

    assert store.load("abc") is None
    assert redis_client.exists("test:abc") == 0


class TickingClock:
    def __init__(self) -> None:
        self.now = 1_000.0

    def __call__(self) -> float:
        return self.now


def test_memory_store_sweeps_abandoned_sessions():
    clock = TickingClock()
    store = MemorySessionStore(sweep_interval=60, clock=clock)
    for index in range(1000):
        store.save(f"anon-{index}", {"_flashes": [["errors", "nope"]]}, ttl_seconds=60)
    assert len(store) == 1000

    clock.now += 10_000
    store.save("fresh", {"account_id": "acct-1"}, ttl_seconds=60)

    assert len(store) == 1
    assert store.load("fresh") == {"account_id": "acct-1"}


def test_memory_store_sweep_keeps_live_sessions():
    clock = TickingClock()
    store = MemorySessionStore(sweep_interval=60, clock=clock)
    store.save("short", {}, ttl_seconds=30)
    store.save("long", {"visits": 1}, ttl_seconds=600)

    clock.now += 61
    store.save("other", {}, ttl_seconds=600)

    assert len(store) == 2
    assert store.load("long") == {"visits": 1}
