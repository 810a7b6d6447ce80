"""CacheService の保存・退避・ロード集約を検証する。"""

from __future__ import annotations

import asyncio

import pytest

from six_degrees.infra.cache import (
    CacheService,
    CompositePolicy,
    MaxEntriesPolicy,
    NoEviction,
    TTLPolicy,
    build_policy,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_set_and_get_round_trip() -> None:
    cache = CacheService()

    cache.set("app:10", {"title": "Counter-Strike"})

    assert cache.get("app:10") == {"title": "Counter-Strike"}
    assert "app:10" in cache
    assert cache.get("app:missing", "fallback") == "fallback"


def test_none_is_stored_as_negative_entry() -> None:
    cache = CacheService()

    cache.set("app:99", None)

    entry = cache.lookup("app:99")
    assert entry is not None
    assert entry.is_negative
    assert cache.get("app:99", "default") == "default"


def test_max_entries_evicts_least_recently_used() -> None:
    cache = CacheService(policy=MaxEntriesPolicy(2))
    cache.set("a", 1)
    cache.set("b", 2)
    cache.get("a")

    cache.set("c", 3)

    assert "a" in cache
    assert "b" not in cache
    assert "c" in cache
    assert len(cache) == 2


def test_ttl_expires_entries() -> None:
    clock = FakeClock()
    cache = CacheService(policy=TTLPolicy(10), clock=clock)
    cache.set("tag:html:roguelike", "<html></html>")

    clock.now = 9.9
    assert cache.get("tag:html:roguelike") == "<html></html>"

    clock.now = 10.0
    assert cache.get("tag:html:roguelike") is None
    assert len(cache) == 0


def test_build_policy_combines_settings() -> None:
    assert isinstance(build_policy(max_entries=None, ttl_seconds=None), NoEviction)
    assert isinstance(build_policy(max_entries=5, ttl_seconds=None), MaxEntriesPolicy)
    assert isinstance(build_policy(max_entries=None, ttl_seconds=1.0), TTLPolicy)
    assert isinstance(build_policy(max_entries=5, ttl_seconds=1.0), CompositePolicy)


def test_policies_reject_invalid_bounds() -> None:
    with pytest.raises(ValueError):
        MaxEntriesPolicy(0)
    with pytest.raises(ValueError):
        TTLPolicy(0)


def test_get_or_load_coalesces_concurrent_loads() -> None:
    cache = CacheService()
    calls: list[str] = []

    async def loader() -> str:
        calls.append("load")
        await asyncio.sleep(0)
        return "value"

    async def scenario() -> list[str]:
        return await asyncio.gather(*(cache.get_or_load("k", loader) for _ in range(5)))

    results = asyncio.run(scenario())

    assert results == ["value"] * 5
    assert calls == ["load"]
    assert cache.get("k") == "value"


def test_get_or_load_caches_negative_result() -> None:
    cache = CacheService()
    calls: list[str] = []

    async def loader() -> None:
        calls.append("load")
        return None

    async def scenario() -> tuple[object, object]:
        first = await cache.get_or_load("app:1", loader)
        second = await cache.get_or_load("app:1", loader)
        return first, second

    assert asyncio.run(scenario()) == (None, None)
    assert calls == ["load"]


def test_get_or_load_does_not_cache_failures() -> None:
    cache = CacheService()
    attempts = {"count": 0}

    async def loader() -> str:
        attempts["count"] += 1
        if attempts["count"] == 1:
            raise RuntimeError("boom")
        return "recovered"

    async def scenario() -> str:
        with pytest.raises(RuntimeError):
            await cache.get_or_load("k", loader)
        return await cache.get_or_load("k", loader)

    assert asyncio.run(scenario()) == "recovered"
    assert attempts["count"] == 2


def test_key_helpers_normalize_tags() -> None:
    assert CacheService.tag_page_key("  RogueLike ") == "tag:html:roguelike"
    assert CacheService.app_key("220") == "app:220"
    assert CacheService.more_like_key("220") == "morelike:220"
