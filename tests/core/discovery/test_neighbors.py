from __future__ import annotations

import asyncio

import pytest

from six_degrees.core.discovery import NeighborResolver
from six_degrees.infra.cache import CacheService
from six_degrees.infra.steam import SteamRequestError
from six_degrees.shared.exceptions import InvalidInputError

MORE_LIKE_HTML = """
<div id="released">
  <div class="similar_grid_item">
    <a class="cluster_capsule" data-ds-appid="10" href="https://store.steampowered.com/app/10/A/"></a>
  </div>
  <div class="similar_grid_item">
    <a href="https://store.steampowered.com/app/20/B/?snr=1"></a>
    <a href="https://store.steampowered.com/app/20/B/"></a>
  </div>
  <div class="similar_grid_item"><a href="/app/30/C/"></a></div>
  <div class="similar_grid_item"><a href="/app/40/D/"></a></div>
</div>
"""


class FakeMoreLikeSource:
    def __init__(self, html: str = MORE_LIKE_HTML, *, error: Exception | None = None) -> None:
        self._html = html
        self._error = error
        self.calls: list[str] = []

    async def fetch_more_like(self, appid: str) -> str:
        self.calls.append(appid)
        if self._error is not None:
            raise self._error
        return self._html


def test_find_neighbors_dedupes_and_caps() -> None:
    resolver = NeighborResolver(source=FakeMoreLikeSource(), cache=CacheService())

    assert asyncio.run(resolver.find_neighbors("620", 3)) == ["10", "20", "30"]


def test_neighbor_list_is_cached_per_app() -> None:
    source = FakeMoreLikeSource()
    resolver = NeighborResolver(source=source, cache=CacheService())

    async def scenario() -> tuple[list[str], list[str]]:
        first = await resolver.find_neighbors("620", 2)
        second = await resolver.find_neighbors("620", 10)
        return first, second

    first, second = asyncio.run(scenario())

    assert first == ["10", "20"]
    assert second == ["10", "20", "30", "40"]
    assert source.calls == ["620"]


def test_upstream_failure_propagates_and_is_not_cached() -> None:
    cache = CacheService()
    resolver = NeighborResolver(
        source=FakeMoreLikeSource(error=SteamRequestError("morelike failed")), cache=cache
    )

    with pytest.raises(SteamRequestError):
        asyncio.run(resolver.find_neighbors("620", 5))
    assert "morelike:620" not in cache


def test_invalid_id_and_zero_cap() -> None:
    source = FakeMoreLikeSource()
    resolver = NeighborResolver(source=source, cache=CacheService())

    with pytest.raises(InvalidInputError):
        asyncio.run(resolver.find_neighbors("abc", 5))
    assert asyncio.run(resolver.find_neighbors("620", 0)) == []
    assert source.calls == []
