"""プロセス単位のサービス構成。"""

from __future__ import annotations

import random
from dataclasses import dataclass

from six_degrees.core.discovery import NeighborResolver, TagCandidateResolver
from six_degrees.core.metadata import MetadataStore
from six_degrees.core.ranking import DiversityRanker
from six_degrees.infra.cache import CacheService, build_policy
from six_degrees.infra.steam import SteamStoreClient, build_steam_client
from six_degrees.shared.config import AppSettings, get_settings

__all__ = ["SixDegreesServices", "build_services"]


@dataclass(slots=True)
class SixDegreesServices:
    """API/CLI から利用するコンポーネント一式。"""

    settings: AppSettings
    cache: CacheService
    client: SteamStoreClient
    store: MetadataStore
    tag_resolver: TagCandidateResolver
    neighbor_resolver: NeighborResolver
    ranker: DiversityRanker

    @property
    def slices(self) -> tuple[str, ...]:
        return tuple(self.settings.discovery.slices)

    async def aclose(self) -> None:
        await self.client.aclose()


def build_services(*, settings: AppSettings | None = None) -> SixDegreesServices:
    """設定からキャッシュ・クライアント・各リゾルバを 1 つずつ組み立てる。"""

    app_settings = settings or get_settings()
    discovery = app_settings.discovery

    cache = CacheService(
        policy=build_policy(
            max_entries=app_settings.cache.max_entries,
            ttl_seconds=app_settings.cache.ttl_seconds,
        )
    )
    client = build_steam_client(settings=app_settings)
    store = MetadataStore(source=client, cache=cache)
    rng = random.Random(discovery.shuffle_seed) if discovery.shuffle_tag_sections else None
    tag_resolver = TagCandidateResolver(
        source=client,
        store=store,
        cache=cache,
        rng=rng,
        max_candidates=discovery.max_pool_size,
    )
    neighbor_resolver = NeighborResolver(source=client, cache=cache)
    ranker = DiversityRanker(
        store=store,
        neighbors=neighbor_resolver,
        pool_multiplier=discovery.pool_multiplier,
        max_pool_size=discovery.max_pool_size,
    )
    return SixDegreesServices(
        settings=app_settings,
        cache=cache,
        client=client,
        store=store,
        tag_resolver=tag_resolver,
        neighbor_resolver=neighbor_resolver,
        ranker=ranker,
    )
