"""フリーテキストのタグから候補ゲームを集めるリゾルバ。"""

from __future__ import annotations

import random
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from six_degrees.core.metadata import ItemMetadata, MetadataStoreProtocol
from six_degrees.infra.cache import CacheService
from six_degrees.infra.steam.extractors import (
    AppCardExtractor,
    IdentifierExtractor,
    SectionHeadingExtractor,
    dedupe_preserving_order,
)
from six_degrees.shared.exceptions import InvalidInputError
from six_degrees.shared.logging import get_logger
from six_degrees.shared.types import normalize_app_id

try:  # pragma: no cover - 型ヒント専用
    from structlog.stdlib import BoundLogger
except Exception:  # pragma: no cover
    BoundLogger = object  # type: ignore[assignment]

__all__ = [
    "DEFAULT_TAG_SECTIONS",
    "TagCandidateResolver",
    "TagSearchSource",
    "TagSection",
]


class TagSearchSource(Protocol):
    """タグ探索の各段が利用する上流のプロトコル。"""

    async def fetch_tag_page(self, tag: str) -> str:
        """タグ閲覧ページの HTML。"""

    async def fetch_search_results(self, term: str, *, count: int = 50) -> str:
        """検索結果の埋め込み HTML。"""

    async def fetch_store_search(self, term: str) -> list[Mapping[str, Any]]:
        """簡易検索 API の結果。"""


@dataclass(slots=True, frozen=True)
class TagSection:
    """タグページ上の 1 節 (見出し文言と採用上限)。"""

    heading: str
    cap: int


DEFAULT_TAG_SECTIONS: tuple[TagSection, ...] = (
    TagSection("New & Trending", 4),
    TagSection("Top Sellers", 3),
    TagSection("Top Rated", 3),
)

_Tier = tuple[str, Callable[[str, int], Awaitable[list[str]]]]


@dataclass(slots=True)
class TagCandidateResolver:
    """複数の探索段を順に試し、`limit` 件の有効なゲームが揃った時点で止める。

    1. タグページのスクレイピング
    2. ストア検索 (HTML 埋め込み) へのフォールバック
    3. 簡易検索 API へのフォールバック

    各段の失敗はログに残して 0 件扱いとし、呼び出し元へは伝播させない。
    """

    source: TagSearchSource
    store: MetadataStoreProtocol
    cache: CacheService
    section_extractor: IdentifierExtractor = field(default_factory=SectionHeadingExtractor)
    card_extractor: IdentifierExtractor = field(default_factory=AppCardExtractor)
    sections: tuple[TagSection, ...] = DEFAULT_TAG_SECTIONS
    rng: random.Random | None = None
    max_candidates: int = 120
    logger: BoundLogger = field(
        default_factory=lambda: get_logger(__name__, component="tag-candidates")
    )

    async def find_candidates(self, tag: str, limit: int) -> list[ItemMetadata]:
        term = (tag or "").strip()
        if not term:
            raise InvalidInputError("tag is required", code="missing_tag")
        if limit <= 0:
            return []

        accepted: list[ItemMetadata] = []
        accepted_ids: set[str] = set()
        attempted: set[str] = set()

        for tier_name, tier in self._tiers():
            if len(accepted) >= limit:
                break
            try:
                raw_ids = await tier(term, limit)
                fresh = [appid for appid in raw_ids if appid not in attempted]
                fresh = fresh[: self.max_candidates]
                attempted.update(fresh)
                games = await self.store.resolve_bulk(fresh)
            except Exception as exc:  # noqa: BLE001 - 段の失敗は次の段で補う
                self.logger.warning(
                    "tag_tier_failed",
                    tag=term,
                    tier=tier_name,
                    error_type=exc.__class__.__name__,
                    message=str(exc),
                )
                continue

            added = 0
            for game in games:
                if len(accepted) >= limit:
                    break
                if game.id in accepted_ids or not game.is_game:
                    continue
                accepted.append(game)
                accepted_ids.add(game.id)
                added += 1

            self.logger.info(
                "tag_tier_completed",
                tag=term,
                tier=tier_name,
                candidates=len(fresh),
                added=added,
                total=len(accepted),
                limit=limit,
            )

        return accepted

    def _tiers(self) -> tuple[_Tier, ...]:
        return (
            ("tag_page", self._tag_page_ids),
            ("search_results", self._search_result_ids),
            ("store_search", self._store_search_ids),
        )

    async def _tag_page_ids(self, term: str, limit: int) -> list[str]:
        html = await self.cache.get_or_load(
            CacheService.tag_page_key(term),
            lambda: self.source.fetch_tag_page(term),
        )
        if not html:
            return []

        merged: list[str] = []
        for section in self.sections:
            ids = self.section_extractor.extract_identifiers(html, section.heading)
            merged.extend(ids[: section.cap])
        merged = dedupe_preserving_order(merged)
        if self.rng is not None:
            self.rng.shuffle(merged)
        return merged

    async def _search_result_ids(self, term: str, limit: int) -> list[str]:
        html = await self.source.fetch_search_results(term, count=min(self.max_candidates, 50))
        return self.card_extractor.extract_identifiers(html)

    async def _store_search_ids(self, term: str, limit: int) -> list[str]:
        items = await self.source.fetch_store_search(term)
        ids: list[str] = []
        for item in items:
            if str(item.get("type", "app")).lower() != "app":
                continue
            appid = normalize_app_id(item.get("id"))
            if appid is not None:
                ids.append(appid)
        return dedupe_preserving_order(ids)
