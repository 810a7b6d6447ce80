"""「似たようなゲーム」ページから近傍 ID を集めるリゾルバ。"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from six_degrees.infra.cache import CacheService
from six_degrees.infra.steam.extractors import AppCardExtractor, IdentifierExtractor
from six_degrees.shared.exceptions import InvalidInputError
from six_degrees.shared.logging import get_logger
from six_degrees.shared.types import normalize_app_id

try:  # pragma: no cover - 型ヒント専用
    from structlog.stdlib import BoundLogger
except Exception:  # pragma: no cover
    BoundLogger = object  # type: ignore[assignment]

__all__ = ["MoreLikeSource", "NeighborResolver", "NeighborResolverProtocol"]


class MoreLikeSource(Protocol):
    async def fetch_more_like(self, appid: str) -> str:
        """「似たようなゲーム」ページの HTML。"""


class NeighborResolverProtocol(Protocol):
    async def find_neighbors(self, appid: str, cap: int) -> list[str]:
        """近傍の App ID を最大 `cap` 件返す。"""


@dataclass(slots=True)
class NeighborResolver:
    """単一ページのみを情報源とするため、フォールバックは持たず失敗は伝播する。"""

    source: MoreLikeSource
    cache: CacheService
    extractor: IdentifierExtractor = field(default_factory=AppCardExtractor)
    logger: BoundLogger = field(
        default_factory=lambda: get_logger(__name__, component="neighbor-resolver")
    )

    async def find_neighbors(self, appid: str, cap: int) -> list[str]:
        normalized = normalize_app_id(appid)
        if normalized is None:
            raise InvalidInputError(f"invalid app id: {appid!r}", code="invalid_id")
        if cap <= 0:
            return []

        ids = await self.cache.get_or_load(
            CacheService.more_like_key(normalized),
            lambda: self._load(normalized),
        )
        return list(ids or ())[:cap]

    async def _load(self, appid: str) -> list[str]:
        html = await self.source.fetch_more_like(appid)
        ids = self.extractor.extract_identifiers(html)
        self.logger.debug("neighbors_extracted", appid=appid, count=len(ids))
        return ids
