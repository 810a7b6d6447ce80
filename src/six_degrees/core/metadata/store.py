"""App ID からメタデータを解決し、キャッシュするストア。"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from six_degrees.infra.cache import CacheService
from six_degrees.infra.steam.dto import parse_app_details
from six_degrees.shared.logging import get_logger
from six_degrees.shared.types import normalize_app_id

from .filters import is_game_record
from .models import ItemMetadata

try:  # pragma: no cover - 型ヒント専用
    from structlog.stdlib import BoundLogger
except Exception:  # pragma: no cover
    BoundLogger = object  # type: ignore[assignment]

__all__ = ["AppDetailsSource", "MetadataStore", "MetadataStoreProtocol"]


class AppDetailsSource(Protocol):
    """appdetails を返す上流のプロトコル。"""

    async def fetch_app_details(self, appid: str) -> Mapping[str, Any] | None:
        """`success: false` の場合は None。通信失敗は例外。"""


class MetadataStoreProtocol(Protocol):
    """探索・ランキング層から利用するためのプロトコル。"""

    async def resolve(self, appid: str) -> ItemMetadata | None:
        """単一 ID を解決する。"""

    async def resolve_bulk(self, appids: Sequence[str]) -> list[ItemMetadata]:
        """複数 ID を並行に解決し、有効なものだけを返す。"""


@dataclass(slots=True)
class MetadataStore:
    """キャッシュ越しに appdetails を引き、ゲームフィルタを適用する。

    無効なアイテムは否定エントリとしてキャッシュされ、再取得されない。
    通信エラーはキャッシュせず呼び出し元へ伝播する。
    """

    source: AppDetailsSource
    cache: CacheService
    logger: BoundLogger = field(
        default_factory=lambda: get_logger(__name__, component="metadata-store")
    )

    async def resolve(self, appid: str) -> ItemMetadata | None:
        normalized = normalize_app_id(appid)
        if normalized is None:
            return None
        return await self.cache.get_or_load(
            CacheService.app_key(normalized),
            lambda: self._load(normalized),
        )

    async def resolve_bulk(self, appids: Sequence[str]) -> list[ItemMetadata]:
        """並行に解決する。個別の失敗はログに残してその ID だけ落とす。"""

        unique = list(dict.fromkeys(appids))
        if not unique:
            return []
        outcomes = await asyncio.gather(
            *(self.resolve(appid) for appid in unique), return_exceptions=True
        )

        resolved: list[ItemMetadata] = []
        failures = 0
        for appid, outcome in zip(unique, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                failures += 1
                self.logger.warning(
                    "metadata_resolve_failed",
                    appid=appid,
                    error_type=outcome.__class__.__name__,
                    message=str(outcome),
                )
                continue
            if outcome is not None:
                resolved.append(outcome)

        self.logger.debug(
            "metadata_bulk_resolved",
            requested=len(unique),
            resolved=len(resolved),
            failures=failures,
        )
        return resolved

    async def _load(self, appid: str) -> ItemMetadata | None:
        data = await self.source.fetch_app_details(appid)
        if data is None:
            self.logger.debug("metadata_unavailable", appid=appid)
            return None
        details = parse_app_details(appid, data)
        if not is_game_record(details):
            self.logger.debug(
                "metadata_rejected_non_game",
                appid=appid,
                app_type=details.app_type or None,
                title=details.name or None,
            )
            return None
        return ItemMetadata.from_app_details(details)
