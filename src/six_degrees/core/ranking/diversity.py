"""近傍プールから多様性を優先した候補を選ぶランカー。"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from six_degrees.core.discovery import NeighborResolverProtocol
from six_degrees.core.metadata import ItemMetadata, MetadataStoreProtocol
from six_degrees.shared.exceptions import DomainError, InvalidInputError, Result
from six_degrees.shared.logging import get_logger
from six_degrees.shared.types import normalize_app_id

from .overlap import jaccard_overlap

try:  # pragma: no cover - 型ヒント専用
    from structlog.stdlib import BoundLogger
except Exception:  # pragma: no cover
    BoundLogger = object  # type: ignore[assignment]

__all__ = ["DiversityRanker", "DiversityRankerError", "SimilarQuery"]

MAX_OVERLAP_CEILING = 0.99


class DiversityRankerError(DomainError):
    """近傍取得・起点解決の失敗。"""

    default_message = "類似ゲームの選定に失敗しました"
    default_code = "similar_failed"


def _normalize_ids(values: Iterable[str] | None) -> frozenset[str]:
    if not values:
        return frozenset()
    return frozenset(appid for value in values if (appid := normalize_app_id(value)))


@dataclass(slots=True, frozen=True)
class SimilarQuery:
    """類似候補選定の入力。"""

    source_id: str
    exclude: frozenset[str] = frozenset()
    limit: int = 10
    max_overlap: float = 0.85
    prefer_diverse: bool = True
    goal_id: str | None = None

    def __post_init__(self) -> None:
        source = normalize_app_id(self.source_id)
        if source is None:
            msg = f"invalid app id: {self.source_id!r}"
            raise InvalidInputError(msg, code="invalid_id")
        if self.limit <= 0:
            msg = "limit must be a positive integer"
            raise InvalidInputError(msg, code="invalid_limit")
        object.__setattr__(self, "source_id", source)
        object.__setattr__(self, "exclude", _normalize_ids(self.exclude) | {source})
        object.__setattr__(self, "goal_id", normalize_app_id(self.goal_id))
        object.__setattr__(
            self, "max_overlap", min(max(float(self.max_overlap), 0.0), MAX_OVERLAP_CEILING)
        )


@dataclass(slots=True)
class DiversityRanker:
    """起点とのタグ重なりが小さい順に並べ、ゴールだけは必ず先頭に残す。

    一般的な「似ている順」の推薦とは逆向きの並びになる。
    """

    store: MetadataStoreProtocol
    neighbors: NeighborResolverProtocol
    pool_multiplier: int = 8
    max_pool_size: int = 120
    logger: BoundLogger = field(
        default_factory=lambda: get_logger(__name__, component="diversity-ranker")
    )

    async def select_similar(
        self,
        source_id: str,
        *,
        exclude: Iterable[str] = (),
        limit: int = 10,
        max_overlap: float = 0.85,
        prefer_diverse: bool = True,
        goal_id: str | None = None,
    ) -> Result[tuple[ItemMetadata, ...], DiversityRankerError]:
        """入力を検証して選定し、Result で返す。入力不正は例外で伝える。"""

        query = SimilarQuery(
            source_id=source_id,
            exclude=frozenset(exclude),
            limit=limit,
            max_overlap=max_overlap,
            prefer_diverse=prefer_diverse,
            goal_id=goal_id,
        )
        return await self.rank(query)

    async def rank(
        self, query: SimilarQuery
    ) -> Result[tuple[ItemMetadata, ...], DiversityRankerError]:
        pool_size = min(query.limit * self.pool_multiplier, self.max_pool_size)
        try:
            source = await self.store.resolve(query.source_id)
            neighbor_ids = await self.neighbors.find_neighbors(query.source_id, pool_size)
        except Exception as exc:  # noqa: BLE001 - 原因をメッセージとして呼び出し元へ返す
            return self._fail("similar_upstream_failed", query, exc)

        source_tags = source.tags if source is not None else frozenset()
        pool = [
            item
            for item in await self.store.resolve_bulk(neighbor_ids)
            if item.id != query.source_id
        ]

        pinned = self._find_goal(pool, query.goal_id)
        working = [
            item
            for item in pool
            if item.id not in query.exclude and (pinned is None or item.id != pinned.id)
        ]

        scored = [(item, jaccard_overlap(item.tags, source_tags)) for item in working]
        kept = [(item, score) for item, score in scored if score < query.max_overlap]
        if query.prefer_diverse:
            kept.sort(key=lambda pair: pair[1])

        ordered = [item for item, _ in kept]
        if pinned is not None:
            ordered.insert(0, pinned)
        selected_ids = {item.id for item in ordered}
        ordered.extend(item for item in working if item.id not in selected_ids)

        games = self._dedupe_titles(ordered, query.limit)
        self.logger.info(
            "similar_selection_completed",
            source_id=query.source_id,
            pool=len(pool),
            eligible=len(working),
            below_threshold=len(kept),
            returned=len(games),
            goal_pinned=pinned is not None,
            limit=query.limit,
        )
        return Result.ok(tuple(games))

    def _find_goal(self, pool: list[ItemMetadata], goal_id: str | None) -> ItemMetadata | None:
        if goal_id is None:
            return None
        return next((item for item in pool if item.id == goal_id), None)

    def _dedupe_titles(self, items: list[ItemMetadata], limit: int) -> list[ItemMetadata]:
        seen: set[str] = set()
        selected: list[ItemMetadata] = []
        for item in items:
            key = item.normalized_title
            if key in seen:
                continue
            seen.add(key)
            selected.append(item)
            if len(selected) >= limit:
                break
        return selected

    def _fail(
        self, event: str, query: SimilarQuery, error: Exception
    ) -> Result[tuple[ItemMetadata, ...], DiversityRankerError]:
        self.logger.error(
            event,
            source_id=query.source_id,
            error_type=error.__class__.__name__,
            message=str(error),
        )
        return Result.err(DiversityRankerError(str(error)))
