"""`/api/six` 配下のエンドポイント。"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from six_degrees.bootstrap import SixDegreesServices
from six_degrees.core.metadata import ItemMetadata
from six_degrees.shared.exceptions import InvalidInputError
from six_degrees.shared.logging import get_logger
from six_degrees.shared.types import normalize_app_id

router = APIRouter(prefix="/api/six", tags=["six-degrees"])
logger = get_logger(__name__, component="api")

TAG_LIMIT_DEFAULT = 10
TAG_LIMIT_MAX = 50
SIMILAR_LIMIT_DEFAULT = 10
SIMILAR_LIMIT_MAX = 20
MAX_OVERLAP_DEFAULT = 0.85
MAX_OVERLAP_CEILING = 0.99


def get_services(request: Request) -> SixDegreesServices:
    return request.app.state.services


Services = Annotated[SixDegreesServices, Depends(get_services)]


def parse_int(value: str | None, *, default: int, lower: int, upper: int) -> int:
    """数値でなければ既定値、範囲外なら丸める。"""

    try:
        parsed = int(value) if value is not None and value.strip() else default
    except ValueError:
        parsed = default
    return max(lower, min(upper, parsed))


def parse_float(value: str | None, *, default: float, lower: float, upper: float) -> float:
    try:
        parsed = float(value) if value is not None and value.strip() else default
    except ValueError:
        parsed = default
    if parsed != parsed:  # NaN
        parsed = default
    return max(lower, min(upper, parsed))


def parse_flag(value: str | None, *, default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() not in {"0", "false", "no", "off"}


def parse_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _games_payload(games: tuple[ItemMetadata, ...] | list[ItemMetadata]) -> dict[str, Any]:
    return {"games": [game.to_payload() for game in games]}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.get("/slices")
async def slices(services: Services) -> dict[str, list[str]]:
    """UI のルーレットに並べるタグ一覧。"""

    return {"slices": list(services.slices)}


@router.get("/tag")
async def tag_candidates(
    services: Services,
    tag: str | None = None,
    limit: str | None = None,
):
    """タグから候補ゲームを返す。全段が空振りしても 200 で空配列。"""

    if tag is None or not tag.strip():
        return _error(400, "missing_tag")

    effective_limit = parse_int(limit, default=TAG_LIMIT_DEFAULT, lower=1, upper=TAG_LIMIT_MAX)
    try:
        games = await services.tag_resolver.find_candidates(tag, effective_limit)
    except InvalidInputError as exc:
        return _error(400, exc.code)
    except Exception as exc:  # noqa: BLE001 - 想定外の失敗は 500 として返す
        logger.exception("tag_candidates_failed", tag=tag)
        return _error(500, str(exc))
    return _games_payload(games)


@router.get("/similar/{appid}")
async def similar_games(  # noqa: PLR0913 - クエリパラメータが多い
    appid: str,
    services: Services,
    exclude: str | None = None,
    limit: str | None = None,
    max_overlap: str | None = None,
    prefer_diverse: str | None = None,
    goal: str | None = None,
):
    """起点ゲームから多様性優先の候補を返す。上流障害は 500。"""

    source_id = normalize_app_id(appid)
    if source_id is None:
        return _error(400, "invalid_id")

    try:
        result = await services.ranker.select_similar(
            source_id,
            exclude=parse_csv(exclude),
            limit=parse_int(
                limit, default=SIMILAR_LIMIT_DEFAULT, lower=1, upper=SIMILAR_LIMIT_MAX
            ),
            max_overlap=parse_float(
                max_overlap, default=MAX_OVERLAP_DEFAULT, lower=0.0, upper=MAX_OVERLAP_CEILING
            ),
            prefer_diverse=parse_flag(prefer_diverse, default=True),
            goal_id=goal.strip() if goal and goal.strip() else None,
        )
    except InvalidInputError as exc:
        return _error(400, exc.code)

    if result.is_err:
        return _error(500, str(result.unwrap_err()))
    return _games_payload(result.unwrap())
