"""Steam ストアフロントへの非同期クライアント。"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import quote

import httpx

from six_degrees.shared.config import AppSettings, SteamSettings, get_settings
from six_degrees.shared.exceptions import UpstreamError
from six_degrees.shared.logging import get_logger

__all__ = [
    "SteamClientError",
    "SteamRequestError",
    "SteamRetryConfig",
    "SteamStoreClient",
    "SteamStoreClientProtocol",
    "build_steam_client",
]


class SteamClientError(UpstreamError):
    """Steam クライアント共通の例外。"""

    default_message = "Steam storefront request failed"
    default_code = "steam_request_failed"


class SteamRequestError(SteamClientError):
    """通信失敗・非 2xx・不正なボディなど、リトライ後も解消しなかったエラー。"""


@dataclass(slots=True)
class SteamRetryConfig:
    """一時的な失敗に対するリトライ設定。"""

    max_attempts: int = 3
    backoff_factor: float = 0.5
    retriable_statuses: tuple[int, ...] = (429, 500, 502, 503, 504)


class SteamStoreClientProtocol(Protocol):
    """core 層から利用するためのプロトコル。"""

    async def fetch_app_details(self, appid: str) -> Mapping[str, Any] | None:
        """appdetails の `data` 部分。`success: false` なら None。"""

    async def fetch_tag_page(self, tag: str) -> str:
        """タグ閲覧ページの HTML。"""

    async def fetch_more_like(self, appid: str) -> str:
        """「似たようなゲーム」ページの HTML。"""

    async def fetch_search_results(self, term: str, *, count: int = 50) -> str:
        """検索結果の埋め込み HTML。"""

    async def fetch_store_search(self, term: str) -> list[Mapping[str, Any]]:
        """簡易検索 API の `items`。"""


class SteamStoreClient(SteamStoreClientProtocol):
    """ストアフロントの各エンドポイントをタイムアウト・リトライ付きで叩く。"""

    def __init__(
        self,
        *,
        settings: SteamSettings,
        retry_config: SteamRetryConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
        sleep_func: Callable[[float], Awaitable[None]] = asyncio.sleep,
        logger=None,
    ) -> None:
        self._base_url = str(settings.store_base_url).rstrip("/")
        self._language = settings.language
        self._country_code = settings.country_code
        self._retry_config = retry_config or SteamRetryConfig(
            max_attempts=settings.max_attempts,
            backoff_factor=settings.backoff_factor,
        )
        self._http = http_client or httpx.AsyncClient(
            headers={"User-Agent": settings.user_agent},
            timeout=settings.timeout_seconds,
            follow_redirects=True,
        )
        self._sleep = sleep_func
        self._logger = logger or get_logger(__name__, component="steam-client")

    async def aclose(self) -> None:
        await self._http.aclose()

    async def fetch_app_details(self, appid: str) -> Mapping[str, Any] | None:
        payload = await self._get_json(
            "/api/appdetails",
            params={"appids": appid, "l": self._language},
        )
        if not isinstance(payload, Mapping):
            msg = f"Unexpected appdetails payload for {appid}"
            raise SteamRequestError(msg)
        record = payload.get(str(appid))
        if not isinstance(record, Mapping) or not record.get("success"):
            return None
        data = record.get("data")
        return data if isinstance(data, Mapping) else {}

    async def fetch_tag_page(self, tag: str) -> str:
        return await self._get_text(f"/tags/en/{quote(tag.strip(), safe='')}/")

    async def fetch_more_like(self, appid: str) -> str:
        return await self._get_text(
            f"/recommended/morelike/app/{appid}/",
            params={"l": self._language},
        )

    async def fetch_search_results(self, term: str, *, count: int = 50) -> str:
        payload = await self._get_json(
            "/search/results/",
            params={
                "term": term,
                "infinite": 1,
                "count": count,
                "category1": 998,
                "l": self._language,
                "cc": self._country_code,
            },
        )
        if not isinstance(payload, Mapping):
            return ""
        html = payload.get("results_html")
        return html if isinstance(html, str) else ""

    async def fetch_store_search(self, term: str) -> list[Mapping[str, Any]]:
        payload = await self._get_json(
            "/api/storesearch/",
            params={"term": term, "l": self._language, "cc": self._country_code},
        )
        if not isinstance(payload, Mapping):
            return []
        items = payload.get("items")
        if not isinstance(items, list):
            return []
        return [item for item in items if isinstance(item, Mapping)]

    async def _get_json(self, path: str, *, params: Mapping[str, Any] | None = None) -> Any:
        response = await self._request(path, params=params)
        try:
            return response.json()
        except ValueError as exc:
            msg = f"Steam returned a non-JSON body for {path}"
            raise SteamRequestError(msg) from exc

    async def _get_text(self, path: str, *, params: Mapping[str, Any] | None = None) -> str:
        response = await self._request(path, params=params)
        return response.text

    async def _request(
        self, path: str, *, params: Mapping[str, Any] | None = None
    ) -> httpx.Response:
        url = f"{self._base_url}{path}"
        attempt = 0
        while True:
            attempt += 1
            try:
                self._logger.debug("steam_request", path=path, attempt=attempt)
                response = await self._http.get(url, params=params)
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as exc:
                status_code = exc.response.status_code
                if not self._should_retry(status_code, attempt):
                    self._logger.warning(
                        "steam_request_failed",
                        path=path,
                        status_code=status_code,
                        attempt=attempt,
                    )
                    msg = f"Steam request to {path} failed (status={status_code})"
                    raise SteamRequestError(msg) from exc
                self._logger.info(
                    "steam_request_retry", path=path, status_code=status_code, attempt=attempt
                )
            except httpx.RequestError as exc:
                if not self._should_retry(None, attempt):
                    self._logger.warning(
                        "steam_request_error",
                        path=path,
                        attempt=attempt,
                        message=str(exc),
                    )
                    msg = f"Steam request to {path} failed: {exc.__class__.__name__}"
                    raise SteamRequestError(msg) from exc
                self._logger.info(
                    "steam_request_retry", path=path, status_code=None, attempt=attempt
                )
            await self._sleep(self._retry_config.backoff_factor * attempt)

    def _should_retry(self, status_code: int | None, attempt: int) -> bool:
        if attempt >= self._retry_config.max_attempts:
            return False
        if status_code is None:
            return True
        return status_code in self._retry_config.retriable_statuses


def build_steam_client(
    *,
    settings: AppSettings | None = None,
    retry_config: SteamRetryConfig | None = None,
    logger=None,
) -> SteamStoreClient:
    """共有設定から Steam クライアントを構築するファクトリ。"""

    app_settings = settings or get_settings()
    return SteamStoreClient(
        settings=app_settings.steam,
        retry_config=retry_config,
        logger=logger,
    )
