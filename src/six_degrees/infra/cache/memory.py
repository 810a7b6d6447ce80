"""プロセス内メモリキャッシュ。"""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from six_degrees.shared.logging import get_logger

from .policies import EvictionPolicy, NoEviction

__all__ = ["NEGATIVE", "CacheEntry", "CacheService"]


class _NegativeMarker:
    """「解決済みだが無効」を表す番兵。"""

    __slots__ = ()

    def __repr__(self) -> str:
        return "NEGATIVE"


NEGATIVE: Any = _NegativeMarker()


@dataclass(slots=True, frozen=True)
class CacheEntry:
    """保存された値と保存時刻。"""

    value: Any
    stored_at: float

    @property
    def is_negative(self) -> bool:
        return self.value is NEGATIVE


class CacheService:
    """識別子やタグ文字列をキーとするキャッシュ。

    プロセスごとに 1 インスタンスを生成し、各コンポーネントへ注入する。
    同一キーへの同時ロードは `get_or_load` で 1 回の取得にまとめられる。
    """

    def __init__(
        self,
        *,
        policy: EvictionPolicy | None = None,
        clock: Callable[[], float] = time.monotonic,
        logger=None,
    ) -> None:
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._inflight: dict[str, asyncio.Future[Any]] = {}
        self._policy = policy or NoEviction()
        self._clock = clock
        self._logger = logger or get_logger(__name__, component="cache")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.lookup(key) is not None

    def lookup(self, key: str) -> CacheEntry | None:
        """失効していないエントリを返す。参照したエントリは LRU 上で新しくなる。"""

        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._policy.is_expired(entry.stored_at, self._clock()):
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return entry

    def get(self, key: str, default: Any = None) -> Any:
        """値を返す。否定エントリと未登録は `default`。"""

        entry = self.lookup(key)
        if entry is None or entry.is_negative:
            return default
        return entry.value

    def set(self, key: str, value: Any) -> None:
        """値を保存する。`None` は否定エントリとして保存する。"""

        stored = NEGATIVE if value is None else value
        self._entries[key] = CacheEntry(value=stored, stored_at=self._clock())
        self._entries.move_to_end(key)
        for victim in tuple(self._policy.overflow(tuple(self._entries))):
            self._entries.pop(victim, None)

    def set_negative(self, key: str) -> None:
        self.set(key, None)

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        """キャッシュを参照し、なければ `loader` で取得して保存する。

        同一キーのロードが進行中なら新たに取得せず、その結果を待つ。
        `loader` が `None` を返した場合は否定エントリとして保存し `None` を返す。
        `loader` の例外は保存せず、待機中の全呼び出し元へそのまま伝播する。
        """

        entry = self.lookup(key)
        if entry is not None:
            return None if entry.is_negative else entry.value

        pending = self._inflight.get(key)
        if pending is not None:
            self._logger.debug("cache_load_coalesced", key=key)
            return await asyncio.shield(pending)

        task = asyncio.ensure_future(self._load_and_store(key, loader))
        self._inflight[key] = task
        task.add_done_callback(lambda _: self._inflight.pop(key, None))
        return await asyncio.shield(task)

    async def _load_and_store(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        value = await loader()
        self.set(key, value)
        return value

    @staticmethod
    def app_key(appid: str) -> str:
        return f"app:{appid}"

    @staticmethod
    def tag_page_key(tag: str) -> str:
        return f"tag:html:{tag.strip().lower()}"

    @staticmethod
    def more_like_key(appid: str) -> str:
        return f"morelike:{appid}"
