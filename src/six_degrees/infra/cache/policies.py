"""キャッシュの退避ポリシー。"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

__all__ = [
    "CompositePolicy",
    "EvictionPolicy",
    "MaxEntriesPolicy",
    "NoEviction",
    "TTLPolicy",
    "build_policy",
]


class EvictionPolicy(Protocol):
    """`CacheService` が書き込み・参照時に問い合わせるポリシー。"""

    def is_expired(self, stored_at: float, now: float) -> bool:
        """保存時刻から見てエントリが失効しているか。"""

    def overflow(self, keys_oldest_first: Sequence[str]) -> Iterable[str]:
        """容量超過分として退避すべきキーを返す。"""


class NoEviction:
    """プロセス終了まで保持し続ける。"""

    def is_expired(self, stored_at: float, now: float) -> bool:
        return False

    def overflow(self, keys_oldest_first: Sequence[str]) -> Iterable[str]:
        return ()


@dataclass(slots=True, frozen=True)
class MaxEntriesPolicy:
    """件数上限を超えた分を最も古く使われたものから捨てる (LRU)。"""

    max_entries: int

    def __post_init__(self) -> None:
        if self.max_entries < 1:
            msg = "max_entries must be a positive integer"
            raise ValueError(msg)

    def is_expired(self, stored_at: float, now: float) -> bool:
        return False

    def overflow(self, keys_oldest_first: Sequence[str]) -> Iterable[str]:
        excess = len(keys_oldest_first) - self.max_entries
        if excess <= 0:
            return ()
        return tuple(keys_oldest_first[:excess])


@dataclass(slots=True, frozen=True)
class TTLPolicy:
    """保存から一定秒数経過したエントリを失効させる。"""

    ttl_seconds: float

    def __post_init__(self) -> None:
        if self.ttl_seconds <= 0:
            msg = "ttl_seconds must be positive"
            raise ValueError(msg)

    def is_expired(self, stored_at: float, now: float) -> bool:
        return now - stored_at >= self.ttl_seconds

    def overflow(self, keys_oldest_first: Sequence[str]) -> Iterable[str]:
        return ()


@dataclass(slots=True, frozen=True)
class CompositePolicy:
    """複数ポリシーを組み合わせる。いずれかが失効/退避と判断すれば従う。"""

    policies: tuple[EvictionPolicy, ...]

    def is_expired(self, stored_at: float, now: float) -> bool:
        return any(policy.is_expired(stored_at, now) for policy in self.policies)

    def overflow(self, keys_oldest_first: Sequence[str]) -> Iterable[str]:
        victims: list[str] = []
        for policy in self.policies:
            for key in policy.overflow(keys_oldest_first):
                if key not in victims:
                    victims.append(key)
        return tuple(victims)


def build_policy(*, max_entries: int | None, ttl_seconds: float | None) -> EvictionPolicy:
    """設定値から適切なポリシーを組み立てる。"""

    policies: list[EvictionPolicy] = []
    if max_entries is not None:
        policies.append(MaxEntriesPolicy(max_entries))
    if ttl_seconds is not None:
        policies.append(TTLPolicy(ttl_seconds))
    if not policies:
        return NoEviction()
    if len(policies) == 1:
        return policies[0]
    return CompositePolicy(tuple(policies))
