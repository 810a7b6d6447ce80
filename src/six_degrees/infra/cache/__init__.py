"""プロセス内キャッシュ。"""

from .memory import NEGATIVE, CacheEntry, CacheService
from .policies import (
    CompositePolicy,
    EvictionPolicy,
    MaxEntriesPolicy,
    NoEviction,
    TTLPolicy,
    build_policy,
)

__all__ = [
    "NEGATIVE",
    "CacheEntry",
    "CacheService",
    "CompositePolicy",
    "EvictionPolicy",
    "MaxEntriesPolicy",
    "NoEviction",
    "TTLPolicy",
    "build_policy",
]
