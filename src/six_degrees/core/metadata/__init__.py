"""メタデータ解決とゲームフィルタ。"""

from .filters import is_game_record, title_looks_like_non_game
from .models import ItemKind, ItemMetadata, normalize_title
from .store import AppDetailsSource, MetadataStore, MetadataStoreProtocol

__all__ = [
    "AppDetailsSource",
    "ItemKind",
    "ItemMetadata",
    "MetadataStore",
    "MetadataStoreProtocol",
    "is_game_record",
    "normalize_title",
    "title_looks_like_non_game",
]
