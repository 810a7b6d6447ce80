"""ゲームのメタデータを表すドメインモデル。"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from six_degrees.infra.steam.dto import AppDetailsDTO

__all__ = ["ItemKind", "ItemMetadata", "normalize_tags", "normalize_title"]

_YEAR_PATTERN = re.compile(r"\b(\d{4})\b")
_TRADEMARK_PATTERN = re.compile(r"[™®©]")
_WHITESPACE_PATTERN = re.compile(r"\s+")
MAX_TAGS = 10


class ItemKind(str, Enum):
    """ストアアイテムの種別。"""

    GAME = "game"
    OTHER = "other"

    @classmethod
    def from_app_type(cls, app_type: str | None) -> ItemKind:
        # 種別未記載は game として扱う
        if not app_type or app_type.strip().lower() == "game":
            return cls.GAME
        return cls.OTHER


def normalize_tags(values: Any) -> frozenset[str]:
    if not values:
        return frozenset()
    return frozenset(text for value in values if (text := str(value).strip().lower()))


def normalize_title(title: str) -> str:
    """版違い・地域違いの同名タイトルを同一視するための正規化。"""

    text = _TRADEMARK_PATTERN.sub("", title)
    text = unicodedata.normalize("NFKC", text)
    return _WHITESPACE_PATTERN.sub(" ", text).strip().casefold()


def _release_year(text: str) -> int | None:
    match = _YEAR_PATTERN.search(text or "")
    return int(match.group(1)) if match else None


@dataclass(slots=True, frozen=True)
class ItemMetadata:
    """解決済みのアイテム情報。生成後は変更しない。"""

    id: str
    kind: ItemKind
    title: str
    image_url: str = ""
    release_year: int | None = None
    tags: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", str(self.id).strip())
        object.__setattr__(self, "title", (self.title or "").strip())
        object.__setattr__(self, "tags", normalize_tags(self.tags))

    @property
    def normalized_title(self) -> str:
        return normalize_title(self.title)

    @property
    def is_game(self) -> bool:
        return self.kind is ItemKind.GAME and bool(self.title)

    @classmethod
    def from_app_details(cls, details: AppDetailsDTO) -> ItemMetadata:
        labels = (*details.genres, *details.categories)[:MAX_TAGS]
        return cls(
            id=details.appid,
            kind=ItemKind.from_app_type(details.app_type),
            title=details.name,
            image_url=details.header_image,
            release_year=_release_year(details.release_date),
            tags=frozenset(labels),
        )

    def to_payload(self) -> dict[str, Any]:
        """API/CLI の JSON 出力形式。"""

        return {
            "id": self.id,
            "kind": self.kind.value,
            "title": self.title,
            "imageUrl": self.image_url,
            "releaseYear": self.release_year,
            "tags": sorted(self.tags),
        }
