"""ゲーム以外のストアアイテムを弾くフィルタ。"""

from __future__ import annotations

import re

from six_degrees.infra.steam.dto import AppDetailsDTO

__all__ = ["BAD_LABELS", "NON_GAME_TITLE_MARKERS", "is_game_record", "title_looks_like_non_game"]

NON_GAME_TITLE_MARKERS: tuple[str, ...] = (
    "soundtrack",
    "ost",
    "demo",
    "beta",
    "playtest",
    "dedicated server",
    "sdk",
    "trailer",
    "artbook",
    "art book",
)

BAD_LABELS: frozenset[str] = frozenset(
    label.lower()
    for label in (
        "Downloadable Content",
        "Demo",
        "Demos",
        "Soundtrack",
        "Video",
        "Trailer",
        "Mod",
    )
)

_MARKER_PATTERN = re.compile(
    r"\b(?:" + "|".join(re.escape(marker) for marker in NON_GAME_TITLE_MARKERS) + r")\b",
    re.IGNORECASE,
)


def title_looks_like_non_game(title: str) -> bool:
    return bool(_MARKER_PATTERN.search(title or ""))


def is_game_record(details: AppDetailsDTO) -> bool:
    """appdetails がゲーム本編として扱えるかを判定する。

    種別が game (または未記載) で、タイトルが存在し、非ゲームを示す語を含まず、
    ジャンル/カテゴリに除外ラベルが無いものだけを通す。
    """

    if details.app_type and details.app_type != "game":
        return False
    if not details.name:
        return False
    if title_looks_like_non_game(details.name):
        return False
    labels = {label.lower() for label in (*details.genres, *details.categories)}
    return not (labels & BAD_LABELS)
