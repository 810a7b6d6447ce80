"""Steam appdetails レスポンス向け DTO と整形ユーティリティ。"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(slots=True, frozen=True)
class AppDetailsDTO:
    """appdetails から必要なフィールドだけを抜き出した DTO。

    欠けたフィールドは空文字・空タプルになる。
    """

    appid: str
    app_type: str = ""
    name: str = ""
    header_image: str = ""
    release_date: str = ""
    genres: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()


def parse_app_details(appid: str, data: Mapping[str, Any] | None) -> AppDetailsDTO:
    """`data` ペイロードを DTO へ変換する。形が崩れていても例外は出さない。"""

    payload: Mapping[str, Any] = data if isinstance(data, Mapping) else {}
    release = payload.get("release_date")
    release_text = release.get("date") if isinstance(release, Mapping) else None
    return AppDetailsDTO(
        appid=str(appid),
        app_type=_as_text(payload.get("type")).lower(),
        name=_as_text(payload.get("name")).strip(),
        header_image=_first_text(
            payload.get("header_image"),
            payload.get("capsule_image"),
            payload.get("capsule_imagev5"),
        ),
        release_date=_as_text(release_text),
        genres=_descriptions(payload.get("genres")),
        categories=_descriptions(payload.get("categories")),
    )


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _first_text(*values: Any) -> str:
    for value in values:
        if isinstance(value, str) and value:
            return value
    return ""


def _descriptions(values: Any) -> tuple[str, ...]:
    if not isinstance(values, list):
        return ()
    descriptions: list[str] = []
    for item in values:
        if not isinstance(item, Mapping):
            continue
        text = _as_text(item.get("description")).strip()
        if text:
            descriptions.append(text)
    return tuple(descriptions)


__all__ = ["AppDetailsDTO", "parse_app_details"]
