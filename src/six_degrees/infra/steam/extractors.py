"""ストアフロント HTML から App ID の並びを取り出すアダプタ群。

ページ構造の変化はこのモジュールだけで吸収する。
"""

from __future__ import annotations

import re
from typing import Protocol

from bs4 import BeautifulSoup, Tag

__all__ = [
    "AppCardExtractor",
    "IdentifierExtractor",
    "SectionHeadingExtractor",
    "app_id_from_href",
    "dedupe_preserving_order",
]

_APP_HREF_PATTERN = re.compile(r"/app/(\d+)")
_HTML_PARSER = "html.parser"


class IdentifierExtractor(Protocol):
    """HTML 文書から App ID を順序付きで返すケイパビリティ。"""

    def extract_identifiers(self, document: str, section_hint: str | None = None) -> list[str]:
        """`section_hint` はアダプタごとに解釈が異なる (無視してもよい)。"""


def app_id_from_href(href: str | None) -> str | None:
    if not href:
        return None
    match = _APP_HREF_PATTERN.search(href)
    return match.group(1) if match else None


def dedupe_preserving_order(values: list[str]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        unique.append(value)
    return unique


class SectionHeadingExtractor:
    """見出し (h2/h3) の文言で節を特定し、後続の兄弟要素からリンクを拾う。

    Steam のタグページは「New & Trending」「Top Sellers」などの見出しの直後に
    カード群を並べる。見出しから最大 `sibling_window` 個の兄弟要素を順に調べ、
    最初に App リンクを含んでいた要素の ID を返す。
    """

    def __init__(self, *, heading_tags: tuple[str, ...] = ("h2", "h3"), sibling_window: int = 4):
        self._heading_tags = heading_tags
        self._sibling_window = sibling_window

    def extract_identifiers(self, document: str, section_hint: str | None = None) -> list[str]:
        if not document or not section_hint:
            return []
        soup = BeautifulSoup(document, _HTML_PARSER)
        heading = self._find_heading(soup, section_hint)
        if heading is None:
            return []

        for sibling in heading.find_next_siblings(limit=self._sibling_window):
            ids = [
                app_id
                for link in sibling.select('a[href*="/app/"]')
                if (app_id := app_id_from_href(link.get("href")))
            ]
            if ids:
                return dedupe_preserving_order(ids)
        return []

    def _find_heading(self, soup: BeautifulSoup, hint: str) -> Tag | None:
        needle = hint.strip().lower()
        for heading in soup.find_all(list(self._heading_tags)):
            if needle in heading.get_text(" ", strip=True).lower():
                return heading
        return None


class AppCardExtractor:
    """カード要素 (`data-ds-appid`) と App リンクを文書順に拾う。

    「似たようなゲーム」ページと検索結果 HTML の双方に使う。`section_hint` は無視する。
    """

    def __init__(self, *, selector: str = '.cluster_capsule, a[href*="/app/"]'):
        self._selector = selector

    def extract_identifiers(self, document: str, section_hint: str | None = None) -> list[str]:
        if not document:
            return []
        soup = BeautifulSoup(document, _HTML_PARSER)
        ids: list[str] = []
        for element in soup.select(self._selector):
            app_id = self._card_app_id(element)
            if app_id:
                ids.append(app_id)
        return dedupe_preserving_order(ids)

    def _card_app_id(self, element: Tag) -> str | None:
        raw = element.get("data-ds-appid")
        if isinstance(raw, str):
            # バンドルはカンマ区切りで複数 ID を持つため単一 ID のみ採用
            candidate = raw.strip()
            if candidate.isdigit():
                return candidate
        href = element.get("href")
        return app_id_from_href(href if isinstance(href, str) else None)
