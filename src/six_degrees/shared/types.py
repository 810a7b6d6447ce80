"""共有型・ユーティリティ。"""

from __future__ import annotations

from typing import NewType

AppID = NewType("AppID", str)


def normalize_app_id(value: object) -> AppID | None:
    """数字のみで構成された App ID を文字列に正規化する。不正なら None。

    JSON 由来の整数もそのまま受け付ける。先頭ゼロは保持する。
    """

    text = str(value).strip() if value is not None else ""
    if not text or not text.isdigit():
        return None
    return AppID(text)


__all__ = ["AppID", "normalize_app_id"]
