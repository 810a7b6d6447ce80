"""タグ集合の重なり度合い。"""

from __future__ import annotations

from collections.abc import Collection

__all__ = ["jaccard_overlap"]


def jaccard_overlap(a: Collection[str], b: Collection[str]) -> float:
    """Jaccard 係数 |A∩B| / |A∪B|。両方空なら 0。

    呼び出し側で小文字化済みの集合を渡すこと。
    """

    left = set(a)
    right = set(b)
    intersection = len(left & right)
    union = len(left) + len(right) - intersection
    return intersection / max(union, 1)
