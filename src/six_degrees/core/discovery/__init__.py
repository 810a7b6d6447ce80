"""タグ・近傍からの候補探索。"""

from .neighbors import MoreLikeSource, NeighborResolver, NeighborResolverProtocol
from .tag_candidates import DEFAULT_TAG_SECTIONS, TagCandidateResolver, TagSearchSource, TagSection

__all__ = [
    "DEFAULT_TAG_SECTIONS",
    "MoreLikeSource",
    "NeighborResolver",
    "NeighborResolverProtocol",
    "TagCandidateResolver",
    "TagSearchSource",
    "TagSection",
]
