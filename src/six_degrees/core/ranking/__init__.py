"""多様性優先のランキング。"""

from .diversity import DiversityRanker, DiversityRankerError, SimilarQuery
from .overlap import jaccard_overlap

__all__ = ["DiversityRanker", "DiversityRankerError", "SimilarQuery", "jaccard_overlap"]
