"""
Reverse image search contract and paging.
"""

from imageboard.search.reverse_search import (
    HttpSimilarityLookup,
    LookupResult,
    SimilarMatch,
    SimilarityLookup,
    paginate,
)

__all__ = [
    "HttpSimilarityLookup",
    "LookupResult",
    "SimilarMatch",
    "SimilarityLookup",
    "paginate",
]
