"""
Reverse search schemas.
"""

from typing import Optional

from pydantic import BaseModel

from imageboard.schemas.common import PaginatedResponse
from imageboard.search.reverse_search import SimilarMatch


class ReverseSearchResponse(BaseModel):
    exact_match: Optional[int] = None  # post ID
    similar: PaginatedResponse[SimilarMatch]
