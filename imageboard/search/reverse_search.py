"""
Reverse image search collaborator.

The similarity algorithm lives elsewhere; this module only defines the
contract the job layer consumes, an HTTP client for it, and offset/limit
paging over the returned similar matches.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

import httpx

from imageboard.config import Settings
from imageboard.kernel.errors import ServiceUnavailableError
from imageboard.logging_config import get_logger
from imageboard.schemas.common import PaginatedResponse

logger = get_logger(__name__)

# Raw bytes of an uploaded file, or a URL the service can fetch
ImageSource = Union[bytes, str]


@dataclass(frozen=True)
class SimilarMatch:
    post_id: int
    score: float


@dataclass(frozen=True)
class LookupResult:
    exact_match: Optional[int] = None  # post ID
    similar_matches: List[SimilarMatch] = field(default_factory=list)

    def without_post(self, post_id: int) -> "LookupResult":
        """Drop a post from the result (used when searching by an existing post)."""
        return LookupResult(
            exact_match=None if self.exact_match == post_id else self.exact_match,
            similar_matches=[m for m in self.similar_matches if m.post_id != post_id],
        )


class SimilarityLookup(ABC):
    @abstractmethod
    async def lookup(self, image: ImageSource) -> LookupResult:
        """Exact match (if any) plus similar posts, best score first."""


class HttpSimilarityLookup(SimilarityLookup):
    """
    Talks to the similarity service over HTTP.

    Expected response::

        {"exact_match": {"post_id": 12} | null,
         "similar": [{"post_id": 3, "score": 0.91}, ...]}
    """

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self.url = settings.reverse_search_url
        self.timeout = settings.reverse_search_timeout
        self._client = client

    async def _post(self, client: httpx.AsyncClient, image: ImageSource) -> httpx.Response:
        if isinstance(image, bytes):
            return await client.post(self.url, files={"content": image}, timeout=self.timeout)
        return await client.post(self.url, json={"content_url": image}, timeout=self.timeout)

    async def lookup(self, image: ImageSource) -> LookupResult:
        try:
            if self._client is not None:
                resp = await self._post(self._client, image)
            else:
                async with httpx.AsyncClient() as client:
                    resp = await self._post(client, image)
            resp.raise_for_status()
            result = self._parse(resp.json())
        except (httpx.HTTPError, KeyError, TypeError, AttributeError, ValueError) as exc:
            logger.warning("Reverse search lookup failed: %r", exc)
            raise ServiceUnavailableError("Reverse search is unavailable") from exc
        return result

    @staticmethod
    def _parse(data: dict) -> LookupResult:
        exact = data.get("exact_match") or None
        similar = [
            SimilarMatch(post_id=int(item["post_id"]), score=float(item["score"]))
            for item in data.get("similar") or []
        ]
        similar.sort(key=lambda m: m.score, reverse=True)
        return LookupResult(
            exact_match=int(exact["post_id"]) if exact else None,
            similar_matches=similar,
        )


def paginate(
    matches: Sequence[SimilarMatch],
    offset: int = 0,
    limit: int = 20,
) -> PaginatedResponse[SimilarMatch]:
    """Slice ``matches``; out-of-range offsets give an empty page."""
    offset = max(offset, 0)
    limit = max(limit, 0)
    items = list(matches[offset:offset + limit])
    return PaginatedResponse[SimilarMatch].create(
        items=items,
        total=len(matches),
        offset=offset,
        limit=limit,
    )
