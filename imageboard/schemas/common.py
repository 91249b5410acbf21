"""
Common schema types used across the API.
"""

from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class ErrorResponse(BaseModel):
    """Standard error response."""

    kind: str
    message: str
    missing: Optional[List[str]] = None


class PaginatedResponse(BaseModel, Generic[T]):
    """Offset/limit slice of a longer list."""

    items: List[T]
    total: int
    offset: int = 0
    limit: int = 20
    has_more: bool = False

    @classmethod
    def create(
        cls,
        items: List[T],
        total: int,
        offset: int = 0,
        limit: int = 20,
    ) -> "PaginatedResponse[T]":
        return cls(
            items=items,
            total=total,
            offset=offset,
            limit=limit,
            has_more=(offset + len(items)) < total,
        )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    database: str = "connected"

