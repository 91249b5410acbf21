"""
Pydantic schemas for API request/response validation.

Reverse search schemas live in ``imageboard.schemas.posts`` and are not
re-exported here (they depend on ``imageboard.search``).
"""

from imageboard.schemas.common import ErrorResponse, HealthResponse, PaginatedResponse
from imageboard.schemas.jobs import JobRequest, JobResponse
from imageboard.schemas.tags import TagResponse
from imageboard.schemas.users import LoginRequest, TokenResponse, UserResponse

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "PaginatedResponse",
    "JobRequest",
    "JobResponse",
    "TagResponse",
    "LoginRequest",
    "TokenResponse",
    "UserResponse",
]
