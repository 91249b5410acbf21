"""
Job invocation schemas.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from imageboard.schemas.common import ErrorResponse


class JobRequest(BaseModel):
    """Arguments for one job, keyed by argument name (e.g. "new-user-name")."""

    arguments: Dict[str, Any] = Field(default_factory=dict)


class JobResponse(BaseModel):
    """Body of a job invocation: exactly one of result/error is set."""

    result: Optional[Any] = None
    error: Optional[ErrorResponse] = None
