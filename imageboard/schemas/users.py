"""
User and authentication schemas.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from imageboard.kernel.models.user import AccessRank


class UserResponse(BaseModel):
    """Public view of an account."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    access_rank: AccessRank
    email_confirmed: Optional[str] = None
    email_unconfirmed: Optional[str] = None
    created_at: Optional[datetime] = None


class LoginRequest(BaseModel):
    name: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
