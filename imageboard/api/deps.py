"""
FastAPI dependencies for sessions, the dispatcher and the caller context.
"""

import uuid
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from imageboard.config import Settings, get_settings
from imageboard.database import get_db
from imageboard.jobs.dispatcher import Api
from imageboard.kernel.errors import AuthenticationError
from imageboard.kernel.identity import AuthContext, IdentityService, JWTManager


# Security scheme
security = HTTPBearer(auto_error=False)

DbSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def get_api(request: Request) -> Api:
    """The dispatcher built at startup (see main.lifespan)."""
    return request.app.state.api


JobApi = Annotated[Api, Depends(get_api)]


async def get_auth_context(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: DbSession,
    settings: AppSettings,
) -> AuthContext:
    """
    Caller context from the bearer token.

    No token means anonymous. A token that does not verify, or names an
    account that no longer exists, is an authentication failure rather than
    a silent downgrade to anonymous.
    """
    if not credentials:
        return AuthContext.anonymous()

    payload = JWTManager(settings).verify_access_token(credentials.credentials)
    if not payload:
        raise AuthenticationError("Invalid or expired token")

    user = await IdentityService(db, settings).get_user_by_id(uuid.UUID(payload.sub))
    if user is None:
        raise AuthenticationError("User not found")

    return AuthContext.for_user(user)


CurrentAuth = Annotated[AuthContext, Depends(get_auth_context)]
