"""
Authentication endpoints.

Accounts are created through the ``register-user`` job; this router only
exchanges credentials for a token.
"""

from fastapi import APIRouter

from imageboard.api.deps import AppSettings, DbSession
from imageboard.kernel.identity import IdentityService, JWTManager
from imageboard.schemas.users import LoginRequest, TokenResponse, UserResponse

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, db: DbSession, settings: AppSettings):
    """
    Authenticate by name and password and return an access token.

    Failures surface as AuthenticationError (401) or
    UnconfirmedEmailError (403) through the app's JobError handler.
    """
    user = await IdentityService(db, settings).authenticate(data.name, data.password)
    token, expires_in = JWTManager(settings).create_access_token(
        user_id=user.id,
        name=user.name,
        rank=user.rank.value,
    )
    return TokenResponse(
        access_token=token,
        expires_in=expires_in,
        user=UserResponse.model_validate(user),
    )
