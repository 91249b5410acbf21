"""
Identity Core - accounts, credentials and caller context.
"""

from imageboard.kernel.identity.password import PasswordHasher, verify_password, hash_password
from imageboard.kernel.identity.jwt import JWTManager, AccessTokenPayload
from imageboard.kernel.identity.context import AuthContext
from imageboard.kernel.identity.identity_service import IdentityService

__all__ = [
    "PasswordHasher",
    "verify_password",
    "hash_password",
    "JWTManager",
    "AccessTokenPayload",
    "AuthContext",
    "IdentityService",
]
