"""
Per-request caller identity.
"""

from dataclasses import dataclass
from typing import Optional

from imageboard.kernel.models.user import AccessRank, User


@dataclass(frozen=True)
class AuthContext:
    """Who is calling. Built fresh for every request, never persisted."""

    user: Optional[User] = None
    access_rank: AccessRank = AccessRank.ANONYMOUS

    @classmethod
    def anonymous(cls) -> "AuthContext":
        return cls()

    @classmethod
    def for_user(cls, user: User) -> "AuthContext":
        return cls(user=user, access_rank=user.rank)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def has_confirmed_email(self) -> bool:
        return self.user is not None and bool(self.user.email_confirmed)
