"""
User model and the global access rank ladder.
"""

import uuid
from enum import Enum
from typing import Optional

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, validates

from imageboard.kernel.models.base import Base, TimestampMixin, fold_name, generate_uuid


class AccessRank(str, Enum):
    """Global access ranks, weakest first.

    NOBODY is never assigned to an account; it is the threshold of
    privileges that no one passes.
    """
    ANONYMOUS = "anonymous"
    REGISTERED = "registered"
    POWER_USER = "power-user"
    MODERATOR = "moderator"
    ADMIN = "admin"
    NOBODY = "nobody"

    @property
    def level(self) -> int:
        return ACCESS_RANK_HIERARCHY[self]

    def __ge__(self, other):
        if isinstance(other, AccessRank):
            return self.level >= other.level
        return NotImplemented

    def __gt__(self, other):
        if isinstance(other, AccessRank):
            return self.level > other.level
        return NotImplemented

    def __le__(self, other):
        if isinstance(other, AccessRank):
            return self.level <= other.level
        return NotImplemented

    def __lt__(self, other):
        if isinstance(other, AccessRank):
            return self.level < other.level
        return NotImplemented

    @classmethod
    def parse(cls, value: str) -> "AccessRank":
        """Parse a rank name; accepts "power-user", "power_user", "PowerUser"."""
        normalized = value.strip().lower().replace("_", "-")
        if normalized == "poweruser":
            normalized = "power-user"
        return cls(normalized)


# Rank hierarchy - higher levels include all lower levels
ACCESS_RANK_HIERARCHY = {
    AccessRank.ANONYMOUS: 0,
    AccessRank.REGISTERED: 1,
    AccessRank.POWER_USER: 2,
    AccessRank.MODERATOR: 3,
    AccessRank.ADMIN: 4,
    AccessRank.NOBODY: 5,
}


class User(Base, TimestampMixin):
    """User account model."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    name: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
    )
    # fold_name(name); kept in sync by _sync_name_lower
    name_lower: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
    )
    password_salt: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    access_rank: Mapped[AccessRank] = mapped_column(
        String(20),
        default=AccessRank.REGISTERED,
        nullable=False,
    )
    email_confirmed: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        index=True,
    )
    email_unconfirmed: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    # Sent in the confirmation mail for email_unconfirmed
    email_token: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        unique=True,
    )

    @validates("name")
    def _sync_name_lower(self, key: str, value: str) -> str:
        self.name_lower = fold_name(value)
        return value

    @property
    def rank(self) -> AccessRank:
        # Loaded rows hold the plain string value
        return AccessRank(self.access_rank)

    def __repr__(self) -> str:
        return f"<User {self.name}>"
