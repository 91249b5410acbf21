"""
Identity service for user account operations.
"""

import uuid
from typing import Optional

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from imageboard.config import Settings
from imageboard.kernel.errors import AuthenticationError, UnconfirmedEmailError
from imageboard.kernel.identity.password import PasswordHasher
from imageboard.kernel.models.base import fold_name
from imageboard.kernel.models.user import AccessRank, User

# Arbitrary key for pg_advisory_xact_lock; serializes registrations so the
# "first user becomes admin" check cannot race.
REGISTRATION_LOCK_KEY = 0x1B0A7D


class IdentityService:
    """
    Model operations on user accounts.

    All methods run inside the caller's transaction; nothing here commits.
    """

    def __init__(self, session: AsyncSession, settings: Settings):
        self.session = session
        self.settings = settings

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get a user by ID."""
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_name(self, name: str) -> Optional[User]:
        """Get a user by name, ignoring case."""
        query = select(User).where(User.name_lower == fold_name(name))
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_user_by_confirmed_email(self, email: str) -> Optional[User]:
        query = select(User).where(func.lower(User.email_confirmed) == email.strip().lower())
        result = await self.session.execute(query)
        return result.scalars().first()

    async def count_users(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(User))
        return result.scalar_one()

    async def lock_registrations(self) -> None:
        """
        Serialize concurrent registrations until the transaction ends.

        PostgreSQL gets a transaction-scoped advisory lock. SQLite already
        allows a single writer at a time.
        """
        if self.session.get_bind().dialect.name == "postgresql":
            await self.session.execute(
                text("SELECT pg_advisory_xact_lock(:key)"),
                {"key": REGISTRATION_LOCK_KEY},
            )

    async def create_user(
        self,
        name: str,
        password: str,
        access_rank: AccessRank,
        email_confirmed: Optional[str] = None,
        email_unconfirmed: Optional[str] = None,
        email_token: Optional[str] = None,
    ) -> User:
        """Hash the password and add a new account to the session."""
        salt = PasswordHasher.generate_salt()
        user = User(
            name=name,
            password_salt=salt,
            password_hash=PasswordHasher.hash(password, salt, self.settings.bcrypt_rounds),
            access_rank=access_rank,
            email_confirmed=email_confirmed,
            email_unconfirmed=email_unconfirmed,
            email_token=email_token,
        )
        self.session.add(user)
        await self.session.flush()  # Get the ID
        await self.session.refresh(user)  # Server-side timestamps
        return user

    async def authenticate(self, name: str, password: str) -> User:
        """
        Check credentials.

        Raises:
            AuthenticationError: Unknown name or wrong password
            UnconfirmedEmailError: Registration requires e-mail and the
                account has not confirmed one yet
        """
        user = await self.get_user_by_name(name)
        if user is None:
            raise AuthenticationError("Invalid user name")

        if not PasswordHasher.verify(password, user.password_salt, user.password_hash):
            raise AuthenticationError("Invalid password")

        if self.settings.registration.need_email_for_registering and not user.email_confirmed:
            raise UnconfirmedEmailError("You need to confirm your e-mail address before logging in")

        return user
