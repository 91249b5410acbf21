"""
Password hashing utilities using bcrypt.

bcrypt only reads the first 72 bytes of its input, so passwords are first
digested with SHA-256 together with a per-user salt. Every character of an
arbitrarily long password therefore affects the result, and the stored
hash has a fixed length.
"""

import hashlib
import secrets

import bcrypt

# Number of rounds for bcrypt hashing (12 is secure default)
BCRYPT_ROUNDS = 12


class PasswordHasher:
    """Password hashing service."""

    @staticmethod
    def generate_salt() -> str:
        return secrets.token_hex(16)

    @staticmethod
    def _prehash(password: str, salt: str) -> bytes:
        # 64 hex chars, safely below the bcrypt input limit
        digest = hashlib.sha256((salt + password).encode("utf-8")).hexdigest()
        return digest.encode("ascii")

    @staticmethod
    def hash(password: str, salt: str, rounds: int = BCRYPT_ROUNDS) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password, any length
            salt: Per-user salt stored next to the hash
            rounds: bcrypt cost factor

        Returns:
            Hashed password string (60 characters)
        """
        hashed = bcrypt.hashpw(
            PasswordHasher._prehash(password, salt),
            bcrypt.gensalt(rounds=rounds),
        )
        return hashed.decode("utf-8")

    @staticmethod
    def verify(plain_password: str, salt: str, hashed_password: str) -> bool:
        """
        Verify a password against its salt and hash.

        Returns:
            True if password matches, False otherwise
        """
        try:
            return bcrypt.checkpw(
                PasswordHasher._prehash(plain_password, salt),
                hashed_password.encode("utf-8"),
            )
        except ValueError:
            # Malformed stored hash
            return False


# Convenience functions
def hash_password(password: str, salt: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a password."""
    return PasswordHasher.hash(password, salt, rounds)


def verify_password(plain_password: str, salt: str, hashed_password: str) -> bool:
    """Verify a password."""
    return PasswordHasher.verify(plain_password, salt, hashed_password)
