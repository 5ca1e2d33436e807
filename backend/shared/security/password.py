"""
Password hashing utilities using bcrypt.

Plaintext passwords are hashed before they reach the catalog store and are
never persisted or logged.
"""

import bcrypt

from shared.config.settings import get_settings


BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def hash_password(password: str, rounds: int | None = None) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password to hash.
        rounds: Cost factor. Defaults to settings.bcrypt_rounds.

    Returns:
        Hashed password string (includes salt and algorithm info).

    Example:
        hashed = hash_password("Admin123!")
        # Returns something like: $2b$12$...
    """
    salt = bcrypt.gensalt(rounds=rounds or get_settings().bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash.

    Non-bcrypt hashes are rejected outright.
    """
    if not hashed_password.startswith(BCRYPT_PREFIXES):
        return False

    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
