"""Password hashing and verification."""

import bcrypt

import config


def hash_password(plain_password: str, *, rounds: int | None = None) -> str:
    """
    Hash a plain password using bcrypt with a fresh salt.

    Args:
        plain_password: The plain text password (at most 72 UTF-8 bytes)
        rounds: bcrypt cost factor, defaults to settings.BCRYPT_ROUNDS

    Returns:
        Hashed password string
    """
    salt = bcrypt.gensalt(rounds=rounds or config.settings.BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a bcrypt hash.

    Returns:
        True if the password matches, False on mismatch or malformed hash
    """
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        return False


class PasswordHasher:
    """Injectable hasher carrying its own cost factor."""

    def __init__(self, rounds: int | None = None):
        self.rounds = rounds or config.settings.BCRYPT_ROUNDS

    def hash(self, plain_password: str) -> str:
        return hash_password(plain_password, rounds=self.rounds)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        return verify_password(plain_password, hashed_password)
