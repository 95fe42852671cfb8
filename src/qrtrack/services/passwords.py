"""Password hashing and verification."""

import hmac

import bcrypt

from qrtrack.config import settings
from qrtrack.errors import ValidationError

_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")

# bcrypt only reads the first 72 bytes and newer releases refuse longer input
MAX_PASSWORD_BYTES = 72


def is_hashed(stored: str) -> bool:
    """Whether a stored credential is a bcrypt hash (vs. a legacy plaintext value)."""
    return stored.startswith(_BCRYPT_PREFIXES)


def hash_password(password: str) -> str:
    """Hash a password with bcrypt.

    Raises:
        ValidationError: The password is longer than bcrypt accepts
    """
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(stored: str | None, presented: str) -> bool:
    """Compare a presented password with a stored credential.

    Legacy records hold the plaintext; those are compared in constant time and
    should be rehashed by the caller (see ``needs_rehash``).
    """
    if not stored:
        return False
    if is_hashed(stored):
        try:
            return bcrypt.checkpw(presented.encode(), stored.encode())
        except ValueError:
            return False
    return hmac.compare_digest(stored.encode(), presented.encode())


def needs_rehash(stored: str) -> bool:
    return not is_hashed(stored)
