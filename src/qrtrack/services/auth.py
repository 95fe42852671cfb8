"""Session token minting and verification (JWT)."""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from qrtrack.config import settings
from qrtrack.errors import UpstreamError
from qrtrack.models import Account


class AuthError(Exception):
    """Authentication error."""

    pass


class InvalidTokenError(AuthError):
    """Token is malformed or its signature does not verify."""

    pass


class ExpiredTokenError(AuthError):
    """Token signature is valid but the token has expired."""

    pass


def _secret() -> str:
    if not settings.session_secret:
        raise UpstreamError("Session signing is not configured")
    return settings.session_secret


def create_token(account: Account, now: datetime | None = None) -> str:
    """Create a JWT session token for an account."""
    issued = now or datetime.now(UTC)
    payload = {
        "sub": account.id,
        "email": account.email,
        "iat": issued,
        "exp": issued + timedelta(days=settings.jwt_expiration_days),
    }
    return jwt.encode(payload, _secret(), algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT token.

    The signature is checked before the expiry, so a tampered token is always
    reported as invalid even when it is also past its expiry.
    """
    try:
        return jwt.decode(token, _secret(), algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as e:
        raise ExpiredTokenError("Token has expired") from e
    except JWTError as e:
        raise InvalidTokenError(f"Invalid token: {e}") from e
