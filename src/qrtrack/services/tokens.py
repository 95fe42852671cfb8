"""One-time codes for email verification and password reset."""

import hmac
import secrets
from datetime import UTC, datetime, timedelta
from enum import StrEnum

from qrtrack.config import settings

CODE_MIN = 100000
CODE_MAX = 999999


class TokenStatus(StrEnum):
    """Outcome of checking a presented code against a pending token."""

    VALID = "valid"
    EXPIRED = "expired"
    MISMATCH = "mismatch"
    NOT_PENDING = "not_pending"


def generate_code(now: datetime | None = None) -> tuple[str, datetime]:
    """Generate a 6-digit code and its absolute expiry time."""
    now = now or datetime.now(UTC)
    code = str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))
    return code, now + timedelta(minutes=settings.code_expiration_minutes)


def validate_token(
    code: str | None,
    expires_at: datetime | None,
    presented: str,
    now: datetime | None = None,
) -> TokenStatus:
    """Check a presented code against a stored ``(code, expires_at)`` pair.

    Expiry wins over correctness: an expired token is reported as EXPIRED
    whether or not the presented code matches. On VALID the caller must clear
    the stored token before persisting, which makes the code single-use.
    """
    if not code or expires_at is None:
        return TokenStatus.NOT_PENDING

    now = now or datetime.now(UTC)
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=UTC)
    if now >= expires_at:
        return TokenStatus.EXPIRED

    if not hmac.compare_digest(code.encode(), str(presented).encode()):
        return TokenStatus.MISMATCH

    return TokenStatus.VALID
