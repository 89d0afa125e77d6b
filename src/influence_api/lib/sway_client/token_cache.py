"""Explicit cache for the Sway API bearer token.

One TokenCache is created per application (or per CLI run) and handed to
every client that needs it, so the token lifetime is visible and testable
instead of living in module globals.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt
from loguru import logger

# Refresh this long before the token's own expiry.
EXPIRY_MARGIN = timedelta(hours=12)


def token_expiry(token: str, now: datetime, fallback_ttl: timedelta) -> datetime:
    """When a cached token should be considered stale.

    Reads the JWT ``exp`` claim without verifying the signature (the token
    is opaque to us; the issuer verifies it) and subtracts a safety margin.
    Tokens without a readable ``exp`` expire after ``fallback_ttl``.

    Args:
        token: Encoded JWT.
        now: Current time.
        fallback_ttl: Lifetime used when ``exp`` is unavailable.

    Returns:
        Aware UTC datetime after which the token must be refreshed.
    """
    try:
        claims = jwt.decode(token, options={"verify_signature": False, "verify_exp": False})
    except jwt.PyJWTError:
        logger.debug("Token is not a decodable JWT, using fallback TTL")
        return now + fallback_ttl

    exp = claims.get("exp")
    if not isinstance(exp, int | float):
        return now + fallback_ttl
    return datetime.fromtimestamp(exp, tz=UTC) - EXPIRY_MARGIN


@dataclass
class TokenCache:
    """Holds one bearer token and the moment it stops being reusable."""

    token: str | None = None
    expires_at: datetime | None = None

    def get(self, now: datetime | None = None) -> str | None:
        """Return the cached token while it is still fresh, else None."""
        now = now or datetime.now(UTC)
        if self.token is None or self.expires_at is None or now >= self.expires_at:
            return None
        return self.token

    def store(self, token: str, now: datetime | None = None, fallback_ttl: timedelta | None = None) -> None:
        """Cache ``token`` and compute its expiry."""
        now = now or datetime.now(UTC)
        self.token = token
        self.expires_at = token_expiry(token, now, fallback_ttl or timedelta(hours=60))
        logger.debug("Cached API token until {}", self.expires_at.isoformat())

    def clear(self) -> None:
        self.token = None
        self.expires_at = None
