"""Unit tests for the bearer token cache."""

from datetime import UTC, datetime, timedelta

import jwt

from influence_api.lib.sway_client import TokenCache, token_expiry
from influence_api.lib.sway_client.token_cache import EXPIRY_MARGIN

NOW = datetime(2025, 6, 2, 12, 0, tzinfo=UTC)


def _jwt(**claims) -> str:
    return jwt.encode(claims, "influence-api-test-signing-key-0123456789", algorithm="HS256")


class TestTokenExpiry:
    def test_uses_exp_claim_minus_margin(self) -> None:
        exp = NOW + timedelta(days=3)
        token = _jwt(exp=int(exp.timestamp()))

        assert token_expiry(token, NOW, timedelta(hours=60)) == exp - EXPIRY_MARGIN

    def test_expired_token_still_decodes(self) -> None:
        exp = NOW - timedelta(days=1)
        token = _jwt(exp=int(exp.timestamp()))

        assert token_expiry(token, NOW, timedelta(hours=60)) == exp - EXPIRY_MARGIN

    def test_fallback_without_exp(self) -> None:
        assert token_expiry(_jwt(sub="abc"), NOW, timedelta(hours=60)) == NOW + timedelta(hours=60)

    def test_fallback_for_opaque_token(self) -> None:
        assert token_expiry("not-a-jwt", NOW, timedelta(hours=5)) == NOW + timedelta(hours=5)


class TestTokenCache:
    """Tests for TokenCache."""

    def test_empty(self) -> None:
        assert TokenCache().get(NOW) is None

    def test_returns_fresh_token(self) -> None:
        cache = TokenCache()
        cache.store("opaque", NOW, timedelta(hours=60))

        assert cache.get(NOW + timedelta(hours=59)) == "opaque"
        assert cache.get(NOW + timedelta(hours=60)) is None

    def test_margin_applies_to_jwt(self) -> None:
        cache = TokenCache()
        token = _jwt(exp=int((NOW + timedelta(hours=24)).timestamp()))
        cache.store(token, NOW)

        assert cache.get(NOW + timedelta(hours=11)) == token
        assert cache.get(NOW + timedelta(hours=12)) is None

    def test_clear(self) -> None:
        cache = TokenCache()
        cache.store("opaque", NOW)
        cache.clear()

        assert cache.token is None
        assert cache.get(NOW) is None
