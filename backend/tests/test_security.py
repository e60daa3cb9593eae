"""
Tests for JWT identity resolution.
"""
from datetime import timedelta

import jwt
import pytest

from storefront.core.config import settings
from storefront.core.security import create_access_token, decode_access_token


class TestAccessTokens:
    """Test token creation and decoding."""

    def test_round_trip_subject(self):
        """Test a created token decodes to its subject."""
        token = create_access_token("user123")
        payload = decode_access_token(token)
        assert payload["sub"] == "user123"

    def test_expired_token_rejected(self):
        """Test an expired token decodes to None."""
        token = create_access_token("user123", expires_delta=timedelta(seconds=-1))
        assert decode_access_token(token) is None

    def test_foreign_key_rejected(self):
        """Test a token signed with another key decodes to None."""
        token = jwt.encode({"sub": "user123"}, "another-secret-key-that-did-not-sign-this", algorithm=settings.JWT_ALGORITHM)
        assert decode_access_token(token) is None

    def test_garbage_rejected(self):
        """Test a malformed token decodes to None."""
        assert decode_access_token("not.a.token") is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
