"""
Tests for bearer token resolution.
"""

import time

import jwt
import pytest

from errors import AuthError, ErrorCode
from services.auth import TokenResolver

SECRET = "auth-test-secret-with-enough-bytes-0123456789"


def _token(claims, secret=SECRET):
    return jwt.encode(claims, secret, algorithm="HS256")


class TestTokenResolver:
    def setup_method(self):
        self.resolver = TokenResolver(SECRET)

    def test_decode_subject(self):
        assert self.resolver.decode(_token({"sub": "u1", "aud": "authenticated"})) == "u1"

    def test_resolve_bearer_header(self):
        header = f"Bearer {_token({'sub': 'u2', 'aud': 'authenticated'})}"
        assert self.resolver.resolve(header) == "u2"

    def test_resolve_lowercase_scheme(self):
        header = f"bearer {_token({'sub': 'u3', 'aud': 'authenticated'})}"
        assert self.resolver.resolve(header) == "u3"

    @pytest.mark.parametrize("header", [None, "", "Bearer ", "Bearer garbage"])
    def test_unresolvable_is_anonymous(self, header):
        assert self.resolver.resolve(header) is None

    def test_wrong_secret(self):
        token = _token({"sub": "u1", "aud": "authenticated"}, secret="another-secret-that-is-long-enough-0000")
        with pytest.raises(AuthError):
            self.resolver.decode(token)
        assert self.resolver.resolve(f"Bearer {token}") is None

    def test_expired(self):
        token = _token({"sub": "u1", "aud": "authenticated", "exp": int(time.time()) - 60})
        with pytest.raises(AuthError) as exc:
            self.resolver.decode(token)
        assert exc.value.message == "Token expired"

    def test_wrong_audience(self):
        with pytest.raises(AuthError):
            self.resolver.decode(_token({"sub": "u1", "aud": "service_role"}))

    def test_audience_check_disabled(self):
        resolver = TokenResolver(SECRET, audience=None)
        assert resolver.decode(_token({"sub": "u1"})) == "u1"

    def test_missing_subject(self):
        with pytest.raises(AuthError):
            self.resolver.decode(_token({"aud": "authenticated"}))

    def test_not_configured(self):
        resolver = TokenResolver("")
        with pytest.raises(AuthError) as exc:
            resolver.decode("anything")
        assert exc.value.code == ErrorCode.AUTH_NOT_CONFIGURED
        assert resolver.resolve("Bearer anything") is None
