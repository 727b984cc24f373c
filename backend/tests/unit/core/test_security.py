"""
Unit Tests for Security Module
Tests for: password hashing, session tokens, token extraction, client IP
"""
from datetime import datetime, timedelta

from starlette.requests import Request

from educonnect.core.config import settings
from educonnect.core.security import (
    verify_password,
    get_password_hash,
    generate_session_token,
    session_expiry,
    extract_session_token,
    get_client_ip,
)


def make_request(headers: dict = None, client: tuple = ("10.0.0.9", 5000)) -> Request:
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": raw_headers,
        "client": client,
    })


class TestPasswordHashing:
    """Test password hashing functions"""

    def test_hash_password_returns_different_value(self):
        password = "testpassword123"
        hashed = get_password_hash(password)

        assert hashed != password
        assert hashed.startswith("$2")

    def test_hash_password_different_each_time(self):
        """Bcrypt generates different salts"""
        password = "testpassword123"
        assert get_password_hash(password) != get_password_hash(password)

    def test_verify_password_correct(self):
        hashed = get_password_hash("testpassword123")
        assert verify_password("testpassword123", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = get_password_hash("testpassword123")
        assert verify_password("wrongpassword", hashed) is False

    def test_password_over_72_bytes_is_truncated(self):
        long_password = "a" * 80
        hashed = get_password_hash(long_password)
        assert verify_password("a" * 72, hashed) is True


class TestSessionTokens:

    def test_tokens_are_unique(self):
        tokens = {generate_session_token() for _ in range(50)}
        assert len(tokens) == 50

    def test_expiry_uses_configured_days(self):
        now = datetime(2024, 1, 1)
        assert session_expiry(now) == now + timedelta(days=settings.SESSION_EXPIRE_DAYS)


class TestExtractSessionToken:

    def test_cookie_wins_over_bearer(self):
        request = make_request({
            "cookie": f"{settings.SESSION_COOKIE_NAME}=cookie-token",
            "authorization": "Bearer header-token",
        })
        assert extract_session_token(request) == "cookie-token"

    def test_bearer_fallback(self):
        request = make_request({"authorization": "Bearer header-token"})
        assert extract_session_token(request) == "header-token"

    def test_other_scheme_ignored(self):
        request = make_request({"authorization": "Basic abc"})
        assert extract_session_token(request) is None

    def test_missing(self):
        assert extract_session_token(make_request()) is None


class TestClientIp:

    def test_first_forwarded_hop(self):
        request = make_request({"x-forwarded-for": "203.0.113.5, 10.0.0.1"})
        assert get_client_ip(request) == "203.0.113.5"

    def test_real_ip(self):
        request = make_request({"x-real-ip": "198.51.100.7"})
        assert get_client_ip(request) == "198.51.100.7"

    def test_unknown_without_proxy_headers(self):
        assert get_client_ip(make_request()) == "unknown"
