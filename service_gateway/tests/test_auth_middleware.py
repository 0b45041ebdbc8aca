"""
Unit tests for AuthMiddleware.
"""

from unittest.mock import MagicMock

import pytest
from fastapi import Request

from service_gateway.app.auth.tokens import TokenService
from service_gateway.app.domain.auth_middleware import AuthMiddleware
from shared.errors import TokenError, TokenReason
from shared.test_helpers import TEST_SECRET, create_mock_jwt_token


class TestAuthMiddleware:
    """Test cases for AuthMiddleware."""

    @pytest.fixture
    def auth_middleware(self):
        """Create AuthMiddleware instance."""
        return AuthMiddleware(TokenService(TEST_SECRET))

    @pytest.fixture
    def mock_request(self):
        """Create mock request."""
        request = MagicMock(spec=Request)
        request.headers = {}
        request.state = MagicMock()
        return request

    def test_missing_header(self, auth_middleware):
        with pytest.raises(TokenError) as exc_info:
            auth_middleware.authorize({})

        assert exc_info.value.reason == TokenReason.MISSING
        assert exc_info.value.message == "No token provided"
        assert exc_info.value.status_code == 401

    @pytest.mark.parametrize("header", ["Basic xyz", "Bearer", "Bearer a b", "Token abc"])
    def test_malformed_header(self, auth_middleware, header):
        with pytest.raises(TokenError) as exc_info:
            auth_middleware.authorize({"Authorization": header})

        assert exc_info.value.reason == TokenReason.MALFORMED
        assert exc_info.value.message == "Token malformatted"

    def test_invalid_token(self, auth_middleware):
        token = create_mock_jwt_token(secret="wrong-secret")

        with pytest.raises(TokenError) as exc_info:
            auth_middleware.authorize({"Authorization": f"Bearer {token}"})

        assert exc_info.value.reason == TokenReason.INVALID
        assert exc_info.value.message == "Token invalid"

    def test_expired_token(self, auth_middleware):
        token = create_mock_jwt_token(issued_at=1_600_000_000)

        with pytest.raises(TokenError) as exc_info:
            auth_middleware.authorize({"Authorization": f"Bearer {token}"})

        assert exc_info.value.reason == TokenReason.INVALID

    def test_scheme_is_case_insensitive(self, auth_middleware):
        token = create_mock_jwt_token(subject="user@example.com")

        claims = auth_middleware.authorize({"Authorization": f"bEaReR {token}"})

        assert claims.subject == "user@example.com"

    def test_lowercase_header_name(self, auth_middleware):
        token = create_mock_jwt_token()

        claims = auth_middleware.authorize({"authorization": f"Bearer {token}"})

        assert claims.subject == "a@b.com"

    @pytest.mark.asyncio
    async def test_authenticate_request_stores_claims(self, auth_middleware, mock_request):
        mock_request.headers = {"Authorization": f"Bearer {create_mock_jwt_token()}"}

        claims = await auth_middleware.authenticate_request(mock_request)

        assert claims.subject == "a@b.com"
        assert mock_request.state.claims == claims

    def test_failures_are_counted(self):
        metrics = MagicMock()
        middleware = AuthMiddleware(TokenService(TEST_SECRET), metrics=metrics)

        with pytest.raises(TokenError):
            middleware.authorize({})

        metrics.increment_counter.assert_called_once_with("auth_failures_total", reason="missing")
