"""
Authentication gate for Gateway.
"""

from typing import Mapping, Optional

from fastapi import Request

from shared.errors import TokenError, TokenReason
from shared.logging import get_logger, set_user_context
from shared.metrics import MetricsCollector

from ..auth.tokens import TokenClaims, TokenService


class AuthMiddleware:
    """Bearer token gate in front of every non-public route."""

    def __init__(self, token_service: TokenService, metrics: Optional[MetricsCollector] = None):
        self.token_service = token_service
        self.metrics = metrics
        self.logger = get_logger("gateway.auth_middleware")

    def extract_token(self, headers: Mapping[str, str]) -> str:
        """Pull the bearer token out of the Authorization header."""
        auth_header = headers.get("Authorization") or headers.get("authorization")
        if not auth_header:
            raise TokenError(TokenReason.MISSING)

        parts = auth_header.split(" ")
        if len(parts) != 2:
            raise TokenError(TokenReason.MALFORMED)

        scheme, token = parts
        if scheme.lower() != "bearer":
            raise TokenError(TokenReason.MALFORMED)

        return token

    def authorize(self, headers: Mapping[str, str]) -> TokenClaims:
        """Validate the request credential, raising ``TokenError`` on failure."""
        try:
            token = self.extract_token(headers)
            claims = self.token_service.verify(token)
        except TokenError as e:
            self.logger.warning("Request rejected by auth gate", reason=e.reason.value, **e.details)
            if self.metrics:
                self.metrics.increment_counter("auth_failures_total", reason=e.reason.value)
            raise

        set_user_context(claims.subject)
        return claims

    async def authenticate_request(self, request: Request) -> TokenClaims:
        """FastAPI dependency form of :meth:`authorize`."""
        claims = self.authorize(request.headers)
        request.state.claims = claims
        return claims
