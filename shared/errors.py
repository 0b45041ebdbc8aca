"""
Shared error handling for the Helpdesk Access Gateway.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel


class ErrorEnvelope(BaseModel):
    """The only error shape returned to gateway clients."""

    error: str
    originalError: Optional[Any] = None

    def to_content(self) -> Dict[str, Any]:
        """Render the envelope, leaving out an absent original error."""
        return self.model_dump(exclude_none=True)


class GatewayException(Exception):
    """Base exception for gateway errors surfaced to clients."""

    status_code = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorEnvelope:
        """Convert to the client error envelope."""
        return ErrorEnvelope(error=self.message)


class TokenReason(str, Enum):
    """Why a bearer credential was rejected."""

    MISSING = "missing"
    MALFORMED = "malformed"
    INVALID = "invalid"


_TOKEN_MESSAGES = {
    TokenReason.MISSING: "No token provided",
    TokenReason.MALFORMED: "Token malformatted",
    TokenReason.INVALID: "Token invalid",
}


class TokenError(GatewayException):
    """Authentication failure raised by the auth gate."""

    status_code = 401

    def __init__(self, reason: TokenReason, details: Optional[Dict[str, Any]] = None):
        self.reason = reason
        super().__init__("AUTHENTICATION_ERROR", _TOKEN_MESSAGES[reason], details)


class UpstreamError(GatewayException):
    """A backend call failed at the transport level or with a non-2xx status."""

    status_code = 500

    def __init__(self, service: str, message: str, cause: Any = None):
        self.service = service
        self.cause = cause
        super().__init__("UPSTREAM_ERROR", message, {"service": service})

    def to_response(self) -> ErrorEnvelope:
        return ErrorEnvelope(error=self.message, originalError=self.cause)


class InvalidBodyError(GatewayException):
    """The request body is not parseable JSON."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__("INVALID_BODY", "Request body is not valid JSON", {"error": detail})


class RouteNotFoundError(GatewayException):
    """No route table entry matches the request."""

    status_code = 404

    def __init__(self, method: str, path: str):
        super().__init__("ROUTE_NOT_FOUND", "Route not found", {"method": method, "path": path})
