"""
Signed bearer token issue and verification for the gateway.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from shared.errors import TokenError, TokenReason


@dataclass(frozen=True)
class TokenClaims:
    """Claims carried by a verified gateway token."""

    subject: str
    issued_at: int
    expires_at: int
    email: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "TokenClaims":
        return cls(
            subject=str(payload["sub"]),
            issued_at=int(payload["iat"]),
            expires_at=int(payload["exp"]),
            email=payload.get("email"),
        )


class TokenService:
    """Issues and verifies HMAC-signed tokens with a process-wide secret."""

    def __init__(self, secret: str, algorithm: str = "HS256", ttl_seconds: int = 3600):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl_seconds = ttl_seconds

    def issue(self, subject: str, email: Optional[str] = None, now: Optional[int] = None) -> str:
        """Sign a token for ``subject`` that expires ``ttl_seconds`` after issuance."""
        issued_at = int(time.time()) if now is None else now
        payload: Dict[str, Any] = {
            "sub": subject,
            "iat": issued_at,
            "exp": issued_at + self.ttl_seconds,
        }
        if email is not None:
            payload["email"] = email
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str, now: Optional[int] = None) -> TokenClaims:
        """Check signature and expiry, returning the decoded claims.

        Raises ``TokenError(INVALID)`` for any bad signature, malformed JWT,
        missing claim or expired token.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "require_sub": True, "require_iat": True, "require_exp": True},
            )
            claims = TokenClaims.from_payload(payload)
        except (JWTError, KeyError, TypeError, ValueError) as exc:
            raise TokenError(TokenReason.INVALID, details={"error": str(exc)}) from exc

        current = int(time.time()) if now is None else now
        if current >= claims.expires_at:
            raise TokenError(TokenReason.INVALID, details={"error": "Token expired"})
        return claims
