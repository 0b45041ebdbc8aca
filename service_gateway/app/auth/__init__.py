"""
Token handling for the Gateway Service.
"""

from .tokens import TokenClaims, TokenService

__all__ = ["TokenClaims", "TokenService"]
