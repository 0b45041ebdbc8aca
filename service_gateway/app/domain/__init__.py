"""
Domain utilities for the Gateway Service.

Includes the auth gate and the generic forwarder that drives every
route table entry.
"""

from .auth_middleware import AuthMiddleware
from .forwarder import Forwarder, parse_body

__all__ = [
    "AuthMiddleware",
    "Forwarder",
    "parse_body",
]
