"""
Route table for the Gateway Service.
"""

from .route_table import (
    LOGIN_PATH,
    LOGIN_TOPIC,
    ROUTES,
    RequestContext,
    RouteDescriptor,
    RouteTable,
)

__all__ = [
    "LOGIN_PATH",
    "LOGIN_TOPIC",
    "ROUTES",
    "RequestContext",
    "RouteDescriptor",
    "RouteTable",
]
