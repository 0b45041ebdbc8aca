"""
Adapters package for the Gateway Service.

Contains the HTTP client for the backend services (Clients, Tickets,
Products). The adapter encapsulates:

- Base URLs and request shapes
- Error-body parsing into a typed result

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .upstream_client import (
    UpstreamClient,
    UpstreamFailure,
    UpstreamResult,
    UpstreamService,
    UpstreamSuccess,
)

__all__ = [
    "UpstreamClient",
    "UpstreamFailure",
    "UpstreamResult",
    "UpstreamService",
    "UpstreamSuccess",
]
