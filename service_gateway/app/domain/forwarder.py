"""
Generic forwarding of a matched route to its backend.
"""

import json
from typing import Any, Mapping, Optional

from shared.errors import InvalidBodyError, UpstreamError
from shared.logging import get_logger

from ..adapters.upstream_client import UpstreamClient, UpstreamFailure
from ..auth.tokens import TokenClaims
from ..events.publisher import EventPublisher
from ..routing.route_table import RequestContext, RouteDescriptor


def parse_body(raw_body: bytes) -> Any:
    """Decode a JSON request body; an empty body is ``None``."""
    if not raw_body or not raw_body.strip():
        return None
    try:
        return json.loads(raw_body)
    except ValueError as e:
        raise InvalidBodyError(str(e)) from e


class Forwarder:
    """Runs one route: upstream call, error normalization, event dispatch."""

    def __init__(self, upstream_client: UpstreamClient, publisher: EventPublisher):
        self.upstream_client = upstream_client
        self.publisher = publisher
        self.logger = get_logger("gateway.forwarder")

    async def forward(
        self,
        route: RouteDescriptor,
        path_params: Mapping[str, str],
        raw_body: bytes = b"",
        claims: Optional[TokenClaims] = None,
    ) -> Any:
        """Forward the request and return the upstream JSON body.

        Raises ``UpstreamError`` when the backend call fails. The event for a
        successful call is queued, not awaited.
        """
        body = parse_body(raw_body)
        upstream_path = route.upstream_path_for(path_params)

        result = await self.upstream_client.call(
            route.upstream,
            upstream_path,
            method=route.method,
            body=raw_body if body is not None else None,
        )

        if isinstance(result, UpstreamFailure):
            raise UpstreamError(route.upstream.value, result.message, result.cause)

        context = RequestContext(path_params=dict(path_params), body=body, claims=claims)
        self.emit(route, context, result.body)
        return result.body

    def emit(self, route: RouteDescriptor, context: RequestContext, response_body: Any) -> None:
        """Hand the route's event to the publisher; failures are logged only."""
        if not route.event_topic:
            return
        try:
            payload = route.build_event(context, response_body)
        except Exception as e:
            self.logger.error("Failed to build event payload", topic=route.event_topic, error=str(e))
            return
        self.publisher.publish(route.event_topic, payload)
