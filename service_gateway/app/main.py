"""
API Gateway service for the Helpdesk Access Gateway.
"""

from typing import Any, Dict, Optional

import httpx
from fastapi import Request
from fastapi.responses import JSONResponse

from shared.base_service import BaseService
from shared.config import GatewayConfig, get_config
from shared.errors import RouteNotFoundError

from .adapters.upstream_client import UpstreamClient
from .auth.tokens import TokenClaims, TokenService
from .domain.auth_middleware import AuthMiddleware
from .domain.forwarder import Forwarder, parse_body
from .events.publisher import EventPublisher, utc_timestamp
from .routing.route_table import LOGIN_PATH, LOGIN_TOPIC, ROUTES, RouteDescriptor, RouteTable


class GatewayService(BaseService):
    """API Gateway service implementation."""

    def __init__(
        self,
        config: Optional[GatewayConfig] = None,
        routes: RouteTable = ROUTES,
        upstream_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(config or get_config())
        self.routes = routes

        self.token_service = TokenService(
            self.config.jwt_secret,
            algorithm=self.config.jwt_algorithm,
            ttl_seconds=self.config.token_ttl_seconds,
        )
        self.auth_middleware = AuthMiddleware(self.token_service, metrics=self.metrics)
        self.upstream_client = UpstreamClient(
            self.config.service_urls(),
            timeout=self.config.upstream_timeout_seconds,
            metrics=self.metrics,
            transport=upstream_transport,
        )
        self.event_publisher = EventPublisher(
            self.config.kafka_bootstrap,
            enabled=self.config.events_enabled,
            max_queue_size=self.config.event_queue_maxsize,
            send_timeout=self.config.event_send_timeout_seconds,
            shutdown_grace=self.config.event_shutdown_grace_seconds,
            metrics=self.metrics,
        )
        self.forwarder = Forwarder(self.upstream_client, self.event_publisher)

        @self.app.on_event("startup")
        async def _startup():
            await self.event_publisher.start()

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.event_publisher.stop()
            await self.upstream_client.close()

        self._setup_gateway_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.gateway_service = self

    async def _authenticate(self, request: Request) -> Optional[TokenClaims]:
        """Run the auth gate unless authentication is switched off."""
        if not self.config.auth_enabled:
            return None
        return await self.auth_middleware.authenticate_request(request)

    def _setup_gateway_routes(self):
        """Set up gateway-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "gateway",
                "message": "Helpdesk Access Gateway",
                "version": "1.0.0",
                "routes": len(self.routes) + 1,
                "auth_enabled": self.config.auth_enabled,
                "events_enabled": self.config.events_enabled,
            }

        @self.app.post(LOGIN_PATH)
        async def login(request: Request):
            """Exchange credentials for a signed token.

            Any (email, password) pair is accepted; no user store is consulted.
            """
            body = parse_body(await request.body())
            email = body.get("email") if isinstance(body, dict) else None
            if not isinstance(email, str) or not email:
                email = None

            token = self.token_service.issue(email or "anonymous", email=email)
            self.logger.info("Token issued", subject=email or "anonymous")
            self.event_publisher.publish(LOGIN_TOPIC, {"email": email, "timestamp": utc_timestamp()})
            return {"token": token}

        for route in self.routes:
            self._register_route(route)

    def _register_route(self, route: RouteDescriptor):
        """Bind one route table entry to the generic forwarder."""

        segment_count = route.path.count("/")

        async def forward(request: Request):
            # Matching runs on the decoded path, so an encoded "/" can reshape it
            raw_path = request.scope.get("raw_path") or request.url.path.encode()
            if raw_path.split(b"?", 1)[0].count(b"/") != segment_count:
                raise RouteNotFoundError(request.method, request.url.path)

            claims = await self._authenticate(request)
            raw_body = await request.body()
            data = await self.forwarder.forward(route, request.path_params, raw_body, claims)
            return JSONResponse(status_code=200, content=data)

        self.app.add_api_route(
            route.path,
            forward,
            methods=[route.method],
            name=f"{route.method.lower()} {route.path}",
            summary=f"Forward to {route.upstream.value}:{route.upstream_path}",
        )

    async def _check_dependencies(self) -> Dict[str, Any]:
        """Check gateway dependencies."""
        return {"event_broker": self.event_publisher.status()}


def create_app(config: Optional[GatewayConfig] = None):
    """Create FastAPI application."""
    service = GatewayService(config)
    return service.app


if __name__ == "__main__":
    service = GatewayService()
    service.run()
