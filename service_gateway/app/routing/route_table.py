"""
Declarative route table for the gateway.

Each entry maps an inbound (method, path template) onto a backend path
template and, optionally, the event topic announced after a successful
call. Templates use ``{name}`` placeholders; the same names are
substituted into the upstream template verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from string import Formatter
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from ..adapters.upstream_client import UpstreamService
from ..auth.tokens import TokenClaims
from ..events.publisher import utc_timestamp


@dataclass(frozen=True)
class RequestContext:
    """What a payload builder may read about the request being forwarded."""

    path_params: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    claims: Optional[TokenClaims] = None


PayloadBuilder = Callable[[RequestContext, Any], Dict[str, Any]]


@dataclass(frozen=True)
class RouteDescriptor:
    method: str
    path: str
    upstream: UpstreamService
    upstream_path: str
    event_topic: Optional[str] = None
    payload_builder: Optional[PayloadBuilder] = None

    @property
    def key(self) -> Tuple[str, str]:
        return (self.method.upper(), self.path)

    @property
    def param_names(self) -> List[str]:
        return [name for _, name, _, _ in Formatter().parse(self.path) if name]

    def upstream_path_for(self, path_params: Mapping[str, str]) -> str:
        """Fill the upstream template with the matched path parameters."""
        return self.upstream_path.format_map(dict(path_params))

    def build_event(self, context: RequestContext, response_body: Any) -> Optional[Dict[str, Any]]:
        """Event payload for a successful call, or None when the route emits nothing."""
        if not self.event_topic:
            return None
        payload = self.payload_builder(context, response_body) if self.payload_builder else {}
        payload.setdefault("timestamp", utc_timestamp())
        if context.claims is not None:
            payload.setdefault("actor", context.claims.subject)
        return payload


class RouteTable:
    """Immutable, ordered collection of routes with unique (method, path) pairs."""

    def __init__(self, routes: Iterable[RouteDescriptor]):
        self._routes: Tuple[RouteDescriptor, ...] = tuple(routes)
        seen = set()
        for route in self._routes:
            if route.key in seen:
                raise ValueError(f"Duplicate route {route.key[0]} {route.key[1]}")
            seen.add(route.key)
            upstream_names = {name for _, name, _, _ in Formatter().parse(route.upstream_path) if name}
            missing = upstream_names - set(route.param_names)
            if missing:
                raise ValueError(
                    f"Upstream template for {route.key[0]} {route.key[1]} uses unknown params {sorted(missing)}"
                )

    def __iter__(self):
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def get(self, method: str, path: str) -> Optional[RouteDescriptor]:
        """Look up a route by its method and path template."""
        key = (method.upper(), path)
        for route in self._routes:
            if route.key == key:
                return route
        return None


def _params(**names: str) -> PayloadBuilder:
    """Builder copying path params into the payload under new keys."""
    def build(context: RequestContext, response_body: Any) -> Dict[str, Any]:
        return {key: context.path_params[param] for key, param in names.items()}
    return build


def _body_as(key: str, **names: str) -> PayloadBuilder:
    """Builder embedding the forwarded request body, plus any path params."""
    def build(context: RequestContext, response_body: Any) -> Dict[str, Any]:
        payload = {k: context.path_params[param] for k, param in names.items()}
        payload[key] = context.body
        return payload
    return build


def _timestamp_only(context: RequestContext, response_body: Any) -> Dict[str, Any]:
    return {"timestamp": utc_timestamp()}


CLIENTS = UpstreamService.CLIENTS
TICKETS = UpstreamService.TICKETS
PRODUCTS = UpstreamService.PRODUCTS

# Registration follows this order, so /products/{productId}/tickets wins
# over /products/category/{category} for /products/category/tickets.
ROUTES = RouteTable([
    RouteDescriptor("GET", "/users", CLIENTS, "/users", "user-list", _timestamp_only),
    RouteDescriptor("GET", "/users/{id}", CLIENTS, "/users/{id}", "user-details", _params(userId="id")),
    RouteDescriptor("POST", "/users", CLIENTS, "/users", "user-creation", _body_as("user")),
    RouteDescriptor("PUT", "/users/{id}", CLIENTS, "/users/{id}", "user-update", _body_as("changes", userId="id")),
    RouteDescriptor("DELETE", "/users/{id}", CLIENTS, "/users/{id}", "user-deletion", _params(userId="id")),
    RouteDescriptor("POST", "/tickets", TICKETS, "/tickets", "user-tickets", _body_as("ticket")),
    RouteDescriptor("GET", "/tickets/{id}", TICKETS, "/tickets/{id}", "user-tickets", _params(ticketId="id")),
    RouteDescriptor(
        "GET", "/users/{userId}/tickets", TICKETS, "/users/{userId}/tickets", "user-tickets",
        _params(userId="userId"),
    ),
    RouteDescriptor(
        "GET", "/products/{productId}/tickets", TICKETS, "/products/{productId}/tickets", "product-tickets",
        _params(productId="productId"),
    ),
    RouteDescriptor(
        "GET", "/products/{productId}", PRODUCTS, "/products/{productId}", "product-details",
        _params(productId="productId"),
    ),
    RouteDescriptor("GET", "/products", PRODUCTS, "/products", "product-list", _timestamp_only),
    RouteDescriptor(
        "GET", "/products/category/{category}", PRODUCTS, "/products/category/{category}", "product-category",
        _params(category="category"),
    ),
    RouteDescriptor("POST", "/products", PRODUCTS, "/products", "product-creation", _body_as("product")),
    RouteDescriptor(
        "PUT", "/products/{id}", PRODUCTS, "/products/{id}", "product-update", _body_as("changes", productId="id"),
    ),
])

LOGIN_PATH = "/login"
LOGIN_TOPIC = "login-attempt"
