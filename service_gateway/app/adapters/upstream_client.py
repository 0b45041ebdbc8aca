"""
Backend service client for Gateway.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

import httpx

from shared.logging import get_logger
from shared.metrics import MetricsCollector

FALLBACK_ERROR_MESSAGE = "An error occurred"
TRANSPORT_ERROR_MESSAGE = "Upstream service unavailable"
INVALID_JSON_MESSAGE = "Invalid JSON response from upstream"


class UpstreamService(str, Enum):
    """Backends reachable through the gateway."""

    CLIENTS = "clients"
    TICKETS = "tickets"
    PRODUCTS = "products"


@dataclass(frozen=True)
class UpstreamSuccess:
    status_code: int
    body: Any


@dataclass(frozen=True)
class UpstreamFailure:
    message: str
    cause: Any = None


UpstreamResult = Union[UpstreamSuccess, UpstreamFailure]


class UpstreamClient:
    """Issues one HTTP request per call to a named backend.

    There is no retry. With ``timeout=None`` a backend that never answers
    keeps the call suspended indefinitely.
    """

    def __init__(
        self,
        base_urls: Dict[str, str],
        timeout: Optional[float] = None,
        metrics: Optional[MetricsCollector] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_urls = {name: url.rstrip('/') for name, url in base_urls.items()}
        self.metrics = metrics
        self.logger = get_logger("gateway.upstream_client")
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def url_for(self, service: UpstreamService, path: str) -> str:
        return f"{self.base_urls[service.value]}{path}"

    async def call(
        self,
        service: UpstreamService,
        path: str,
        method: str = "GET",
        body: Optional[bytes] = None,
    ) -> UpstreamResult:
        """Send ``method path`` to ``service`` and parse the JSON reply."""
        url = self.url_for(service, path)
        start_time = time.time()
        try:
            response = await self._client.request(
                method,
                url,
                content=body or None,
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            self.logger.error(
                "Upstream request failed",
                service=service.value,
                method=method,
                url=url,
                error=str(e),
            )
            self._record(service, "transport_error", start_time)
            return UpstreamFailure(
                message=TRANSPORT_ERROR_MESSAGE,
                cause={"service": service.value, "type": type(e).__name__, "detail": str(e)},
            )

        if response.is_success:
            try:
                data = response.json()
            except ValueError:
                self.logger.error(
                    "Upstream returned non-JSON body",
                    service=service.value,
                    url=url,
                    status_code=response.status_code,
                )
                self._record(service, "invalid_json", start_time)
                return UpstreamFailure(
                    message=INVALID_JSON_MESSAGE,
                    cause={"status_code": response.status_code, "body": response.text},
                )
            self._record(service, "success", start_time)
            return UpstreamSuccess(status_code=response.status_code, body=data)

        failure = self._failure_from_response(response)
        self.logger.warning(
            "Upstream returned error status",
            service=service.value,
            method=method,
            url=url,
            status_code=response.status_code,
            message=failure.message,
        )
        self._record(service, "error_status", start_time)
        return failure

    def _failure_from_response(self, response: httpx.Response) -> UpstreamFailure:
        """Pull ``message`` out of a JSON error body, if there is one."""
        try:
            error_body = response.json()
        except ValueError:
            return UpstreamFailure(
                message=FALLBACK_ERROR_MESSAGE,
                cause={"status_code": response.status_code, "body": response.text},
            )

        message = None
        if isinstance(error_body, dict):
            message = error_body.get("message")
        if not isinstance(message, str) or not message:
            message = FALLBACK_ERROR_MESSAGE
        return UpstreamFailure(message=message, cause=error_body)

    def _record(self, service: UpstreamService, outcome: str, start_time: float) -> None:
        if not self.metrics:
            return
        self.metrics.increment_counter("upstream_requests_total", service=service.value, outcome=outcome)
        upstream_duration = self.metrics.get_metric("upstream_request_duration_seconds")
        if upstream_duration is not None:
            upstream_duration.labels(service=service.value).observe(time.time() - start_time)
