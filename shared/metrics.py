"""
Shared metrics configuration for the Helpdesk Access Gateway.
"""

import threading
from typing import Any, Dict, Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, Info


class MetricsCollector:
    """Centralized metrics collector for services."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            registry=self.registry
        )

        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type", "service"],
            registry=self.registry
        )

        if self.service_name == "gateway":
            self._setup_gateway_metrics()

    def _setup_gateway_metrics(self):
        """Set up gateway-specific metrics."""
        self._metrics["auth_failures_total"] = Counter(
            "auth_failures_total",
            "Total rejected bearer credentials",
            ["reason"],
            registry=self.registry
        )

        self._metrics["upstream_requests_total"] = Counter(
            "upstream_requests_total",
            "Total upstream requests",
            ["service", "outcome"],
            registry=self.registry
        )

        self._metrics["upstream_request_duration_seconds"] = Histogram(
            "upstream_request_duration_seconds",
            "Upstream request duration in seconds",
            ["service"],
            registry=self.registry
        )

        self._metrics["events_published_total"] = Counter(
            "events_published_total",
            "Total publish attempts",
            ["topic", "outcome"],
            registry=self.registry
        )

        self._metrics["events_dropped_total"] = Counter(
            "events_dropped_total",
            "Events discarded because the publish queue was full",
            ["topic"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_health_check(self, status: str):
        """Record health check metrics."""
        self._metrics["health_check_total"].labels(status=status).inc()

    def record_error(self, error_type: str, service: Optional[str] = None):
        """Record error metrics."""
        service_name = service or self.service_name
        self._metrics["errors_total"].labels(error_type=error_type, service=service_name).inc()

    def increment_counter(self, metric_name: str, **labels):
        """Increment a counter metric."""
        if metric_name in self._metrics:
            self._metrics[metric_name].labels(**labels).inc()


_collectors: Dict[str, MetricsCollector] = {}
_collectors_lock = threading.Lock()


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get the metrics collector for a service.

    Collectors bound to the default registry are created once per process,
    since prometheus refuses to register the same metric name twice.
    """
    if registry is not None:
        return MetricsCollector(service_name, registry)

    with _collectors_lock:
        collector = _collectors.get(service_name)
        if collector is None:
            collector = MetricsCollector(service_name)
            _collectors[service_name] = collector
        return collector
