"""
Shared utilities for the Helpdesk Access Gateway.

This package aggregates common building blocks consumed by the gateway:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and the client error envelope
- base_service: FastAPI app skeleton (middleware, health, metrics)

Do not import from service_* packages into shared/.
"""
