"""
Shared configuration management for the Helpdesk Access Gateway.
"""

from typing import Optional

from pydantic import Field, PositiveFloat, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-me"


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="GATEWAY_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")


class GatewayConfig(BaseConfig):
    """Process-wide gateway configuration, read-only after startup."""

    service_name: str = "gateway"
    host: str = "0.0.0.0"
    port: int = 8000

    # Token signing
    jwt_secret: str = Field(default=DEFAULT_JWT_SECRET)
    jwt_algorithm: str = Field(default="HS256")
    token_ttl_seconds: int = Field(default=3600, gt=0)

    # Backend services
    clients_service_url: str = Field(default="http://localhost:3000")
    tickets_service_url: str = Field(default="http://localhost:5000")
    products_service_url: str = Field(default="http://localhost:3004")

    # None keeps upstream calls unbounded
    upstream_timeout_seconds: Optional[PositiveFloat] = Field(default=None)

    # Feature switches
    auth_enabled: bool = Field(default=True)
    events_enabled: bool = Field(default=True)

    # Event publishing
    kafka_bootstrap: str = Field(default="localhost:9092")
    event_queue_maxsize: int = Field(default=1000, gt=0)
    event_send_timeout_seconds: float = Field(default=10.0, gt=0)
    event_shutdown_grace_seconds: float = Field(default=5.0, ge=0)

    @model_validator(mode="after")
    def require_real_secret(self) -> "GatewayConfig":
        if self.env != "local" and self.jwt_secret == DEFAULT_JWT_SECRET:
            raise ValueError("jwt_secret must be set outside the local environment")
        return self

    def service_urls(self) -> dict:
        """Map upstream service names to their base URLs."""
        return {
            "clients": self.clients_service_url,
            "tickets": self.tickets_service_url,
            "products": self.products_service_url,
        }


def get_config(**overrides) -> GatewayConfig:
    """Build the gateway configuration from the environment plus overrides."""
    return GatewayConfig(**overrides)
