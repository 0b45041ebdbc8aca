"""
Test helper functions and factory methods for the Helpdesk Access Gateway.
"""

import time
from typing import Any, Dict, Optional

from jose import jwt

from shared.config import GatewayConfig

TEST_SECRET = "test-secret"


def create_test_config(**overrides) -> GatewayConfig:
    """Gateway config pointing at fake backends, isolated from the environment."""
    values: Dict[str, Any] = {
        "env": "test",
        "jwt_secret": TEST_SECRET,
        "clients_service_url": "http://clients.test",
        "tickets_service_url": "http://tickets.test",
        "products_service_url": "http://products.test",
        "kafka_bootstrap": "kafka.test:9092",
    }
    values.update(overrides)
    return GatewayConfig(_env_file=None, **values)


def create_mock_jwt_token(
    subject: str = "a@b.com",
    secret: str = TEST_SECRET,
    expires_in: int = 3600,
    issued_at: Optional[int] = None,
    algorithm: str = "HS256",
) -> str:
    """Sign a token the way the gateway's login route does."""
    now = int(time.time()) if issued_at is None else issued_at
    payload = {
        "sub": subject,
        "email": subject,
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def auth_headers(token: Optional[str] = None) -> Dict[str, str]:
    """Authorization header carrying a valid test token."""
    return {"Authorization": f"Bearer {token or create_mock_jwt_token()}"}
