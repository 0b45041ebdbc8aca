"""
Shared fixtures for Gateway tests.
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from service_gateway.app.main import GatewayService
from shared.test_helpers import create_test_config


@pytest.fixture
def config():
    """Gateway config with fake backend URLs."""
    return create_test_config()


@pytest.fixture
def gateway_service(config):
    """GatewayService with the event publisher replaced by a mock."""
    service = GatewayService(config)
    service.event_publisher.publish = MagicMock()
    return service


@pytest.fixture
def client(gateway_service):
    """Test client; startup hooks are not run so no Kafka worker starts."""
    return TestClient(gateway_service.app)


@pytest.fixture
def published(gateway_service):
    """The mock standing in for EventPublisher.publish."""
    return gateway_service.event_publisher.publish
