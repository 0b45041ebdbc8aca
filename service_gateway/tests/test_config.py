"""
Tests for gateway configuration.
"""

import pytest
from pydantic import ValidationError

from shared.config import GatewayConfig


def test_default_secret_allowed_locally():
    config = GatewayConfig(_env_file=None)

    assert config.env == "local"
    assert config.service_urls()["tickets"] == "http://localhost:5000"


def test_default_secret_rejected_outside_local():
    with pytest.raises(ValidationError, match="jwt_secret must be set"):
        GatewayConfig(_env_file=None, env="production")


def test_explicit_secret_accepted_outside_local():
    config = GatewayConfig(_env_file=None, env="production", jwt_secret="s3cr3t")

    assert config.jwt_secret == "s3cr3t"
