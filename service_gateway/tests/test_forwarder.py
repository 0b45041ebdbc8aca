"""
Unit tests for the generic Forwarder.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from service_gateway.app.adapters.upstream_client import UpstreamFailure, UpstreamService, UpstreamSuccess
from service_gateway.app.domain.forwarder import Forwarder, parse_body
from service_gateway.app.routing.route_table import ROUTES, RouteDescriptor
from shared.errors import InvalidBodyError, UpstreamError


class TestForwarder:
    """Test cases for Forwarder."""

    @pytest.fixture
    def upstream_client(self):
        client = MagicMock()
        client.call = AsyncMock(return_value=UpstreamSuccess(status_code=200, body={"id": 42}))
        return client

    @pytest.fixture
    def publisher(self):
        return MagicMock()

    @pytest.fixture
    def forwarder(self, upstream_client, publisher):
        return Forwarder(upstream_client, publisher)

    @pytest.mark.asyncio
    async def test_success_returns_body_and_queues_event(self, forwarder, upstream_client, publisher):
        route = ROUTES.get("GET", "/users/{id}")

        result = await forwarder.forward(route, {"id": "42"})

        assert result == {"id": 42}
        upstream_client.call.assert_awaited_once_with(
            UpstreamService.CLIENTS, "/users/42", method="GET", body=None
        )
        topic, payload = publisher.publish.call_args.args
        assert topic == "user-details"
        assert payload["userId"] == "42"

    @pytest.mark.asyncio
    async def test_body_is_forwarded_unmodified(self, forwarder, upstream_client):
        route = ROUTES.get("POST", "/users")
        raw_body = b'{"name":  "Ada",\n "email": "ada@example.com"}'

        await forwarder.forward(route, {}, raw_body)

        assert upstream_client.call.call_args.kwargs["body"] == raw_body

    @pytest.mark.asyncio
    async def test_failure_raises_upstream_error(self, forwarder, upstream_client, publisher):
        upstream_client.call.return_value = UpstreamFailure("invalid payload", {"message": "invalid payload"})
        route = ROUTES.get("PUT", "/products/{id}")

        with pytest.raises(UpstreamError) as exc_info:
            await forwarder.forward(route, {"id": "7"}, b'{"price": -1}')

        assert exc_info.value.message == "invalid payload"
        assert exc_info.value.to_response().to_content() == {
            "error": "invalid payload",
            "originalError": {"message": "invalid payload"},
        }
        publisher.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_json_body_is_rejected_before_upstream(self, forwarder, upstream_client):
        with pytest.raises(InvalidBodyError):
            await forwarder.forward(ROUTES.get("POST", "/tickets"), {}, b"{not json")

        upstream_client.call.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_broken_payload_builder_does_not_fail_request(self, forwarder, publisher):
        def explode(context, response_body):
            raise KeyError("missing")

        route = RouteDescriptor("GET", "/users", UpstreamService.CLIENTS, "/users", "user-list", explode)

        result = await forwarder.forward(route, {})

        assert result == {"id": 42}
        publisher.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_route_without_topic_publishes_nothing(self, forwarder, publisher):
        route = RouteDescriptor("GET", "/users", UpstreamService.CLIENTS, "/users")

        await forwarder.forward(route, {})

        publisher.publish.assert_not_called()


def test_parse_body_empty_is_none():
    assert parse_body(b"") is None
    assert parse_body(b"  \n") is None


def test_parse_body_json():
    assert parse_body(b'{"a": 1}') == {"a": 1}
