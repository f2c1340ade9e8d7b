"""Unit tests for notification service implementations"""

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from src.adapter.services.notification_service import (
    CompositeNotificationService,
    LoggingNotificationService,
    WebhookNotificationService,
    create_notification_service,
)

SUMMARY = {
    "execution_id": "exec-1",
    "config_id": "cfg-1",
    "config_name": "Monthly residential",
    "status": "PARTIAL",
    "total_sensors": 10,
    "success": 7,
    "failed": 3,
    "errors": [],
}

RealAsyncClient = httpx.AsyncClient


def client_with(handler):
    def factory(**kwargs):
        return RealAsyncClient(transport=httpx.MockTransport(handler), **kwargs)
    return factory


@pytest.mark.asyncio
class TestWebhookNotificationService:

    async def test_posts_summary(self):
        """
        Given: A reachable webhook
        When: a billing summary is sent
        Then: recipients and summary are posted as JSON
        """
        # Arrange
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200)

        service = WebhookNotificationService("https://hooks.example.com/billing")

        # Act
        with patch("httpx.AsyncClient", side_effect=client_with(handler)):
            sent = await service.send_billing_summary(["billing@example.com"], SUMMARY)

        # Assert
        assert sent is True
        assert len(requests) == 1
        body = httpx.Response(200, content=requests[0].content).json()
        assert body["type"] == "billing_execution"
        assert body["recipients"] == ["billing@example.com"]
        assert body["summary"]["status"] == "PARTIAL"

    async def test_http_error_returns_false(self):
        service = WebhookNotificationService("https://hooks.example.com/billing")

        with patch("httpx.AsyncClient", side_effect=client_with(lambda request: httpx.Response(500))):
            sent = await service.send_billing_summary([], SUMMARY)

        assert sent is False


@pytest.mark.asyncio
class TestCompositeNotificationService:

    async def test_succeeds_if_any_service_succeeds(self):
        failing = MagicMock()
        failing.send_billing_summary = AsyncMock(side_effect=RuntimeError("down"))
        working = MagicMock()
        working.send_billing_summary = AsyncMock(return_value=True)

        service = CompositeNotificationService([failing, working])

        assert await service.send_billing_summary([], SUMMARY) is True
        working.send_billing_summary.assert_called_once_with([], SUMMARY)

    async def test_fails_if_all_fail(self):
        failing = MagicMock()
        failing.send_billing_summary = AsyncMock(return_value=False)

        assert await CompositeNotificationService([failing]).send_billing_summary([], SUMMARY) is False


class TestCreateNotificationService:

    def test_logging_only_without_webhook(self):
        assert isinstance(create_notification_service(None), LoggingNotificationService)

    def test_composite_with_webhook(self):
        service = create_notification_service("https://hooks.example.com/billing")

        assert isinstance(service, CompositeNotificationService)
        assert isinstance(service.services[1], WebhookNotificationService)
