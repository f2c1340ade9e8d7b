"""Notification Service Implementations

Provides concrete implementations for billing run notifications.
"""

import logging
from typing import Any, Dict, List, Optional
import httpx
from src.app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class LoggingNotificationService(NotificationService):
    """
    Notification service that logs billing summaries

    Useful for development and testing, or as a fallback.
    """

    async def send_billing_summary(self, emails: List[str], summary: Dict[str, Any]) -> bool:
        logger.info(
            f"[BILLING] Config: {summary.get('config_name')}, "
            f"Status: {summary.get('status')}, "
            f"Success: {summary.get('success')}/{summary.get('total_sensors')}, "
            f"Failed: {summary.get('failed')}, "
            f"Recipients: {', '.join(emails) if emails else '-'}"
        )
        return True


class WebhookNotificationService(NotificationService):
    """
    Notification service that posts billing summaries to an HTTP webhook

    The receiving side (mail relay, chat integration) delivers the message
    to the configured recipients.
    """

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        """
        Initialize webhook notification service

        Args:
            webhook_url: URL to POST summaries to
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def send_billing_summary(self, emails: List[str], summary: Dict[str, Any]) -> bool:
        """
        Send billing summary via webhook

        Args:
            emails: Recipient addresses
            summary: Execution summary

        Returns:
            True if webhook call succeeded, False otherwise
        """
        payload = {
            "type": "billing_execution",
            "recipients": emails,
            "summary": summary,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.webhook_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                logger.info(
                    f"Webhook notification sent for execution "
                    f"{summary.get('execution_id')} to {self.webhook_url}"
                )
                return True
        except httpx.HTTPError as e:
            logger.error(
                f"Failed to send webhook notification for execution "
                f"{summary.get('execution_id')}: {e}"
            )
            return False


class CompositeNotificationService(NotificationService):
    """
    Notification service that delegates to multiple services

    Useful for sending to multiple channels (e.g., log + webhook).
    """

    def __init__(self, services: List[NotificationService]):
        self.services = services

    async def send_billing_summary(self, emails: List[str], summary: Dict[str, Any]) -> bool:
        """
        Send the summary to all configured services

        Returns:
            True if at least one service succeeded, False otherwise
        """
        success = False
        for service in self.services:
            try:
                if await service.send_billing_summary(emails, summary):
                    success = True
            except Exception as e:
                logger.error(f"Notification service {type(service).__name__} failed: {e}")
        return success


def create_notification_service(webhook_url: Optional[str] = None) -> NotificationService:
    """
    Factory function to create appropriate notification service

    Args:
        webhook_url: Optional webhook URL. If provided, creates composite
                     service with logging + webhook. Otherwise, just logging.

    Returns:
        Configured NotificationService
    """
    services: List[NotificationService] = [LoggingNotificationService()]

    if webhook_url:
        services.append(WebhookNotificationService(webhook_url))

    if len(services) == 1:
        return services[0]

    return CompositeNotificationService(services)
