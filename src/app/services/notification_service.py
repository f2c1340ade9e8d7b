"""Notification Service Interface

Defines the contract for sending billing run notifications.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class NotificationService(ABC):
    """
    Abstract notification service for billing run summaries

    Implementations can send notifications via:
    - Webhook (HTTP POST) to an email relay
    - Log output
    - etc.
    """

    @abstractmethod
    async def send_billing_summary(self, emails: List[str], summary: Dict[str, Any]) -> bool:
        """
        Send the summary of a billing execution

        Args:
            emails: Recipient addresses
            summary: Execution summary (config, status, counters, errors)

        Returns:
            True if notification sent successfully, False otherwise
        """
        pass
