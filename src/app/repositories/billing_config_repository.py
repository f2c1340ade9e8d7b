"""Billing Config Repository Interface

Defines the contract for billing configuration persistence.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.billing_config import BillingConfig


class BillingConfigRepository(ABC):
    """Repository interface for BillingConfig persistence"""

    @abstractmethod
    async def create(self, config: BillingConfig) -> BillingConfig:
        """
        Create a new billing configuration

        Args:
            config: BillingConfig entity to persist

        Returns:
            Created BillingConfig
        """
        pass

    @abstractmethod
    async def get_by_id(self, config_id: str) -> Optional[BillingConfig]:
        """
        Retrieve configuration by ID

        Args:
            config_id: Configuration ID

        Returns:
            BillingConfig if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_all(self) -> List[BillingConfig]:
        """Retrieve every configuration, newest first"""
        pass

    @abstractmethod
    async def list_active(self) -> List[BillingConfig]:
        """Retrieve configurations with is_active=True"""
        pass

    @abstractmethod
    async def update(self, config: BillingConfig) -> BillingConfig:
        """
        Update an existing configuration

        Args:
            config: BillingConfig entity with updated values

        Returns:
            Updated BillingConfig
        """
        pass

    @abstractmethod
    async def delete(self, config: BillingConfig) -> None:
        """Delete a configuration (its executions are kept)"""
        pass
