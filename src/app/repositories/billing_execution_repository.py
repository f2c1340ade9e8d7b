"""Billing Execution Repository Interface

Defines the contract for billing execution audit records.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.billing_execution import BillingExecution


class BillingExecutionRepository(ABC):
    """Repository interface for BillingExecution persistence"""

    @abstractmethod
    async def create(self, execution: BillingExecution) -> BillingExecution:
        """
        Create a new execution record

        Args:
            execution: BillingExecution entity to persist

        Returns:
            Created BillingExecution
        """
        pass

    @abstractmethod
    async def get_by_id(self, execution_id: str) -> Optional[BillingExecution]:
        pass

    @abstractmethod
    async def update(self, execution: BillingExecution) -> BillingExecution:
        pass

    @abstractmethod
    async def update_progress(
        self,
        execution_id: str,
        processed_count: int,
        success_count: int,
        failed_count: int,
    ) -> None:
        """
        Persist running counters of an execution

        Issued after every sensor so an interrupted run leaves accurate counts.

        Args:
            execution_id: Execution ID
            processed_count: Sensors processed so far
            success_count: Sensors invoiced so far
            failed_count: Sensors failed so far
        """
        pass

    @abstractmethod
    async def list_by_config(
        self,
        config_id: str,
        limit: int = 20,
        offset: int = 0,
    ) -> List[BillingExecution]:
        """
        Retrieve executions of a configuration, newest first

        Args:
            config_id: Configuration ID
            limit: Maximum number of executions to return
            offset: Offset for pagination

        Returns:
            List of executions
        """
        pass
