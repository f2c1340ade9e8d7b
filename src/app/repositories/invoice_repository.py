"""Invoice Repository Interface

Defines the contract for invoice persistence operations.
"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.invoice import Invoice


class InvoiceRepository(ABC):
    """
    Repository interface for Invoice persistence

    Provides access to invoice data for billing operations.
    """

    @abstractmethod
    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        """
        Retrieve invoice by ID

        Args:
            invoice_id: Invoice ID

        Returns:
            Invoice if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_last_for_sensor(self, sensor_id: int) -> Optional[Invoice]:
        """
        Retrieve the invoice with the latest period_end for a sensor

        Args:
            sensor_id: Sensor ID

        Returns:
            Latest Invoice, None if the sensor was never billed
        """
        pass

    @abstractmethod
    async def next_invoice_number(self, prefix: str = "FAC") -> str:
        """
        Reserve the next invoice number

        The counter is incremented atomically in the current transaction;
        the number is released only if that transaction rolls back.

        Format: {prefix}-NNNNNN (e.g., FAC-000001)

        Returns:
            Unique invoice number string
        """
        pass
