"""Water Consumption Repository Interface

Defines the contract for reading meter readings and marking them invoiced.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from src.domain.water_consumption import WaterConsumption


class WaterConsumptionRepository(ABC):

    @abstractmethod
    async def get_first_uninvoiced(self, serial: str) -> Optional[WaterConsumption]:
        """
        Retrieve the earliest reading of a meter that has not been invoiced

        Args:
            serial: Meter number

        Returns:
            Earliest un-invoiced reading, None if every reading is invoiced
        """
        pass

    @abstractmethod
    async def get_uninvoiced_in_period(
        self, serial: str, period_start: datetime, period_end: datetime
    ) -> List[WaterConsumption]:
        """
        Retrieve un-invoiced readings within an inclusive UTC window

        Args:
            serial: Meter number
            period_start: Window start (UTC, inclusive)
            period_end: Window end (UTC, inclusive)

        Returns:
            Readings ordered by reading_date ascending
        """
        pass

    @abstractmethod
    async def get_last_before(self, serial: str, before: datetime) -> Optional[WaterConsumption]:
        """Retrieve the latest reading strictly before a UTC instant"""
        pass

    @abstractmethod
    async def mark_invoiced(self, consumption_ids: List[int], invoice_id: int) -> int:
        """
        Flag readings as invoiced and link them to an invoice

        Only readings still un-invoiced are touched.

        Args:
            consumption_ids: Reading IDs
            invoice_id: Invoice covering the readings

        Returns:
            Number of readings updated
        """
        pass
