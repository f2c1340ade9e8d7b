"""Tariff Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.tariff import Tariff


class TariffRepository(ABC):

    @abstractmethod
    async def get_active_for_category(self, tariff_category_id: int) -> Optional[Tariff]:
        """
        Retrieve the active tariff of a category

        Args:
            tariff_category_id: Tariff category ID

        Returns:
            Active Tariff (lowest id if several), None if the category has none
        """
        pass
