"""Sensor Repository Interface"""

from abc import ABC, abstractmethod
from typing import List
from src.domain.sensor import Sensor


class SensorRepository(ABC):

    @abstractmethod
    async def get_billable(self, statuses: List[str], tariff_categories: List[int]) -> List[Sensor]:
        """
        Retrieve sensors eligible for a billing configuration

        Args:
            statuses: Sensor statuses to include
            tariff_categories: Tariff category ids to include (empty = all)

        Returns:
            Matching sensors ordered by id
        """
        pass
