"""ResolveTariff Use Case

Finds the tariff to apply to a sensor's tariff category.
"""

from libs.result import Result, Return, Error
from src.app.repositories.tariff_repository import TariffRepository
from src.domain.tariff import Tariff


class ResolveTariff:
    """
    Use Case: Resolve the active tariff of a category

    A category without an active tariff is a per-sensor failure,
    never fatal to the whole run.
    """

    def __init__(self, tariff_repo: TariffRepository):
        self.tariff_repo = tariff_repo

    async def execute(self, tariff_category_id: int) -> Result[Tariff]:
        tariff = await self.tariff_repo.get_active_for_category(tariff_category_id)

        if tariff is None:
            return Return.err(
                Error(
                    code="NO_ACTIVE_TARIFF",
                    message="No active tariff",
                    reason=f"Tariff category {tariff_category_id} has no active tariff",
                )
            )

        return Return.ok(tariff)
