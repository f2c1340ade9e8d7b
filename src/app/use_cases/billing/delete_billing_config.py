"""DeleteBillingConfig Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.billing_config_repository import BillingConfigRepository

logger = logging.getLogger(__name__)


class DeleteBillingConfig:
    """
    Use Case: Delete a billing configuration

    Execution history of the configuration is kept.
    """

    def __init__(self, uow: UnitOfWork, config_repo: BillingConfigRepository):
        self.uow = uow
        self.config_repo = config_repo

    async def execute(self, config_id: str) -> Result[str]:
        config = await self.config_repo.get_by_id(config_id)
        if config is None:
            return Return.err(
                Error(
                    code="CONFIG_NOT_FOUND",
                    message="Billing configuration not found",
                    reason=f"No billing config with id {config_id}",
                )
            )

        try:
            await self.config_repo.delete(config)
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

        logger.info(f"Billing config {config_id} deleted")
        return Return.ok(config_id)
