"""GetBillingConfig and ListBillingConfigs Use Cases"""

from typing import List
from libs.result import Result, Return, Error
from src.app.repositories.billing_config_repository import BillingConfigRepository
from .dtos import BillingConfigResponseDTO


class GetBillingConfig:
    """Use Case: Retrieve one billing configuration"""

    def __init__(self, config_repo: BillingConfigRepository):
        self.config_repo = config_repo

    async def execute(self, config_id: str) -> Result[BillingConfigResponseDTO]:
        config = await self.config_repo.get_by_id(config_id)
        if config is None:
            return Return.err(
                Error(
                    code="CONFIG_NOT_FOUND",
                    message="Billing configuration not found",
                    reason=f"No billing config with id {config_id}",
                )
            )
        return Return.ok(BillingConfigResponseDTO.from_entity(config))


class ListBillingConfigs:
    """Use Case: List every billing configuration, newest first"""

    def __init__(self, config_repo: BillingConfigRepository):
        self.config_repo = config_repo

    async def execute(self) -> Result[List[BillingConfigResponseDTO]]:
        configs = await self.config_repo.list_all()
        return Return.ok([BillingConfigResponseDTO.from_entity(c) for c in configs])
