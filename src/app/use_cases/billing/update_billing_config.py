"""UpdateBillingConfig Use Case"""

import logging
from datetime import datetime
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.billing_config_repository import BillingConfigRepository
from src.domain.recurrence import BillingCycle, next_run
from .dtos import BillingConfigCommandDTO, BillingConfigResponseDTO
from .validate_billing_config import validate_billing_config

logger = logging.getLogger(__name__)


class UpdateBillingConfig:
    """
    Use Case: Replace the settings of a billing configuration

    Business Rules:
    1. Same validation as creation
    2. next_run is recomputed from the new schedule
    3. The consecutive failure counter starts over
    4. Run bookkeeping (last_run, total_invoices) is preserved
    """

    def __init__(self, uow: UnitOfWork, config_repo: BillingConfigRepository):
        self.uow = uow
        self.config_repo = config_repo

    async def execute(
        self,
        config_id: str,
        command: BillingConfigCommandDTO,
        now: Optional[datetime] = None,
    ) -> Result[BillingConfigResponseDTO]:
        config = await self.config_repo.get_by_id(config_id)
        if config is None:
            return Return.err(
                Error(
                    code="CONFIG_NOT_FOUND",
                    message="Billing configuration not found",
                    reason=f"No billing config with id {config_id}",
                )
            )

        error = validate_billing_config(command)
        if error:
            return Return.err(error)

        config.name = command.name
        config.description = command.description
        config.is_active = command.is_active
        config.billing_cycle = BillingCycle(command.billing_cycle)
        config.billing_day = command.billing_day
        config.billing_hour = command.billing_hour
        config.billing_minute = command.billing_minute
        config.timezone = command.timezone
        config.include_weekends = command.include_weekends
        config.tariff_categories = list(command.tariff_categories)
        config.sensor_statuses = list(command.sensor_statuses)
        config.retry_on_failure = command.retry_on_failure
        config.max_retries = command.max_retries
        config.notify_on_success = command.notify_on_success
        config.notify_on_error = command.notify_on_error
        config.notify_emails = list(command.notify_emails)
        config.consecutive_failures = 0
        config.next_run = next_run(config.recurrence_rule(), now=now)

        try:
            config = await self.config_repo.update(config)
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

        logger.info(f"Billing config {config_id} updated, next run {config.next_run}")
        return Return.ok(BillingConfigResponseDTO.from_entity(config))
