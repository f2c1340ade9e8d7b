"""CreateBillingConfig Use Case"""

import logging
from datetime import datetime
from typing import Optional
from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.billing_config_repository import BillingConfigRepository
from src.domain.billing_config import BillingConfig
from src.domain.recurrence import BillingCycle, next_run
from .dtos import BillingConfigCommandDTO, BillingConfigResponseDTO
from .validate_billing_config import validate_billing_config

logger = logging.getLogger(__name__)


class CreateBillingConfig:
    """
    Use Case: Create a billing configuration

    Business Rules:
    1. billing_day must be valid for the cycle (0-6 WEEKLY, 1-31 otherwise)
    2. timezone must be a known IANA zone
    3. next_run is computed immediately from the schedule
    """

    def __init__(self, uow: UnitOfWork, config_repo: BillingConfigRepository):
        self.uow = uow
        self.config_repo = config_repo

    async def execute(
        self,
        command: BillingConfigCommandDTO,
        now: Optional[datetime] = None,
    ) -> Result[BillingConfigResponseDTO]:
        error = validate_billing_config(command)
        if error:
            return Return.err(error)

        config = BillingConfig(
            name=command.name,
            description=command.description,
            is_active=command.is_active,
            billing_cycle=BillingCycle(command.billing_cycle),
            billing_day=command.billing_day,
            billing_hour=command.billing_hour,
            billing_minute=command.billing_minute,
            timezone=command.timezone,
            include_weekends=command.include_weekends,
            tariff_categories=list(command.tariff_categories),
            sensor_statuses=list(command.sensor_statuses),
            retry_on_failure=command.retry_on_failure,
            max_retries=command.max_retries,
            notify_on_success=command.notify_on_success,
            notify_on_error=command.notify_on_error,
            notify_emails=list(command.notify_emails),
        )
        config.next_run = next_run(config.recurrence_rule(), now=now)

        try:
            config = await self.config_repo.create(config)
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

        logger.info(f"Billing config '{config.name}' ({config.id}) created, next run {config.next_run}")
        return Return.ok(BillingConfigResponseDTO.from_entity(config))
