"""Billing Configuration API Routes

FastAPI routes for managing recurring billing configurations.
"""

from typing import List
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.billing_config_request import BillingConfigRequestSchema
from src.app.use_cases.billing.dtos import (
    BillingConfigCommandDTO,
    BillingConfigResponseDTO,
    ExecutionResultDTO,
    ListExecutionsResponseDTO,
)
from src.app.use_cases.billing.create_billing_config import CreateBillingConfig
from src.app.use_cases.billing.update_billing_config import UpdateBillingConfig
from src.app.use_cases.billing.delete_billing_config import DeleteBillingConfig
from src.app.use_cases.billing.get_billing_config import GetBillingConfig, ListBillingConfigs
from src.app.use_cases.billing.list_billing_executions import ListBillingExecutions
from src.adapter.repositories.billing_config_repository import SqlAlchemyBillingConfigRepository
from src.adapter.repositories.billing_execution_repository import SqlAlchemyBillingExecutionRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session, get_scheduler
from src.worker.billing_scheduler import BillingSchedulerService
from src.api.error import ClientError

router = APIRouter(prefix="/billing/configs", tags=["Billing Configurations"])

ERROR_STATUS = {
    "CONFIG_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVALID_CONFIG": status.HTTP_400_BAD_REQUEST,
    "INVALID_BILLING_CONFIG": status.HTTP_400_BAD_REQUEST,
    "EXECUTION_IN_PROGRESS": status.HTTP_409_CONFLICT,
}


def _raise_for(error):
    raise ClientError(error, status_code=ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST))


def _to_command(request: BillingConfigRequestSchema) -> BillingConfigCommandDTO:
    return BillingConfigCommandDTO(
        name=request.name,
        description=request.description,
        is_active=request.is_active,
        billing_cycle=request.billing_cycle.value,
        billing_day=request.billing_day,
        billing_hour=request.billing_hour,
        billing_minute=request.billing_minute,
        timezone=request.timezone,
        include_weekends=request.include_weekends,
        tariff_categories=request.tariff_categories,
        sensor_statuses=[s.value for s in request.sensor_statuses],
        retry_on_failure=request.retry_on_failure,
        max_retries=request.max_retries,
        notify_on_success=request.notify_on_success,
        notify_on_error=request.notify_on_error,
        notify_emails=request.notify_emails,
    )


@router.get("", response_model=List[BillingConfigResponseDTO])
async def list_billing_configs(session: AsyncSession = Depends(get_session)):
    """List every billing configuration, newest first."""
    use_case = ListBillingConfigs(SqlAlchemyBillingConfigRepository(session))
    result = await use_case.execute()
    return result.value


@router.post(
    "",
    response_model=BillingConfigResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {
            "description": "Invalid configuration",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INVALID_BILLING_CONFIG",
                            "message": "Invalid timezone"
                        }
                    }
                }
            }
        }
    }
)
async def create_billing_config(
    request: BillingConfigRequestSchema,
    session: AsyncSession = Depends(get_session),
    scheduler: BillingSchedulerService = Depends(get_scheduler),
):
    """
    Create a recurring billing configuration.

    `next_run` is computed from the schedule and the configuration is armed
    in the scheduler right away when active.

    **Returns:**
    - 201: Configuration created
    - 400: Invalid schedule or timezone
    """
    uow = SqlAlchemyUnitOfWork(session)
    config_repo = SqlAlchemyBillingConfigRepository(session)

    use_case = CreateBillingConfig(uow, config_repo)
    result = await use_case.execute(_to_command(request))

    if result.is_err():
        _raise_for(result.error)

    await scheduler.reload(result.value.id)
    return result.value


@router.get("/{config_id}", response_model=BillingConfigResponseDTO)
async def get_billing_config(config_id: str, session: AsyncSession = Depends(get_session)):
    use_case = GetBillingConfig(SqlAlchemyBillingConfigRepository(session))
    result = await use_case.execute(config_id)

    if result.is_err():
        _raise_for(result.error)

    return result.value


@router.put("/{config_id}", response_model=BillingConfigResponseDTO)
async def update_billing_config(
    config_id: str,
    request: BillingConfigRequestSchema,
    session: AsyncSession = Depends(get_session),
    scheduler: BillingSchedulerService = Depends(get_scheduler),
):
    """
    Replace the settings of a billing configuration.

    Recomputes `next_run`, resets the consecutive failure counter and
    re-arms (or disarms) the scheduler timer.

    **Returns:**
    - 200: Configuration updated
    - 400: Invalid schedule or timezone
    - 404: Configuration not found
    """
    uow = SqlAlchemyUnitOfWork(session)
    config_repo = SqlAlchemyBillingConfigRepository(session)

    use_case = UpdateBillingConfig(uow, config_repo)
    result = await use_case.execute(config_id, _to_command(request))

    if result.is_err():
        _raise_for(result.error)

    await scheduler.reload(config_id)
    return result.value


@router.delete("/{config_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_billing_config(
    config_id: str,
    session: AsyncSession = Depends(get_session),
    scheduler: BillingSchedulerService = Depends(get_scheduler),
):
    """Delete a billing configuration. Its execution history is kept."""
    uow = SqlAlchemyUnitOfWork(session)
    config_repo = SqlAlchemyBillingConfigRepository(session)

    use_case = DeleteBillingConfig(uow, config_repo)
    result = await use_case.execute(config_id)

    if result.is_err():
        _raise_for(result.error)

    await scheduler.reload(config_id)


@router.post(
    "/{config_id}/execute",
    response_model=ExecutionResultDTO,
    status_code=status.HTTP_200_OK,
    responses={
        409: {
            "description": "Configuration is already executing",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "EXECUTION_IN_PROGRESS",
                            "message": "Billing config 0d3c1f5e-2f0a-4d43-8b4a-7c7a0a9b6e21 is already executing"
                        }
                    }
                }
            }
        }
    }
)
async def execute_billing_config(
    config_id: str,
    scheduler: BillingSchedulerService = Depends(get_scheduler),
):
    """
    Run a billing configuration immediately.

    Ignores the retry policy; shares the single-flight guard with the
    scheduler.

    **Returns:**
    - 200: Run finished (status SUCCESS, PARTIAL or FAILED)
    - 400: Configuration missing or inactive
    - 409: A run of this configuration is in progress
    """
    result = await scheduler.trigger(config_id)

    if result.is_err():
        _raise_for(result.error)

    return result.value


@router.get("/{config_id}/executions", response_model=ListExecutionsResponseDTO)
async def list_billing_executions(
    config_id: str,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    """Execution history of a configuration, newest first."""
    use_case = ListBillingExecutions(
        SqlAlchemyBillingConfigRepository(session),
        SqlAlchemyBillingExecutionRepository(session),
    )
    result = await use_case.execute(config_id, limit=limit, offset=offset)

    if result.is_err():
        _raise_for(result.error)

    return result.value
