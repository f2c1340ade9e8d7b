"""ListBillingExecutions Use Case

Execution history of a billing configuration.
"""

from libs.result import Result, Return, Error
from src.app.repositories.billing_config_repository import BillingConfigRepository
from src.app.repositories.billing_execution_repository import BillingExecutionRepository
from .dtos import BillingExecutionDTO, ListExecutionsResponseDTO


class ListBillingExecutions:
    """
    Use Case: List executions of a configuration, newest first

    Business Rules:
    1. The configuration must exist
    2. limit is capped at 100
    """

    MAX_LIMIT = 100

    def __init__(
        self,
        config_repo: BillingConfigRepository,
        execution_repo: BillingExecutionRepository,
    ):
        self.config_repo = config_repo
        self.execution_repo = execution_repo

    async def execute(
        self,
        config_id: str,
        limit: int = 20,
        offset: int = 0,
    ) -> Result[ListExecutionsResponseDTO]:
        """
        Execute execution history lookup

        Args:
            config_id: Configuration ID
            limit: Page size (1-100)
            offset: Page offset

        Returns:
            Result[ListExecutionsResponseDTO]: Executions or CONFIG_NOT_FOUND
        """
        config = await self.config_repo.get_by_id(config_id)
        if config is None:
            return Return.err(
                Error(
                    code="CONFIG_NOT_FOUND",
                    message="Billing configuration not found",
                    reason=f"No billing config with id {config_id}",
                )
            )

        limit = max(1, min(limit, self.MAX_LIMIT))
        offset = max(0, offset)

        executions = await self.execution_repo.list_by_config(config_id, limit=limit, offset=offset)

        return Return.ok(
            ListExecutionsResponseDTO(
                config_id=config_id,
                executions=[
                    BillingExecutionDTO(
                        id=e.id,
                        config_id=e.config_id,
                        started_at=e.started_at,
                        completed_at=e.completed_at,
                        status=e.status.value,
                        total_sensors=e.total_sensors,
                        processed_count=e.processed_count,
                        success_count=e.success_count,
                        failed_count=e.failed_count,
                        errors=list(e.errors or []),
                        summary=e.summary,
                    )
                    for e in executions
                ],
                limit=limit,
                offset=offset,
            )
        )
