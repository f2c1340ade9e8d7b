"""SQLAlchemy Billing Execution Repository Implementation"""

from typing import List, Optional
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.billing_execution_repository import BillingExecutionRepository
from src.domain.billing_execution import BillingExecution


class SqlAlchemyBillingExecutionRepository(BillingExecutionRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, execution: BillingExecution) -> BillingExecution:
        self.session.add(execution)
        await self.session.flush()
        await self.session.refresh(execution)
        return execution

    async def get_by_id(self, execution_id: str) -> Optional[BillingExecution]:
        statement = select(BillingExecution).where(BillingExecution.id == execution_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def update(self, execution: BillingExecution) -> BillingExecution:
        self.session.add(execution)
        await self.session.flush()
        await self.session.refresh(execution)
        return execution

    async def update_progress(
        self,
        execution_id: str,
        processed_count: int,
        success_count: int,
        failed_count: int,
    ) -> None:
        statement = (
            update(BillingExecution)
            .where(BillingExecution.id == execution_id)
            .values(
                processed_count=processed_count,
                success_count=success_count,
                failed_count=failed_count,
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(statement)

    async def list_by_config(
        self,
        config_id: str,
        limit: int = 20,
        offset: int = 0,
    ) -> List[BillingExecution]:
        statement = (
            select(BillingExecution)
            .where(BillingExecution.config_id == config_id)
            .order_by(BillingExecution.started_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())
