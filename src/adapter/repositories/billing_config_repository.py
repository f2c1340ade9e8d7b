"""SQLAlchemy Billing Config Repository Implementation"""

from datetime import datetime
from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.billing_config_repository import BillingConfigRepository
from src.domain.billing_config import BillingConfig


class SqlAlchemyBillingConfigRepository(BillingConfigRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, config: BillingConfig) -> BillingConfig:
        self.session.add(config)
        await self.session.flush()
        await self.session.refresh(config)
        return config

    async def get_by_id(self, config_id: str) -> Optional[BillingConfig]:
        statement = select(BillingConfig).where(BillingConfig.id == config_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list_all(self) -> List[BillingConfig]:
        statement = select(BillingConfig).order_by(BillingConfig.created_at.desc())
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def list_active(self) -> List[BillingConfig]:
        statement = (
            select(BillingConfig)
            .where(BillingConfig.is_active == True)  # noqa: E712
            .order_by(BillingConfig.created_at)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def update(self, config: BillingConfig) -> BillingConfig:
        config.updated_at = datetime.utcnow()
        self.session.add(config)
        await self.session.flush()
        await self.session.refresh(config)
        return config

    async def delete(self, config: BillingConfig) -> None:
        await self.session.delete(config)
        await self.session.flush()
