"""SQLAlchemy Tariff Repository Implementation"""

from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.tariff_repository import TariffRepository
from src.domain.tariff import Tariff


class SqlAlchemyTariffRepository(TariffRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_active_for_category(self, tariff_category_id: int) -> Optional[Tariff]:
        statement = (
            select(Tariff)
            .where(Tariff.tariff_category_id == tariff_category_id)
            .where(Tariff.is_active == True)  # noqa: E712
            .order_by(Tariff.id)
            .limit(1)
        )
        result = await self.session.execute(statement)
        return result.scalars().first()
