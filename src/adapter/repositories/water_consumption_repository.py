"""SQLAlchemy Water Consumption Repository Implementation"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.water_consumption_repository import WaterConsumptionRepository
from src.domain.water_consumption import WaterConsumption


class SqlAlchemyWaterConsumptionRepository(WaterConsumptionRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_first_uninvoiced(self, serial: str) -> Optional[WaterConsumption]:
        statement = (
            select(WaterConsumption)
            .where(WaterConsumption.serial == serial)
            .where(WaterConsumption.invoiced == False)  # noqa: E712
            .order_by(WaterConsumption.reading_date.asc())
            .limit(1)
        )
        result = await self.session.execute(statement)
        return result.scalars().first()

    async def get_uninvoiced_in_period(
        self, serial: str, period_start: datetime, period_end: datetime
    ) -> List[WaterConsumption]:
        statement = (
            select(WaterConsumption)
            .where(WaterConsumption.serial == serial)
            .where(WaterConsumption.invoiced == False)  # noqa: E712
            .where(WaterConsumption.reading_date >= period_start)
            .where(WaterConsumption.reading_date <= period_end)
            .order_by(WaterConsumption.reading_date.asc(), WaterConsumption.id.asc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def get_last_before(self, serial: str, before: datetime) -> Optional[WaterConsumption]:
        statement = (
            select(WaterConsumption)
            .where(WaterConsumption.serial == serial)
            .where(WaterConsumption.reading_date < before)
            .order_by(WaterConsumption.reading_date.desc())
            .limit(1)
        )
        result = await self.session.execute(statement)
        return result.scalars().first()

    async def mark_invoiced(self, consumption_ids: List[int], invoice_id: int) -> int:
        if not consumption_ids:
            return 0

        statement = (
            update(WaterConsumption)
            .where(WaterConsumption.id.in_(consumption_ids))
            .where(WaterConsumption.invoiced == False)  # noqa: E712
            .values(invoiced=True, invoice_id=invoice_id)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)
        return result.rowcount
