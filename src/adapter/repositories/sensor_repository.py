"""SQLAlchemy Sensor Repository Implementation"""

from typing import List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.sensor_repository import SensorRepository
from src.domain.sensor import Sensor, SensorStatus


class SqlAlchemySensorRepository(SensorRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_billable(self, statuses: List[str], tariff_categories: List[int]) -> List[Sensor]:
        statement = select(Sensor).where(
            Sensor.status.in_([SensorStatus(status) for status in statuses])
        )

        if tariff_categories:
            statement = statement.where(Sensor.tariff_category_id.in_(tariff_categories))

        statement = statement.order_by(Sensor.id)
        result = await self.session.execute(statement)
        return list(result.scalars().all())
