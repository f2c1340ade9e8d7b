"""Sensor Domain Entity

A water meter owned by a customer and billed under one tariff category.
Sensors are managed outside the billing engine; billing only reads them.
"""

from enum import Enum
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import String
from src.domain.base import BaseModel, BigIntPK


class SensorStatus(str, Enum):
    """Sensor lifecycle status"""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    MAINTENANCE = "MAINTENANCE"
    FAULTY = "FAULTY"


class Sensor(BaseModel, table=True):
    __tablename__ = "sensors"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntPK, primary_key=True, autoincrement=True),
    )

    meter_number: str = Field(
        sa_column=Column(String(50), nullable=False, unique=True),
        description="Meter serial, matches WaterConsumption.serial"
    )

    status: SensorStatus = Field(default=SensorStatus.ACTIVE, index=True)

    tariff_category_id: int = Field(index=True, description="Tariff category of the sensor")

    user_id: int = Field(description="Owning customer")
