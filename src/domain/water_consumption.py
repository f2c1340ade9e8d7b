"""Water Consumption Domain Entity

One meter reading. Readings are created outside the billing engine;
billing only flips them to invoiced.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import BigInteger, Numeric, String
from src.domain.base import BaseModel, BigIntPK


class WaterConsumption(BaseModel, table=True):
    """
    Water Consumption - Meter reading

    Domain Rules:
    - consumption = amount - previous_amount, in liters
    - Once invoiced=True the reading references exactly one invoice
      and is never selected for billing again
    """

    __tablename__ = "water_consumptions"
    __table_args__ = (
        Index('ix_water_consumptions_serial_reading', 'serial', 'reading_date'),
        Index('ix_water_consumptions_serial_invoiced', 'serial', 'invoiced'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntPK, primary_key=True, autoincrement=True),
    )

    serial: str = Field(
        sa_column=Column(String(50), nullable=False),
        description="Meter number of the sensor"
    )

    reading_date: datetime = Field(description="Reading timestamp (UTC)")

    amount: Decimal = Field(
        sa_column=Column(Numeric(14, 3), nullable=False),
        description="Absolute meter reading"
    )

    previous_amount: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(14, 3), nullable=True),
    )

    consumption: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(14, 3), nullable=True),
        description="Liters consumed since the previous reading"
    )

    invoiced: bool = Field(default=False)

    invoice_id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigInteger, nullable=True),
    )
