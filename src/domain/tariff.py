"""Tariff Domain Entities

Rate tables applied to consumption, grouped by tariff category.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String, text
from src.domain.base import BaseModel, BigIntPK


class TariffCategory(BaseModel, table=True):
    __tablename__ = "tariff_categories"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntPK, primary_key=True, autoincrement=True),
    )

    name: str = Field(
        sa_column=Column(String(50), nullable=False, unique=True),
        description="Category code (e.g., RESIDENTIAL)"
    )

    display_name: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)


class Tariff(BaseModel, table=True):
    """
    Tariff - Per-m3 water and sewerage rates plus a fixed charge

    Domain Rules:
    - At most one active tariff per category (partial unique index)
    - max_consumption is None for an open-ended range
    """

    __tablename__ = "tariffs"
    __table_args__ = (
        Index(
            'uq_tariffs_active_category',
            'tariff_category_id',
            unique=True,
            postgresql_where=text('is_active'),
            sqlite_where=text('is_active'),
        ),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntPK, primary_key=True, autoincrement=True),
    )

    tariff_category_id: int = Field(index=True)

    name: str = Field(sa_column=Column(String(100), nullable=False))
    description: Optional[str] = Field(default=None)

    min_consumption: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(12, 3), nullable=False, default=0),
        description="Lower bound of the consumption range (m3)"
    )

    max_consumption: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(12, 3), nullable=True),
        description="Upper bound of the consumption range (m3, None = unbounded)"
    )

    water_charge: Decimal = Field(
        sa_column=Column(Numeric(12, 4), nullable=False),
        description="Water charge per m3"
    )

    sewerage_charge: Decimal = Field(
        sa_column=Column(Numeric(12, 4), nullable=False),
        description="Sewerage charge per m3"
    )

    fixed_charge: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Fixed charge per invoice"
    )

    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
