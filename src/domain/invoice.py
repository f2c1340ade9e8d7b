"""Invoice Domain Entity

Water billing invoice for one sensor and one billing period.
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import JSON, Numeric, String, Text
from src.domain.base import BaseModel, BigIntPK

CENT = Decimal("0.01")
TEN_CENTS = Decimal("0.1")


def round2(amount: Decimal) -> Decimal:
    """Round to the nearest 0.01, halves away from zero"""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def round10c(amount: Decimal) -> Decimal:
    """Round to the nearest 0.10 (cash denomination), halves away from zero"""
    return Decimal(amount).quantize(TEN_CENTS, rounding=ROUND_HALF_UP)


class InvoiceStatus(str, Enum):
    """Invoice status types"""
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


class Invoice(BaseModel, table=True):
    """
    Invoice - Water billing invoice for one sensor

    Domain Rules:
    - invoice_number must be unique (FAC-######)
    - One invoice per sensor per billing period, never regenerated
    - total_amount = round10c(water + sewerage + fixed + taxes + additional - discounts)
    - Transitions to PAID only through the payment processor
    """

    __tablename__ = "invoices"
    __table_args__ = (
        Index('ix_invoices_sensor_period_end', 'sensor_id', 'period_end'),
        Index('ix_invoices_user_id', 'user_id'),
        Index('ix_invoices_status', 'status'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntPK, primary_key=True, autoincrement=True),
        description="Unique invoice identifier (auto-increment)"
    )

    invoice_number: str = Field(
        sa_column=Column(String(50), nullable=False, unique=True),
        description="Unique invoice number (e.g., FAC-000001)"
    )

    user_id: int = Field(description="Billed customer")
    sensor_id: int = Field(description="Billed sensor")
    tariff_id: int = Field(description="Applied tariff")

    period_start: datetime = Field(description="Billing period start (UTC)")
    period_end: datetime = Field(description="Billing period end, inclusive (UTC)")

    consumption_amount: Decimal = Field(
        sa_column=Column(Numeric(14, 3), nullable=False),
        description="Billed consumption (m3)"
    )

    water_charge: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    sewerage_charge: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    fixed_charge: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    taxes: Decimal = Field(default=Decimal("0"), sa_column=Column(Numeric(12, 2), nullable=False))
    additional_charges: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(12, 2), nullable=False),
    )
    discounts: Decimal = Field(default=Decimal("0"), sa_column=Column(Numeric(12, 2), nullable=False))

    total_amount: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Total rounded to the nearest 0.10"
    )

    amount_due: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    status: InvoiceStatus = Field(default=InvoiceStatus.PENDING)

    due_date: datetime = Field(description="Payment due date (UTC)")

    notes: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    invoice_metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        sa_column=Column("metadata", JSON, nullable=True),
        description="Reading snapshot: previous/current reading, liters, local period"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Invoice creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    def expected_total(self) -> Decimal:
        return round10c(
            self.water_charge
            + self.sewerage_charge
            + self.fixed_charge
            + self.taxes
            + self.additional_charges
            - self.discounts
        )


class InvoiceSequence(BaseModel, table=True):
    """
    Invoice number counter

    Incremented with a single atomic UPDATE inside the invoice transaction so
    concurrent runs never allocate the same number.
    """

    __tablename__ = "invoice_sequences"

    name: str = Field(sa_column=Column(String(20), primary_key=True))
    last_value: int = Field(default=0)
