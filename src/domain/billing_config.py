"""Billing Configuration Domain Entity

A named, independently schedulable billing policy.
"""

from datetime import datetime
from typing import List, Optional
from sqlmodel import Field, Column
from sqlalchemy import JSON, String, Text
from src.domain.base import BaseModel, generate_uuid
from src.domain.billing_execution import ExecutionStatus
from src.domain.recurrence import BillingCycle, RecurrenceRule


class BillingConfig(BaseModel, table=True):
    """
    Billing Configuration - Recurring billing policy

    Domain Rules:
    - next_run is recomputed after every run and on every edit
    - billing_day is a weekday (0 = Sunday) for WEEKLY, a day of month otherwise
    - Empty tariff_categories means every category is billed
    - Scheduled runs stop after max_retries consecutive failures
      (or after the first one when retry_on_failure is off)
    """

    __tablename__ = "billing_configs"

    id: str = Field(
        default_factory=generate_uuid,
        sa_column=Column(String(36), primary_key=True),
        description="Unique configuration identifier (uuid)"
    )

    name: str = Field(
        sa_column=Column(String(100), nullable=False),
        description="Configuration display name"
    )

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )

    is_active: bool = Field(default=True, index=True)

    billing_cycle: BillingCycle = Field(default=BillingCycle.MONTHLY)
    billing_day: int = Field(default=1)
    billing_hour: int = Field(default=0)
    billing_minute: int = Field(default=0)
    timezone: str = Field(
        default="America/Lima",
        sa_column=Column(String(64), nullable=False, default="America/Lima"),
        description="IANA timezone the schedule and billing periods are expressed in"
    )
    include_weekends: bool = Field(default=True)

    tariff_categories: List[int] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="Tariff category ids to bill (empty = all)"
    )

    sensor_statuses: List[str] = Field(
        default_factory=lambda: ["ACTIVE"],
        sa_column=Column(JSON, nullable=False),
        description="Sensor statuses eligible for billing"
    )

    retry_on_failure: bool = Field(default=True)
    max_retries: int = Field(default=3)
    consecutive_failures: int = Field(default=0)

    notify_on_success: bool = Field(default=True)
    notify_on_error: bool = Field(default=True)
    notify_emails: List[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    next_run: Optional[datetime] = Field(default=None, description="Next trigger (UTC)")
    last_run: Optional[datetime] = Field(default=None, description="Last run (UTC)")
    last_run_status: Optional[ExecutionStatus] = Field(default=None)
    total_invoices: int = Field(default=0, description="Invoices created by this configuration")

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def recurrence_rule(self) -> RecurrenceRule:
        return RecurrenceRule.from_config(self)

    def retries_exhausted(self) -> bool:
        """Whether scheduled runs are suspended after consecutive failures"""
        if self.consecutive_failures <= 0:
            return False
        if not self.retry_on_failure:
            return True
        return self.consecutive_failures > self.max_retries
