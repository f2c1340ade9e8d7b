"""Request schemas for Billing Configuration API

Pydantic models for validating incoming HTTP requests.
"""

from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from src.domain.recurrence import BillingCycle
from src.domain.sensor import SensorStatus


class BillingConfigRequestSchema(BaseModel):
    """
    Request schema for creating or replacing a billing configuration

    Used for POST /billing/configs and PUT /billing/configs/{config_id}.
    """

    name: str = Field(..., min_length=1, max_length=100, description="Configuration name")
    description: Optional[str] = Field(default=None, description="Free text description")
    is_active: bool = Field(default=True)

    billing_cycle: BillingCycle = Field(default=BillingCycle.MONTHLY)
    billing_day: int = Field(
        default=1,
        description="Weekday 0-6 (0 = Sunday) for WEEKLY, day of month 1-31 otherwise"
    )
    billing_hour: int = Field(default=0, ge=0, le=23)
    billing_minute: int = Field(default=0, ge=0, le=59)
    timezone: str = Field(default="America/Lima", description="IANA timezone")
    include_weekends: bool = Field(default=True)

    tariff_categories: List[int] = Field(
        default_factory=list,
        description="Tariff category ids to bill (empty = all categories)"
    )
    sensor_statuses: List[SensorStatus] = Field(
        default_factory=lambda: [SensorStatus.ACTIVE],
        min_length=1,
    )

    retry_on_failure: bool = Field(default=True)
    max_retries: int = Field(default=3, ge=1, le=10)

    notify_on_success: bool = Field(default=True)
    notify_on_error: bool = Field(default=True)
    notify_emails: List[EmailStr] = Field(default_factory=list)

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v):
        """Ensure timezone is a known IANA zone"""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @model_validator(mode='after')
    def validate_billing_day(self):
        """billing_day range depends on the cycle"""
        if self.billing_cycle == BillingCycle.WEEKLY:
            if not 0 <= self.billing_day <= 6:
                raise ValueError("billing_day must be 0-6 for WEEKLY cycles")
        elif not 1 <= self.billing_day <= 31:
            raise ValueError("billing_day must be 1-31")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Monthly residential",
                "description": "Residential meters, billed on the 1st",
                "billing_cycle": "MONTHLY",
                "billing_day": 1,
                "billing_hour": 8,
                "billing_minute": 0,
                "timezone": "America/Lima",
                "include_weekends": False,
                "tariff_categories": [1],
                "sensor_statuses": ["ACTIVE"],
                "retry_on_failure": True,
                "max_retries": 3,
                "notify_on_success": True,
                "notify_on_error": True,
                "notify_emails": ["billing@example.com"]
            }
        }

