"""Data Transfer Objects for Billing Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class BillableSensorDTO(BaseModel):
    """
    Snapshot of a sensor selected for a billing run

    Detached from the session so per-sensor rollbacks never touch it.
    """

    id: int
    meter_number: str
    user_id: int
    tariff_category_id: int


class BillingPeriodDTO(BaseModel):
    """
    Inclusive consumption window covered by one invoice

    period_start/period_end are naive UTC (storage and query bounds);
    local_start/local_end are the same instants in the configuration timezone.
    """

    period_start: datetime = Field(..., description="Period start (UTC)")
    period_end: datetime = Field(..., description="Period end, inclusive (UTC)")
    local_start: datetime = Field(..., description="Period start in local time")
    local_end: datetime = Field(..., description="Period end in local time")


class ChargesDTO(BaseModel):
    """Charges computed for a consumption volume under a tariff"""

    consumption_m3: Decimal
    water_charge: Decimal
    sewerage_charge: Decimal
    fixed_charge: Decimal
    taxes: Decimal
    total_amount: Decimal


class BillingErrorDTO(BaseModel):
    """Per-sensor failure recorded on an execution"""

    sensor_id: Optional[int] = Field(default=None, description="Sensor ID (None for run-level errors)")
    meter_number: Optional[str] = Field(default=None)
    error_message: str


class ExecutionResultDTO(BaseModel):
    """
    Response DTO for a billing run

    Returned by ExecuteBilling.
    """

    execution_id: str = Field(..., description="Execution ID")
    config_id: str = Field(..., description="Configuration ID")
    status: str = Field(..., description="Final status (SUCCESS, PARTIAL, FAILED)")
    total_sensors: int
    processed_count: int
    success_count: int
    failed_count: int
    invoice_numbers: List[str] = Field(default_factory=list, description="Invoices created")
    errors: List[BillingErrorDTO] = Field(default_factory=list)
    next_run: Optional[datetime] = Field(default=None, description="Next scheduled run (UTC)")

    class Config:
        json_schema_extra = {
            "example": {
                "execution_id": "8b0f5a4e-6c55-4b8a-9f61-1a1f0e8f3b11",
                "config_id": "0d3c1f5e-2f0a-4d43-8b4a-7c7a0a9b6e21",
                "status": "PARTIAL",
                "total_sensors": 10,
                "processed_count": 10,
                "success_count": 7,
                "failed_count": 3,
                "invoice_numbers": ["FAC-000101", "FAC-000102"],
                "errors": [
                    {"sensor_id": 12, "meter_number": "MED-0012", "error_message": "Zero consumption"}
                ],
                "next_run": "2024-03-01T13:00:00"
            }
        }


class BillingConfigCommandDTO(BaseModel):
    """
    Command DTO for creating or updating a billing configuration

    Used as input to CreateBillingConfig and UpdateBillingConfig.
    """

    name: str
    description: Optional[str] = None
    is_active: bool = True
    billing_cycle: str = "MONTHLY"
    billing_day: int = 1
    billing_hour: int = 0
    billing_minute: int = 0
    timezone: str = "America/Lima"
    include_weekends: bool = True
    tariff_categories: List[int] = Field(default_factory=list)
    sensor_statuses: List[str] = Field(default_factory=lambda: ["ACTIVE"])
    retry_on_failure: bool = True
    max_retries: int = 3
    notify_on_success: bool = True
    notify_on_error: bool = True
    notify_emails: List[str] = Field(default_factory=list)


class BillingConfigResponseDTO(BaseModel):
    """Response DTO for a billing configuration"""

    id: str
    name: str
    description: Optional[str] = None
    is_active: bool
    billing_cycle: str
    billing_day: int
    billing_hour: int
    billing_minute: int
    timezone: str
    include_weekends: bool
    tariff_categories: List[int]
    sensor_statuses: List[str]
    retry_on_failure: bool
    max_retries: int
    consecutive_failures: int
    notify_on_success: bool
    notify_on_error: bool
    notify_emails: List[str]
    next_run: Optional[datetime] = None
    last_run: Optional[datetime] = None
    last_run_status: Optional[str] = None
    total_invoices: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, config) -> "BillingConfigResponseDTO":
        return cls(
            id=config.id,
            name=config.name,
            description=config.description,
            is_active=config.is_active,
            billing_cycle=config.billing_cycle.value,
            billing_day=config.billing_day,
            billing_hour=config.billing_hour,
            billing_minute=config.billing_minute,
            timezone=config.timezone,
            include_weekends=config.include_weekends,
            tariff_categories=list(config.tariff_categories or []),
            sensor_statuses=list(config.sensor_statuses or []),
            retry_on_failure=config.retry_on_failure,
            max_retries=config.max_retries,
            consecutive_failures=config.consecutive_failures,
            notify_on_success=config.notify_on_success,
            notify_on_error=config.notify_on_error,
            notify_emails=list(config.notify_emails or []),
            next_run=config.next_run,
            last_run=config.last_run,
            last_run_status=config.last_run_status.value if config.last_run_status else None,
            total_invoices=config.total_invoices,
            created_at=config.created_at,
            updated_at=config.updated_at,
        )


class BillingExecutionDTO(BaseModel):
    """Billing execution history entry"""

    id: str
    config_id: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    status: str
    total_sensors: int
    processed_count: int
    success_count: int
    failed_count: int
    errors: List[Dict[str, Any]] = Field(default_factory=list)
    summary: Optional[Dict[str, Any]] = None


class ListExecutionsResponseDTO(BaseModel):
    """Response DTO for execution history"""

    config_id: str
    executions: List[BillingExecutionDTO]
    limit: int
    offset: int
