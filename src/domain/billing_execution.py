"""Billing Execution Domain Entity

One audit record per scheduled or manual run of a billing configuration.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import JSON, String
from src.domain.base import BaseModel, generate_uuid


class ExecutionStatus(str, Enum):
    """Billing execution status types"""
    RUNNING = "RUNNING"
    SUCCESS = "SUCCESS"
    PARTIAL = "PARTIAL"
    FAILED = "FAILED"


def classify_execution(success_count: int, failed_count: int) -> ExecutionStatus:
    """Final status of a run from its per-sensor outcomes"""
    if success_count == 0:
        return ExecutionStatus.FAILED
    if failed_count == 0:
        return ExecutionStatus.SUCCESS
    return ExecutionStatus.PARTIAL


class BillingExecution(BaseModel, table=True):
    """
    Billing Execution - Progress and outcome of one billing run

    Domain Rules:
    - Created with status=RUNNING and zero counters when a run starts
    - Counters are persisted after every sensor so a crash leaves a truthful record
    - processed_count == success_count + failed_count
    - Kept as history even after its configuration is deleted
    """

    __tablename__ = "billing_executions"
    __table_args__ = (
        Index('ix_billing_executions_config_started', 'config_id', 'started_at'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        sa_column=Column(String(36), primary_key=True),
        description="Unique execution identifier (uuid)"
    )

    config_id: str = Field(
        sa_column=Column(String(36), nullable=False),
        description="Billing configuration that was run"
    )

    started_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Run start timestamp (UTC)"
    )

    completed_at: Optional[datetime] = Field(
        default=None,
        description="Run completion timestamp (UTC)"
    )

    status: ExecutionStatus = Field(
        default=ExecutionStatus.RUNNING,
        description="Execution status (RUNNING, SUCCESS, PARTIAL, FAILED)"
    )

    total_sensors: int = Field(default=0)
    processed_count: int = Field(default=0)
    success_count: int = Field(default=0)
    failed_count: int = Field(default=0)

    errors: Optional[List[Dict[str, Any]]] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="Per-sensor errors: sensor_id, meter_number, error_message"
    )

    summary: Optional[Dict[str, Any]] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="Denormalized result snapshot for reporting"
    )
