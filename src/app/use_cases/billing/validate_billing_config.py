"""Billing configuration validation shared by create and update"""

from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from libs.result import Error
from src.domain.recurrence import BillingCycle, cycle_from
from .dtos import BillingConfigCommandDTO


def validate_billing_config(command: BillingConfigCommandDTO) -> Optional[Error]:
    """Return an INVALID_BILLING_CONFIG error, or None when the command is valid"""
    try:
        cycle_from(BillingCycle(command.billing_cycle), command.billing_day)
    except ValueError as e:
        return Error(code="INVALID_BILLING_CONFIG", message="Invalid billing schedule", reason=str(e))

    if not 0 <= command.billing_hour <= 23 or not 0 <= command.billing_minute <= 59:
        return Error(
            code="INVALID_BILLING_CONFIG",
            message="Invalid billing schedule",
            reason=f"Invalid time {command.billing_hour}:{command.billing_minute:02d}",
        )

    try:
        ZoneInfo(command.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        return Error(
            code="INVALID_BILLING_CONFIG",
            message="Invalid timezone",
            reason=f"Unknown IANA timezone '{command.timezone}'",
        )

    if not 1 <= command.max_retries <= 10:
        return Error(
            code="INVALID_BILLING_CONFIG",
            message="Invalid retry policy",
            reason="max_retries must be between 1 and 10",
        )

    if not command.sensor_statuses:
        return Error(
            code="INVALID_BILLING_CONFIG",
            message="Invalid sensor filter",
            reason="At least one sensor status is required",
        )

    return None
