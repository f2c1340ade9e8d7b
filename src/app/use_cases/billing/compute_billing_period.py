"""ComputeBillingPeriod Use Case

Derives the consumption window the next invoice of a sensor covers.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo
from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.water_consumption_repository import WaterConsumptionRepository
from src.domain.recurrence import BillingCycle, to_local, to_utc
from .dtos import BillingPeriodDTO


def previous_cycle_end(billing_cycle: BillingCycle, today: date) -> date:
    """
    Last day of the most recent completed cycle, relative to a local date

    DAILY -> yesterday, WEEKLY -> seven days ago, MONTHLY -> last day of the
    previous month, QUARTERLY -> last day of the previous quarter,
    YEARLY -> December 31 of the previous year.
    """
    billing_cycle = BillingCycle(billing_cycle)
    if billing_cycle == BillingCycle.DAILY:
        return today - timedelta(days=1)
    if billing_cycle == BillingCycle.WEEKLY:
        return today - timedelta(days=7)
    if billing_cycle == BillingCycle.MONTHLY:
        return today.replace(day=1) - timedelta(days=1)
    if billing_cycle == BillingCycle.QUARTERLY:
        quarter_start_month = 3 * ((today.month - 1) // 3) + 1
        return date(today.year, quarter_start_month, 1) - timedelta(days=1)
    return date(today.year - 1, 12, 31)


class ComputeBillingPeriod:
    """
    Use Case: Compute the billing period of a sensor

    Business Rules:
    1. A billed sensor continues the day after its last invoice's period end
    2. A never-billed sensor starts on the day of its earliest un-invoiced reading
    3. The period ends with the last completed cycle before today
    4. Day boundaries are local to the configuration timezone and stored as UTC
    5. An empty or inverted window means there is nothing to bill yet
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        consumption_repo: WaterConsumptionRepository,
    ):
        self.invoice_repo = invoice_repo
        self.consumption_repo = consumption_repo

    async def execute(
        self,
        sensor,
        billing_cycle: BillingCycle,
        timezone: str,
        now: Optional[datetime] = None,
    ) -> Result[BillingPeriodDTO]:
        """
        Execute billing period computation

        Args:
            sensor: Sensor (or snapshot) with id and meter_number
            billing_cycle: Cycle of the billing configuration
            timezone: IANA timezone of the billing configuration
            now: Current instant (naive UTC, default: utcnow)

        Returns:
            Result[BillingPeriodDTO]: Period bounds or NO_BILLABLE_DATA
        """
        tz = ZoneInfo(timezone)
        local_now = to_local(now or datetime.utcnow(), tz)

        last_invoice = await self.invoice_repo.get_last_for_sensor(sensor.id)

        if last_invoice is not None:
            start_day = to_local(last_invoice.period_end, tz).date() + timedelta(days=1)
        else:
            first_reading = await self.consumption_repo.get_first_uninvoiced(sensor.meter_number)
            if first_reading is None:
                return Return.err(
                    Error(
                        code="NO_BILLABLE_DATA",
                        message="No consumption to bill",
                        reason=f"Meter {sensor.meter_number} has no un-invoiced readings",
                    )
                )
            start_day = to_local(first_reading.reading_date, tz).date()

        end_day = previous_cycle_end(billing_cycle, local_now.date())

        if start_day > end_day:
            return Return.err(
                Error(
                    code="NO_BILLABLE_DATA",
                    message="No completed billing period",
                    reason=f"Next period starts {start_day.isoformat()}, "
                           f"last completed cycle ended {end_day.isoformat()}",
                )
            )

        local_start = datetime.combine(start_day, time.min, tzinfo=tz)
        local_end = datetime.combine(end_day, time.max, tzinfo=tz)

        return Return.ok(
            BillingPeriodDTO(
                period_start=to_utc(local_start),
                period_end=to_utc(local_end),
                local_start=local_start,
                local_end=local_end,
            )
        )
