"""ExecuteBilling Use Case

Runs one billing configuration: invoices every eligible sensor for its
pending period and records the outcome on a BillingExecution.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.notification_service import NotificationService
from src.app.services.execution_guard import ExecutionGuard
from src.app.repositories.billing_config_repository import BillingConfigRepository
from src.app.repositories.billing_execution_repository import BillingExecutionRepository
from src.app.repositories.sensor_repository import SensorRepository
from src.app.repositories.tariff_repository import TariffRepository
from src.app.repositories.water_consumption_repository import WaterConsumptionRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.billing_execution import BillingExecution, ExecutionStatus, classify_execution
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.recurrence import next_run
from .compute_billing_period import ComputeBillingPeriod
from .compute_charges import compute_charges
from .resolve_tariff import ResolveTariff
from .dtos import BillableSensorDTO, BillingErrorDTO, ExecutionResultDTO

logger = logging.getLogger(__name__)


class ExecuteBilling:
    """
    Use Case: Execute a billing configuration

    Business Rules:
    1. Only existing, active configurations run (no execution record otherwise)
    2. Two runs of the same configuration never overlap
    3. Sensors are billed sequentially and independently; one failure never aborts the run
    4. Invoice creation, reading flags and progress counters commit together per sensor
    5. A reading is invoiced at most once
    6. Unexpected run-level errors finalize the execution as FAILED and are re-raised

    Flow:
    1. Create execution (RUNNING)
    2. Select sensors by status and tariff category
    3. For each sensor: tariff -> period -> readings -> charges -> invoice
    4. Finalize execution status, errors and summary
    5. Advance the configuration (next_run, last_run, totals)
    6. Notify recipients
    """

    def __init__(
        self,
        uow: UnitOfWork,
        config_repo: BillingConfigRepository,
        execution_repo: BillingExecutionRepository,
        sensor_repo: SensorRepository,
        tariff_repo: TariffRepository,
        consumption_repo: WaterConsumptionRepository,
        invoice_repo: InvoiceRepository,
        notification_service: Optional[NotificationService] = None,
        guard: Optional[ExecutionGuard] = None,
        invoice_due_days: int = 15,
        invoice_number_prefix: str = "FAC",
        errors_limit: int = 100,
        summary_errors: int = 10,
    ):
        self.uow = uow
        self.config_repo = config_repo
        self.execution_repo = execution_repo
        self.sensor_repo = sensor_repo
        self.consumption_repo = consumption_repo
        self.invoice_repo = invoice_repo
        self.notification_service = notification_service
        self.guard = guard or ExecutionGuard()
        self.invoice_due_days = invoice_due_days
        self.invoice_number_prefix = invoice_number_prefix
        self.errors_limit = errors_limit
        self.summary_errors = summary_errors

        self.resolve_tariff = ResolveTariff(tariff_repo)
        self.compute_period = ComputeBillingPeriod(invoice_repo, consumption_repo)

    async def execute(self, config_id: str, now: Optional[datetime] = None) -> Result[ExecutionResultDTO]:
        """
        Execute a billing run

        Args:
            config_id: Billing configuration ID
            now: Reference instant for billing periods (naive UTC, default: utcnow)

        Returns:
            Result[ExecutionResultDTO]: Run outcome, INVALID_CONFIG or EXECUTION_IN_PROGRESS

        Raises:
            Exception: Any run-level failure, after the execution is marked FAILED
        """
        async with self.guard.hold(config_id) as acquired:
            if not acquired:
                return Return.err(
                    Error(
                        code="EXECUTION_IN_PROGRESS",
                        message=f"Billing config {config_id} is already executing",
                        reason="Concurrent runs of one configuration are rejected",
                    )
                )
            return await self._execute(config_id, now)

    async def _execute(self, config_id: str, now: Optional[datetime]) -> Result[ExecutionResultDTO]:
        config = await self.config_repo.get_by_id(config_id)

        if config is None or not config.is_active:
            return Return.err(
                Error(
                    code="INVALID_CONFIG",
                    message="Invalid billing configuration",
                    reason=f"Billing config {config_id} does not exist or is inactive",
                )
            )

        # Plain values survive the per-sensor rollbacks that expire ORM state
        config_name = config.name
        billing_cycle = config.billing_cycle
        timezone = config.timezone
        rule = config.recurrence_rule()
        sensor_statuses = list(config.sensor_statuses or [])
        tariff_categories = list(config.tariff_categories or [])
        notify_emails = list(config.notify_emails or [])
        notify_on_success = config.notify_on_success
        notify_on_error = config.notify_on_error

        # Step 1: Create execution record
        execution = await self.execution_repo.create(
            BillingExecution(config_id=config_id, status=ExecutionStatus.RUNNING)
        )
        execution_id = execution.id
        await self.uow.commit()

        logger.info(f"Billing run {execution_id} started for config '{config_name}' ({config_id})")

        errors: List[BillingErrorDTO] = []
        invoice_numbers: List[str] = []
        success_count = 0
        failed_count = 0

        try:
            # Step 2: Select eligible sensors
            sensors = await self.sensor_repo.get_billable(sensor_statuses, tariff_categories)
            targets = [
                BillableSensorDTO(
                    id=sensor.id,
                    meter_number=sensor.meter_number,
                    user_id=sensor.user_id,
                    tariff_category_id=sensor.tariff_category_id,
                )
                for sensor in sensors
            ]
            total_sensors = len(targets)

            execution.total_sensors = total_sensors
            await self.execution_repo.update(execution)
            await self.uow.commit()

            logger.info(f"Billing run {execution_id}: {total_sensors} sensors selected")

            # Step 3: Bill each sensor in its own transaction
            for target in targets:
                try:
                    result = await self._bill_sensor(target, config_name, billing_cycle, timezone, now)
                except Exception as e:
                    logger.exception(f"Unexpected error billing sensor {target.id}")
                    result = Return.err(
                        Error(code="SENSOR_BILLING_FAILED", message=str(e) or type(e).__name__)
                    )

                if result.is_ok():
                    try:
                        await self.uow.commit()
                    except Exception as e:
                        logger.exception(f"Could not commit invoice of sensor {target.id}")
                        result = Return.err(
                            Error(code="SENSOR_BILLING_FAILED", message=str(e) or type(e).__name__)
                        )

                if result.is_ok():
                    success_count += 1
                    invoice_numbers.append(result.value.invoice_number)
                else:
                    await self.uow.rollback()
                    failed_count += 1
                    errors.append(
                        BillingErrorDTO(
                            sensor_id=target.id,
                            meter_number=target.meter_number,
                            error_message=result.error.message,
                        )
                    )
                    logger.warning(
                        f"Billing run {execution_id}: sensor {target.id} "
                        f"({target.meter_number}) skipped: {result.error.code} {result.error.message}"
                    )

                await self.execution_repo.update_progress(
                    execution_id,
                    processed_count=success_count + failed_count,
                    success_count=success_count,
                    failed_count=failed_count,
                )
                await self.uow.commit()

            # Step 4: Finalize execution
            status = classify_execution(success_count, failed_count)
            completed_at = datetime.utcnow()
            stored_errors = [e.model_dump() for e in errors[: self.errors_limit]]
            summary = {
                "execution_id": execution_id,
                "config_id": config_id,
                "config_name": config_name,
                "status": status.value,
                "total_sensors": total_sensors,
                "processed": success_count + failed_count,
                "success": success_count,
                "failed": failed_count,
                "errors": stored_errors[: self.summary_errors],
            }

            execution = await self.execution_repo.get_by_id(execution_id)
            execution.completed_at = completed_at
            execution.status = status
            execution.processed_count = success_count + failed_count
            execution.success_count = success_count
            execution.failed_count = failed_count
            execution.errors = stored_errors or None
            execution.summary = summary
            await self.execution_repo.update(execution)

            # Step 5: Advance the configuration
            upcoming = next_run(rule, now=completed_at)
            config = await self.config_repo.get_by_id(config_id)
            if config is not None:
                config.last_run = completed_at
                config.last_run_status = status
                config.total_invoices = (config.total_invoices or 0) + success_count
                config.next_run = upcoming
                if status == ExecutionStatus.FAILED:
                    config.consecutive_failures = (config.consecutive_failures or 0) + 1
                else:
                    config.consecutive_failures = 0
                await self.config_repo.update(config)

            await self.uow.commit()

        except Exception as e:
            await self.uow.rollback()
            await self._mark_failed(execution_id, success_count, failed_count, e)
            raise

        logger.info(
            f"Billing run {execution_id} complete: {status.value}, "
            f"{success_count}/{total_sensors} invoiced, {failed_count} failed, "
            f"next run {upcoming.isoformat()}"
        )

        # Step 6: Notify
        if (status == ExecutionStatus.SUCCESS and notify_on_success) or (
            status != ExecutionStatus.SUCCESS and notify_on_error
        ):
            await self._notify(notify_emails, summary)

        return Return.ok(
            ExecutionResultDTO(
                execution_id=execution_id,
                config_id=config_id,
                status=status.value,
                total_sensors=total_sensors,
                processed_count=success_count + failed_count,
                success_count=success_count,
                failed_count=failed_count,
                invoice_numbers=invoice_numbers,
                errors=errors,
                next_run=upcoming,
            )
        )

    async def _bill_sensor(
        self,
        sensor: BillableSensorDTO,
        config_name: str,
        billing_cycle,
        timezone: str,
        now: Optional[datetime],
    ) -> Result[Invoice]:
        """Create the invoice of one sensor; writes stay uncommitted"""
        tariff_result = await self.resolve_tariff.execute(sensor.tariff_category_id)
        if tariff_result.is_err():
            return tariff_result
        tariff = tariff_result.value

        period_result = await self.compute_period.execute(sensor, billing_cycle, timezone, now)
        if period_result.is_err():
            return period_result
        period = period_result.value

        readings = await self.consumption_repo.get_uninvoiced_in_period(
            sensor.meter_number, period.period_start, period.period_end
        )
        if not readings:
            return Return.err(
                Error(
                    code="NO_BILLABLE_DATA",
                    message="No consumption in period",
                    reason=f"No un-invoiced readings between {period.period_start.isoformat()} "
                           f"and {period.period_end.isoformat()} (UTC)",
                )
            )

        first_reading = readings[0]
        if first_reading.previous_amount is not None:
            previous_reading = Decimal(first_reading.previous_amount)
        else:
            earlier = await self.consumption_repo.get_last_before(
                sensor.meter_number, period.period_start
            )
            previous_reading = Decimal(earlier.amount) if earlier else Decimal("0")

        current_reading = Decimal(readings[-1].amount)
        consumption_liters = sum(
            (Decimal(r.consumption) for r in readings if r.consumption is not None),
            Decimal("0"),
        )

        charges_result = compute_charges(consumption_liters, tariff)
        if charges_result.is_err():
            return charges_result
        charges = charges_result.value

        invoice_number = await self.invoice_repo.next_invoice_number(self.invoice_number_prefix)

        invoice = await self.invoice_repo.create(
            Invoice(
                invoice_number=invoice_number,
                user_id=sensor.user_id,
                sensor_id=sensor.id,
                tariff_id=tariff.id,
                period_start=period.period_start,
                period_end=period.period_end,
                consumption_amount=charges.consumption_m3,
                water_charge=charges.water_charge,
                sewerage_charge=charges.sewerage_charge,
                fixed_charge=charges.fixed_charge,
                taxes=charges.taxes,
                additional_charges=Decimal("0"),
                discounts=Decimal("0"),
                total_amount=charges.total_amount,
                amount_due=charges.total_amount,
                status=InvoiceStatus.PENDING,
                due_date=datetime.utcnow() + timedelta(days=self.invoice_due_days),
                notes=f"Automatic billing - {config_name}",
                invoice_metadata={
                    "previous_reading": str(previous_reading),
                    "current_reading": str(current_reading),
                    "total_consumption_liters": str(consumption_liters),
                    "period_start_local": period.local_start.isoformat(),
                    "period_end_local": period.local_end.isoformat(),
                },
            )
        )

        reading_ids = [r.id for r in readings]
        updated = await self.consumption_repo.mark_invoiced(reading_ids, invoice.id)
        if updated != len(reading_ids):
            return Return.err(
                Error(
                    code="READINGS_ALREADY_INVOICED",
                    message="Consumption readings were invoiced concurrently",
                    reason=f"Expected to flag {len(reading_ids)} readings, flagged {updated}",
                )
            )

        logger.debug(
            f"Invoice {invoice.invoice_number} created for sensor {sensor.id}: "
            f"{charges.consumption_m3} m3, total {charges.total_amount}"
        )
        return Return.ok(invoice)

    async def _mark_failed(
        self, execution_id: str, success_count: int, failed_count: int, error: Exception
    ) -> None:
        """Force-finalize an execution after a run-level failure"""
        logger.error(f"Billing run {execution_id} failed: {error}")
        try:
            execution = await self.execution_repo.get_by_id(execution_id)
            if execution is None:
                return
            execution.completed_at = datetime.utcnow()
            execution.status = ExecutionStatus.FAILED
            execution.processed_count = success_count + failed_count
            execution.success_count = success_count
            execution.failed_count = failed_count
            execution.errors = [
                BillingErrorDTO(error_message=str(error) or type(error).__name__).model_dump()
            ]
            await self.execution_repo.update(execution)
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Could not mark billing run {execution_id} as failed: {e}")

    async def _notify(self, emails: List[str], summary: dict) -> None:
        if self.notification_service is None:
            return
        try:
            sent = await self.notification_service.send_billing_summary(emails, summary)
            if not sent:
                logger.warning(f"Billing notification for run {summary['execution_id']} was not delivered")
        except Exception as e:
            logger.error(f"Billing notification for run {summary['execution_id']} failed: {e}")
