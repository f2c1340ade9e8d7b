"""Integration tests for billing runs against a real database

Tests cover:
- Invoice creation, numbering and reading flags
- Idempotent re-runs
- Configuration isolation
- Retry policy skips exactly one recurrence
- Execution history kept after configuration deletion
- At most one active tariff per category
"""

import asyncio
import pytest
from datetime import datetime
from decimal import Decimal
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from src.domain.billing_config import BillingConfig
from src.domain.billing_execution import BillingExecution, ExecutionStatus
from src.domain.invoice import Invoice
from src.domain.recurrence import BillingCycle
from src.domain.tariff import Tariff
from src.domain.water_consumption import WaterConsumption

NOW = datetime(2024, 3, 5, 8, 0)


async def add_config(session, **kwargs) -> BillingConfig:
    defaults = dict(
        name="Monthly residential",
        billing_cycle=BillingCycle.MONTHLY,
        billing_day=1,
        billing_hour=6,
        timezone="UTC",
        sensor_statuses=["ACTIVE"],
        notify_emails=["billing@example.com"],
        next_run=datetime(2024, 3, 1, 6, 0),
    )
    defaults.update(kwargs)
    config = BillingConfig(**defaults)
    session.add(config)
    await session.commit()
    return config


async def fetch_all(session_factory, model, *criteria):
    async with session_factory() as session:
        result = await session.execute(select(model).where(*criteria) if criteria else select(model))
        return list(result.scalars().all())


class TestBillingRunIntegration:

    @pytest.mark.asyncio
    async def test_run_creates_invoices(self, db_session, session_factory, scheduler, billing_data):
        """
        Given: Two active sensors, one of them without consumption
        When: the configuration is executed
        Then: one invoice of 58.20 is created and the run is PARTIAL
        """
        # Arrange
        config = await add_config(db_session)

        # Act
        result = await scheduler.trigger(config.id, now=NOW)

        # Assert
        assert result.is_ok()
        response = result.value
        assert response.status == "PARTIAL"
        assert response.total_sensors == 2
        assert response.success_count == 1
        assert response.failed_count == 1
        assert response.invoice_numbers == ["FAC-000001"]
        assert response.errors[0].meter_number == "MED-0002"
        assert response.errors[0].error_message == "Zero consumption"

        invoices = await fetch_all(session_factory, Invoice)
        assert len(invoices) == 1
        invoice = invoices[0]
        assert invoice.invoice_number == "FAC-000001"
        assert invoice.user_id == 101
        assert invoice.total_amount == Decimal("58.20")
        assert invoice.period_start == datetime(2024, 2, 5, 0, 0)
        assert invoice.period_end == datetime(2024, 2, 29, 23, 59, 59, 999999)
        assert invoice.invoice_metadata["previous_reading"] == "100000.000"
        assert invoice.expected_total() == invoice.total_amount

        readings = await fetch_all(session_factory, WaterConsumption, WaterConsumption.serial == "MED-0001")
        assert all(r.invoiced and r.invoice_id == invoice.id for r in readings)

        zero_readings = await fetch_all(session_factory, WaterConsumption, WaterConsumption.serial == "MED-0002")
        assert not zero_readings[0].invoiced

        executions = await fetch_all(session_factory, BillingExecution)
        assert len(executions) == 1
        execution = executions[0]
        assert execution.status == ExecutionStatus.PARTIAL
        assert execution.processed_count == execution.success_count + execution.failed_count == 2
        assert execution.errors[0]["meter_number"] == "MED-0002"
        assert execution.summary["success"] == 1

        configs = await fetch_all(session_factory, BillingConfig, BillingConfig.id == config.id)
        assert configs[0].total_invoices == 1
        assert configs[0].last_run_status == ExecutionStatus.PARTIAL
        assert configs[0].next_run > configs[0].last_run

    @pytest.mark.asyncio
    async def test_rerun_is_idempotent(self, db_session, session_factory, scheduler, billing_data):
        """
        Given: A configuration that already billed February
        When: it is executed again with the same data
        Then: no new invoice is created
        """
        # Arrange
        config = await add_config(db_session)
        await scheduler.trigger(config.id, now=NOW)

        # Act
        result = await scheduler.trigger(config.id, now=NOW)

        # Assert
        assert result.value.success_count == 0
        assert result.value.status == "FAILED"
        invoices = await fetch_all(session_factory, Invoice)
        assert len(invoices) == 1

    @pytest.mark.asyncio
    async def test_next_period_continues_previous_invoice(
        self, db_session, session_factory, scheduler, billing_data
    ):
        # Arrange
        config = await add_config(db_session)
        await scheduler.trigger(config.id, now=NOW)
        db_session.add(
            WaterConsumption(
                serial="MED-0001",
                reading_date=datetime(2024, 3, 10, 10, 0),
                amount=Decimal("130500"),
                previous_amount=Decimal("125500"),
                consumption=Decimal("5000"),
            )
        )
        await db_session.commit()

        # Act
        result = await scheduler.trigger(config.id, now=datetime(2024, 4, 2, 8, 0))

        # Assert
        assert result.value.invoice_numbers == ["FAC-000002"]
        invoices = await fetch_all(session_factory, Invoice, Invoice.invoice_number == "FAC-000002")
        assert invoices[0].period_start == datetime(2024, 3, 1, 0, 0)
        assert invoices[0].period_end == datetime(2024, 3, 31, 23, 59, 59, 999999)

    @pytest.mark.asyncio
    async def test_config_isolation(self, db_session, session_factory, scheduler, billing_data):
        """
        Given: Config A bills ACTIVE sensors, config B bills MAINTENANCE sensors
        When: only config A runs
        Then: B's sensor is untouched and B's next_run is unchanged
        """
        # Arrange
        config_a = await add_config(db_session, name="Active meters")
        config_b = await add_config(
            db_session,
            name="Maintenance meters",
            sensor_statuses=["MAINTENANCE"],
            next_run=datetime(2024, 3, 1, 6, 0),
        )

        # Act
        await scheduler.trigger(config_a.id, now=NOW)

        # Assert
        maintenance = await fetch_all(session_factory, WaterConsumption, WaterConsumption.serial == "MED-0003")
        assert not maintenance[0].invoiced

        configs = await fetch_all(session_factory, BillingConfig, BillingConfig.id == config_b.id)
        assert configs[0].next_run == datetime(2024, 3, 1, 6, 0)
        assert configs[0].last_run is None

        # Act - B bills its own sensor
        result = await scheduler.trigger(config_b.id, now=NOW)

        # Assert
        assert result.value.status == "SUCCESS"
        assert result.value.invoice_numbers == ["FAC-000002"]

    @pytest.mark.asyncio
    async def test_retry_policy_skip_clears_failure_streak(
        self, db_session, session_factory, scheduler, billing_data
    ):
        """
        Given: A configuration whose last run failed, with retry_on_failure off
        When: its timer fires twice
        Then: the first fire is skipped and the second one bills
        """
        # Arrange
        config = await add_config(db_session, consecutive_failures=1, retry_on_failure=False)

        # Act
        await scheduler._fire(config.id)

        # Assert
        assert await fetch_all(session_factory, BillingExecution) == []
        configs = await fetch_all(session_factory, BillingConfig, BillingConfig.id == config.id)
        assert configs[0].consecutive_failures == 0
        assert configs[0].next_run > datetime(2024, 3, 1, 6, 0)

        # Act - next recurrence
        await scheduler._fire(config.id)
        await asyncio.gather(*scheduler._runs)

        # Assert
        executions = await fetch_all(session_factory, BillingExecution)
        assert len(executions) == 1
        assert executions[0].config_id == config.id

    @pytest.mark.asyncio
    async def test_tariff_category_filter(self, db_session, scheduler, billing_data):
        # Arrange
        other_category_id = billing_data["category"].id + 100
        config = await add_config(db_session, tariff_categories=[other_category_id])

        # Act
        result = await scheduler.trigger(config.id, now=NOW)

        # Assert
        assert result.value.total_sensors == 0
        assert result.value.status == "FAILED"

    @pytest.mark.asyncio
    async def test_inactive_config_creates_no_execution(
        self, db_session, session_factory, scheduler, billing_data
    ):
        # Arrange
        config = await add_config(db_session, is_active=False)

        # Act
        result = await scheduler.trigger(config.id, now=NOW)

        # Assert
        assert result.error.code == "INVALID_CONFIG"
        assert await fetch_all(session_factory, BillingExecution) == []

    @pytest.mark.asyncio
    async def test_executions_kept_after_config_deleted(
        self, db_session, session_factory, scheduler, billing_data
    ):
        # Arrange
        config = await add_config(db_session)
        config_id = config.id
        await scheduler.trigger(config_id, now=NOW)

        # Act
        await db_session.delete(config)
        await db_session.commit()

        # Assert
        executions = await fetch_all(session_factory, BillingExecution, BillingExecution.config_id == config_id)
        assert len(executions) == 1

    @pytest.mark.asyncio
    async def test_single_active_tariff_per_category(self, db_session, billing_data):
        """A second active tariff for the same category is rejected by the database"""
        # Arrange
        db_session.add(
            Tariff(
                tariff_category_id=billing_data["category"].id,
                name="Residential 2025",
                water_charge=Decimal("1.60"),
                sewerage_charge=Decimal("0.50"),
                fixed_charge=Decimal("9.00"),
                is_active=True,
            )
        )

        # Act / Assert
        with pytest.raises(IntegrityError):
            await db_session.commit()
