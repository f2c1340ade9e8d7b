"""Recurring Billing Scheduler

Keeps one timer task per active billing configuration and fires the
billing executor when each configuration comes due. Runs inside the API
process (FastAPI lifespan) or standalone.
"""

import argparse
import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Set
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from libs.result import Result
from src.adapter.repositories.billing_config_repository import SqlAlchemyBillingConfigRepository
from src.adapter.repositories.billing_execution_repository import SqlAlchemyBillingExecutionRepository
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.repositories.sensor_repository import SqlAlchemySensorRepository
from src.adapter.repositories.tariff_repository import SqlAlchemyTariffRepository
from src.adapter.repositories.water_consumption_repository import SqlAlchemyWaterConsumptionRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.adapter.services.notification_service import create_notification_service
from src.app.services.execution_guard import ExecutionGuard
from src.app.services.notification_service import NotificationService
from src.app.use_cases.billing import ExecuteBilling, ExecutionResultDTO
from src.domain.billing_config import BillingConfig
from src.domain.recurrence import next_run

logger = logging.getLogger(__name__)


class BillingSchedulerService:
    """
    Recurrence scheduler for billing configurations

    Features:
    - One asyncio task per active configuration, keyed by config id
    - Sleeps in bounded slices so clock changes and long gaps are tolerated
    - Scheduled runs are detached; a slow run never delays other configurations
    - Retry policy: a failure streak past the policy skips one recurrence
    - Manual triggers share the single-flight guard and ignore the retry policy

    Usage:
        scheduler = BillingSchedulerService(AsyncSessionLocal)
        await scheduler.init()
        ...
        await scheduler.reload(config_id)  # after an edit
        await scheduler.stop()
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        notification_service: Optional[NotificationService] = None,
        guard: Optional[ExecutionGuard] = None,
        max_sleep_seconds: Optional[float] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the scheduler

        Args:
            session_factory: Factory of async sessions (one per run)
            notification_service: Billing summary notifier (defaults to config webhook)
            guard: Single-flight guard shared with manual triggers
            max_sleep_seconds: Longest single sleep (defaults to ApplicationConfig)
            clock: Returns the current naive UTC time (default: datetime.utcnow)
        """
        self.session_factory = session_factory
        self.notification_service = notification_service or create_notification_service(
            ApplicationConfig.BILLING_NOTIFICATION_WEBHOOK
        )
        self.guard = guard or ExecutionGuard()
        self.max_sleep_seconds = max_sleep_seconds or ApplicationConfig.SCHEDULER_MAX_SLEEP_SECONDS
        self.clock = clock or datetime.utcnow

        self._jobs: Dict[str, asyncio.Task] = {}
        self._next_invocations: Dict[str, datetime] = {}
        self._runs: Set[asyncio.Task] = set()
        self._stopped = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def init(self) -> int:
        """
        Arm a timer for every active configuration

        Returns:
            Number of configurations scheduled
        """
        self._stopped = False
        configs = await self._load_active_configs()
        for config in configs:
            self.schedule_job(config.id)
        logger.info(f"Billing scheduler started with {len(configs)} active configurations")
        return len(configs)

    async def reload(self, config_id: Optional[str] = None) -> None:
        """
        Re-derive timers after configuration changes

        Args:
            config_id: Configuration to reload (None resyncs every configuration)
        """
        if config_id is None:
            for job_id in list(self._jobs):
                self._cancel_job(job_id)
            await self.init()
            return

        self._cancel_job(config_id)
        config = await self._load_config(config_id)
        if config is None or not config.is_active:
            logger.info(f"Billing config {config_id} unscheduled")
            return
        self.schedule_job(config_id)

    async def stop(self) -> None:
        """Cancel every timer and wait for in-flight runs to finish"""
        self._stopped = True
        for job_id in list(self._jobs):
            self._cancel_job(job_id)

        if self._runs:
            logger.info(f"Waiting for {len(self._runs)} billing runs to finish")
            await asyncio.gather(*self._runs, return_exceptions=True)

        logger.info("Billing scheduler stopped")

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def schedule_job(self, config_id: str) -> asyncio.Task:
        self._cancel_job(config_id)
        task = asyncio.create_task(self._run_job(config_id), name=f"billing-timer-{config_id}")
        self._jobs[config_id] = task
        return task

    def scheduled_config_ids(self) -> List[str]:
        return list(self._jobs)

    def next_invocation(self, config_id: str) -> Optional[datetime]:
        """Next armed firing of a configuration (naive UTC), None when unscheduled"""
        if config_id not in self._jobs:
            return None
        return self._next_invocations.get(config_id)

    def _cancel_job(self, config_id: str) -> None:
        task = self._jobs.pop(config_id, None)
        self._next_invocations.pop(config_id, None)
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _run_job(self, config_id: str) -> None:
        last_fire: Optional[datetime] = None

        while not self._stopped:
            try:
                config = await self._load_config(config_id)
            except Exception as e:
                logger.error(f"Could not load billing config {config_id}: {e}")
                await asyncio.sleep(min(60, self.max_sleep_seconds))
                continue

            if config is None or not config.is_active:
                logger.info(f"Billing config {config_id} is gone or inactive, timer removed")
                if self._jobs.get(config_id) is asyncio.current_task():
                    self._jobs.pop(config_id, None)
                    self._next_invocations.pop(config_id, None)
                return

            now = self.clock()
            if last_fire is not None and last_fire > now:
                now = last_fire
            fire_at = next_run(config.recurrence_rule(), now=now)
            self._next_invocations[config_id] = fire_at
            logger.info(f"Billing config '{config.name}' ({config_id}) armed for {fire_at.isoformat()} UTC")

            while True:
                remaining = (fire_at - self.clock()).total_seconds()
                if remaining <= 0:
                    break
                await asyncio.sleep(min(remaining, self.max_sleep_seconds))

            last_fire = fire_at
            try:
                await self._fire(config_id)
            except Exception as e:
                logger.error(f"Billing config {config_id} could not be fired: {e}")

    async def _fire(self, config_id: str) -> None:
        """Start a scheduled run, honoring the retry policy"""
        config = await self._load_config(config_id)
        if config is None or not config.is_active:
            return

        if config.retries_exhausted():
            logger.warning(
                f"Billing config {config_id} skipped: {config.consecutive_failures} consecutive "
                f"failures (retry_on_failure={config.retry_on_failure}, max_retries={config.max_retries})"
            )
            skipped = await self._skip_recurrence(config_id)
            if skipped is not None and skipped.notify_on_error:
                await self._notify_skip(skipped, config.consecutive_failures)
            return

        run = asyncio.create_task(self._scheduled_run(config_id), name=f"billing-run-{config_id}")
        self._runs.add(run)
        run.add_done_callback(self._runs.discard)

    async def _scheduled_run(self, config_id: str) -> None:
        try:
            result = await self.execute(config_id)
        except Exception as e:
            logger.error(f"Scheduled billing run for config {config_id} failed: {e}")
            return

        if result.is_err():
            logger.warning(f"Scheduled billing run for config {config_id} not started: {result.error.message}")

    # ------------------------------------------------------------------
    # Runs
    # ------------------------------------------------------------------

    async def trigger(self, config_id: str, now: Optional[datetime] = None) -> Result[ExecutionResultDTO]:
        """
        Run a configuration immediately

        Ignores the retry policy. Run-level failures are re-raised.

        Args:
            config_id: Configuration to run
            now: Reference instant for billing periods (default: clock)

        Returns:
            Result[ExecutionResultDTO]: Run outcome or executor error
        """
        logger.info(f"Manual billing run requested for config {config_id}")
        result = await self.execute(config_id, now=now)

        # Keep the timer in step with the next_run written by the run
        if result.is_ok() and config_id in self._jobs and not self._stopped:
            self.schedule_job(config_id)

        return result

    async def execute(self, config_id: str, now: Optional[datetime] = None) -> Result[ExecutionResultDTO]:
        async with self.session_factory() as session:
            use_case = ExecuteBilling(
                uow=SqlAlchemyUnitOfWork(session),
                config_repo=SqlAlchemyBillingConfigRepository(session),
                execution_repo=SqlAlchemyBillingExecutionRepository(session),
                sensor_repo=SqlAlchemySensorRepository(session),
                tariff_repo=SqlAlchemyTariffRepository(session),
                consumption_repo=SqlAlchemyWaterConsumptionRepository(session),
                invoice_repo=SqlAlchemyInvoiceRepository(session),
                notification_service=self.notification_service,
                guard=self.guard,
                invoice_due_days=ApplicationConfig.INVOICE_DUE_DAYS,
                invoice_number_prefix=ApplicationConfig.INVOICE_NUMBER_PREFIX,
                errors_limit=ApplicationConfig.EXECUTION_ERRORS_LIMIT,
                summary_errors=ApplicationConfig.EXECUTION_SUMMARY_ERRORS,
            )
            return await use_case.execute(config_id, now=now or self.clock())

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------

    async def _load_config(self, config_id: str) -> Optional[BillingConfig]:
        async with self.session_factory() as session:
            return await SqlAlchemyBillingConfigRepository(session).get_by_id(config_id)

    async def _load_active_configs(self) -> List[BillingConfig]:
        async with self.session_factory() as session:
            return await SqlAlchemyBillingConfigRepository(session).list_active()

    async def _skip_recurrence(self, config_id: str) -> Optional[BillingConfig]:
        """
        Pass over one recurrence of a configuration held back by its retry policy

        Advances next_run and clears the failure streak, so the following
        recurrence runs again.
        """
        async with self.session_factory() as session:
            repo = SqlAlchemyBillingConfigRepository(session)
            config = await repo.get_by_id(config_id)
            if config is None:
                return None
            config.next_run = next_run(config.recurrence_rule(), now=self.clock())
            config.consecutive_failures = 0
            config = await repo.update(config)
            await SqlAlchemyUnitOfWork(session).commit()
            return config

    async def _notify_skip(self, config: BillingConfig, consecutive_failures: int) -> None:
        summary = {
            "execution_id": None,
            "config_id": config.id,
            "config_name": config.name,
            "status": "SKIPPED",
            "total_sensors": 0,
            "processed": 0,
            "success": 0,
            "failed": 0,
            "errors": [],
            "consecutive_failures": consecutive_failures,
            "next_run": config.next_run.isoformat() if config.next_run else None,
        }
        try:
            sent = await self.notification_service.send_billing_summary(
                list(config.notify_emails or []), summary
            )
            if not sent:
                logger.warning(f"Skip notification for billing config {config.id} was not delivered")
        except Exception as e:
            logger.error(f"Skip notification for billing config {config.id} failed: {e}")


async def main():
    """
    Entry point for running the scheduler as a standalone process

    Usage:
        python -m src.worker.billing_scheduler
        python -m src.worker.billing_scheduler --config-id <uuid>
    """
    parser = argparse.ArgumentParser(description="Recurring water billing scheduler")
    parser.add_argument(
        "--config-id",
        default=None,
        help="Run this billing configuration once and exit",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, str(ApplicationConfig.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)
    session_factory = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    scheduler = BillingSchedulerService(session_factory)

    try:
        if args.config_id:
            result = await scheduler.trigger(args.config_id)
            if result.is_err():
                print(f"Billing run not started: {result.error.code} {result.error.message}")
            else:
                response = result.value
                print(
                    f"Billing run {response.execution_id}: {response.status}, "
                    f"{response.success_count} invoiced, {response.failed_count} failed"
                )
        else:
            await scheduler.init()
            await asyncio.Event().wait()
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Received shutdown signal")
    finally:
        await scheduler.stop()
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
