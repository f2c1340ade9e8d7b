import logging
from contextlib import asynccontextmanager
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from src.api.error import ClientError, client_error_handler
from src.api.routes import billing_configs
from src.worker.billing_scheduler import BillingSchedulerService

logger = logging.getLogger(__name__)


def create_app(config, scheduler: BillingSchedulerService = None) -> FastAPI:
    """
    Build the billing API

    The recurrence scheduler is owned by the application: armed on startup,
    stopped on shutdown.

    Args:
        config: ApplicationConfig-like settings object
        scheduler: Scheduler to use (default: one bound to the application database)
    """
    if config.ENABLE_SENTRY and config.DSN_SENTRY:
        sentry_sdk.init(dsn=config.DSN_SENTRY, environment=config.SENTRY_ENVIRONMENT)

    if scheduler is None:
        from src.depends import AsyncSessionLocal

        scheduler = BillingSchedulerService(AsyncSessionLocal)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if config.BILLING_SCHEDULER_ENABLED:
            await app.state.scheduler.init()
        else:
            logger.info("Billing scheduler is disabled")
        try:
            yield
        finally:
            await app.state.scheduler.stop()

    app = FastAPI(title="Water Billing Service", lifespan=lifespan)
    app.state.scheduler = scheduler

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=config.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ClientError, client_error_handler)

    app.include_router(billing_configs.router, prefix=config.API_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app
