import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./billing.db")
    API_PREFIX = data.get("API_PREFIX", "")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_SENTRY = data.get("ENABLE_SENTRY", 0)
    DSN_SENTRY = data.get("DSN_SENTRY", "")
    SENTRY_ENVIRONMENT = data.get("SENTRY_ENVIRONMENT", "dev")

    # Recurring billing scheduler
    BILLING_SCHEDULER_ENABLED = bool(data.get("BILLING_SCHEDULER_ENABLED", True))
    SCHEDULER_MAX_SLEEP_SECONDS = data.get("SCHEDULER_MAX_SLEEP_SECONDS", 3600)
    DEFAULT_TIMEZONE = data.get("DEFAULT_TIMEZONE", "America/Lima")

    # Invoices
    INVOICE_DUE_DAYS = data.get("INVOICE_DUE_DAYS", 15)
    INVOICE_NUMBER_PREFIX = data.get("INVOICE_NUMBER_PREFIX", "FAC")

    # Execution bookkeeping
    EXECUTION_ERRORS_LIMIT = data.get("EXECUTION_ERRORS_LIMIT", 100)  # Errors stored per execution
    EXECUTION_SUMMARY_ERRORS = data.get("EXECUTION_SUMMARY_ERRORS", 10)  # Errors copied into summary

    # Notifications
    BILLING_NOTIFICATION_WEBHOOK = data.get("BILLING_NOTIFICATION_WEBHOOK", None)
