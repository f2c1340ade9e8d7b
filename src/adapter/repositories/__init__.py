from .billing_config_repository import SqlAlchemyBillingConfigRepository
from .billing_execution_repository import SqlAlchemyBillingExecutionRepository
from .sensor_repository import SqlAlchemySensorRepository
from .tariff_repository import SqlAlchemyTariffRepository
from .water_consumption_repository import SqlAlchemyWaterConsumptionRepository
from .invoice_repository import SqlAlchemyInvoiceRepository

__all__ = [
    "SqlAlchemyBillingConfigRepository",
    "SqlAlchemyBillingExecutionRepository",
    "SqlAlchemySensorRepository",
    "SqlAlchemyTariffRepository",
    "SqlAlchemyWaterConsumptionRepository",
    "SqlAlchemyInvoiceRepository",
]
