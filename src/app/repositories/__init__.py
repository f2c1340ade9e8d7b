from .billing_config_repository import BillingConfigRepository
from .billing_execution_repository import BillingExecutionRepository
from .sensor_repository import SensorRepository
from .tariff_repository import TariffRepository
from .water_consumption_repository import WaterConsumptionRepository
from .invoice_repository import InvoiceRepository

__all__ = [
    "BillingConfigRepository",
    "BillingExecutionRepository",
    "SensorRepository",
    "TariffRepository",
    "WaterConsumptionRepository",
    "InvoiceRepository",
]
