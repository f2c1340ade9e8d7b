from .base import BaseModel, generate_uuid
from .recurrence import BillingCycle, RecurrenceRule, next_run
from .billing_execution import BillingExecution, ExecutionStatus, classify_execution
from .billing_config import BillingConfig
from .sensor import Sensor, SensorStatus
from .tariff import Tariff, TariffCategory
from .water_consumption import WaterConsumption
from .invoice import Invoice, InvoiceStatus, InvoiceSequence

__all__ = [
    "BaseModel",
    "generate_uuid",
    "BillingCycle",
    "RecurrenceRule",
    "next_run",
    "BillingExecution",
    "ExecutionStatus",
    "classify_execution",
    "BillingConfig",
    "Sensor",
    "SensorStatus",
    "Tariff",
    "TariffCategory",
    "WaterConsumption",
    "Invoice",
    "InvoiceStatus",
    "InvoiceSequence",
]
