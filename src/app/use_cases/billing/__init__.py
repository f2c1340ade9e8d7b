"""Billing domain use cases"""
from .resolve_tariff import ResolveTariff
from .compute_billing_period import ComputeBillingPeriod, previous_cycle_end
from .compute_charges import compute_charges
from .execute_billing import ExecuteBilling
from .create_billing_config import CreateBillingConfig
from .update_billing_config import UpdateBillingConfig
from .delete_billing_config import DeleteBillingConfig
from .get_billing_config import GetBillingConfig, ListBillingConfigs
from .list_billing_executions import ListBillingExecutions
from .dtos import (
    BillableSensorDTO,
    BillingPeriodDTO,
    ChargesDTO,
    BillingErrorDTO,
    ExecutionResultDTO,
    BillingConfigCommandDTO,
    BillingConfigResponseDTO,
    BillingExecutionDTO,
    ListExecutionsResponseDTO,
)

__all__ = [
    "ResolveTariff",
    "ComputeBillingPeriod",
    "previous_cycle_end",
    "compute_charges",
    "ExecuteBilling",
    "CreateBillingConfig",
    "UpdateBillingConfig",
    "DeleteBillingConfig",
    "GetBillingConfig",
    "ListBillingConfigs",
    "ListBillingExecutions",
    "BillableSensorDTO",
    "BillingPeriodDTO",
    "ChargesDTO",
    "BillingErrorDTO",
    "ExecutionResultDTO",
    "BillingConfigCommandDTO",
    "BillingConfigResponseDTO",
    "BillingExecutionDTO",
    "ListExecutionsResponseDTO",
]
