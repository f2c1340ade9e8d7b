"""Background workers for billing service"""
from .billing_scheduler import BillingSchedulerService

__all__ = ["BillingSchedulerService"]
