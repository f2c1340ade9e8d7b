"""Charge calculation

Water and sewerage charges are rounded to the cent; the invoice total is
rounded to the nearest ten cents (cash denomination).
"""

from decimal import Decimal
from libs.result import Result, Return, Error
from src.domain.invoice import round2, round10c
from .dtos import ChargesDTO

LITERS_PER_M3 = Decimal("1000")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def compute_charges(consumption_liters, tariff) -> Result[ChargesDTO]:
    """
    Compute invoice charges for a consumption volume

    Args:
        consumption_liters: Consumed volume in liters
        tariff: Tariff with water_charge, sewerage_charge (per m3) and fixed_charge

    Returns:
        Result[ChargesDTO]: Charges, or ZERO_CONSUMPTION when nothing was used
    """
    consumption_m3 = to_decimal(consumption_liters) / LITERS_PER_M3

    if consumption_m3 == 0:
        return Return.err(
            Error(
                code="ZERO_CONSUMPTION",
                message="Zero consumption",
                reason="Readings in the billing period add up to 0 liters",
            )
        )

    water_charge = round2(consumption_m3 * to_decimal(tariff.water_charge))
    sewerage_charge = round2(consumption_m3 * to_decimal(tariff.sewerage_charge))
    fixed_charge = to_decimal(tariff.fixed_charge)
    taxes = Decimal("0")

    total_amount = round10c(water_charge + sewerage_charge + fixed_charge + taxes)

    return Return.ok(
        ChargesDTO(
            consumption_m3=consumption_m3,
            water_charge=water_charge,
            sewerage_charge=sewerage_charge,
            fixed_charge=fixed_charge,
            taxes=taxes,
            total_amount=total_amount,
        )
    )
