"""Unit tests for charge calculation

Tests cover:
- Water and sewerage charges rounded half-up to the cent
- Total rounded to the nearest ten cents
- Zero consumption is rejected
"""

import pytest
from decimal import Decimal
from types import SimpleNamespace

from src.app.use_cases.billing.compute_charges import compute_charges, to_decimal


@pytest.fixture
def tariff():
    return SimpleNamespace(
        water_charge=Decimal("1.50"),
        sewerage_charge=Decimal("0.45"),
        fixed_charge=Decimal("8.50"),
    )


class TestComputeCharges:

    def test_reference_example(self, tariff):
        """
        Given: 25,500 liters under water 1.50, sewerage 0.45, fixed 8.50
        When: charges are computed
        Then: 38.25 + 11.48 + 8.50 = 58.23 is billed as 58.20
        """
        # Act
        result = compute_charges(Decimal("25500"), tariff)

        # Assert
        assert result.is_ok()
        charges = result.value
        assert charges.consumption_m3 == Decimal("25.5")
        assert charges.water_charge == Decimal("38.25")
        assert charges.sewerage_charge == Decimal("11.48")
        assert charges.fixed_charge == Decimal("8.50")
        assert charges.taxes == Decimal("0")
        assert charges.total_amount == Decimal("58.20")

    def test_float_rates_do_not_leak_binary_error(self):
        """Tariff values given as floats are converted through their decimal text"""
        tariff = SimpleNamespace(water_charge=1.5, sewerage_charge=0.45, fixed_charge=8.5)

        result = compute_charges(25500, tariff)

        assert result.value.sewerage_charge == Decimal("11.48")
        assert result.value.total_amount == Decimal("58.20")

    def test_zero_consumption_rejected(self, tariff):
        result = compute_charges(Decimal("0"), tariff)

        assert result.is_err()
        assert result.error.code == "ZERO_CONSUMPTION"

    def test_total_invariant(self, tariff):
        """total == round10c(water + sewerage + fixed + taxes)"""
        for liters in ("1", "999", "12345", "100000"):
            charges = compute_charges(Decimal(liters), tariff).value
            raw = charges.water_charge + charges.sewerage_charge + charges.fixed_charge + charges.taxes
            assert abs(charges.total_amount - raw) <= Decimal("0.05")
            assert charges.total_amount == charges.total_amount.quantize(Decimal("0.1"))

    def test_to_decimal(self):
        assert to_decimal(0.45) == Decimal("0.45")
        assert to_decimal(Decimal("1.5")) == Decimal("1.5")
        assert to_decimal("8.50") == Decimal("8.50")
