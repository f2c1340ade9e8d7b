"""Unit tests for ResolveTariff use case"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.billing.resolve_tariff import ResolveTariff
from src.domain.tariff import Tariff


@pytest.fixture
def mock_tariff_repo():
    return MagicMock()


@pytest.mark.asyncio
class TestResolveTariff:

    async def test_returns_active_tariff(self, mock_tariff_repo):
        """
        Given: Category 2 has an active tariff
        When: the tariff is resolved
        Then: that tariff is returned
        """
        # Arrange
        tariff = Tariff(
            id=7,
            tariff_category_id=2,
            name="Residential 2024",
            water_charge=Decimal("1.50"),
            sewerage_charge=Decimal("0.45"),
            fixed_charge=Decimal("8.50"),
        )
        mock_tariff_repo.get_active_for_category = AsyncMock(return_value=tariff)

        # Act
        result = await ResolveTariff(mock_tariff_repo).execute(2)

        # Assert
        assert result.is_ok()
        assert result.value.id == 7
        mock_tariff_repo.get_active_for_category.assert_called_once_with(2)

    async def test_no_active_tariff(self, mock_tariff_repo):
        # Arrange
        mock_tariff_repo.get_active_for_category = AsyncMock(return_value=None)

        # Act
        result = await ResolveTariff(mock_tariff_repo).execute(3)

        # Assert
        assert result.is_err()
        assert result.error.code == "NO_ACTIVE_TARIFF"
        assert "3" in result.error.reason
