"""Unit tests for BillingConfigRequestSchema validation"""

import pytest
from pydantic import ValidationError

from src.api.schemas.billing_config_request import BillingConfigRequestSchema


def payload(**overrides):
    data = {
        "name": "Monthly residential",
        "billing_cycle": "MONTHLY",
        "billing_day": 1,
        "timezone": "America/Lima",
        "notify_emails": ["billing@example.com"],
    }
    data.update(overrides)
    return data


class TestBillingConfigRequestSchema:

    def test_valid_request(self):
        schema = BillingConfigRequestSchema(**payload())

        assert schema.notify_emails == ["billing@example.com"]
        assert schema.sensor_statuses == ["ACTIVE"]

    @pytest.mark.parametrize("email", [
        "not-an-email",
        "john..doe@example.com",
        ".john@example.com",
        "billing@",
    ])
    def test_rejects_malformed_email(self, email):
        with pytest.raises(ValidationError):
            BillingConfigRequestSchema(**payload(notify_emails=["ops@example.com", email]))

    def test_weekly_day_range(self):
        BillingConfigRequestSchema(**payload(billing_cycle="WEEKLY", billing_day=0))

        with pytest.raises(ValidationError):
            BillingConfigRequestSchema(**payload(billing_cycle="WEEKLY", billing_day=7))

    def test_unknown_timezone(self):
        with pytest.raises(ValidationError):
            BillingConfigRequestSchema(**payload(timezone="Mars/Olympus"))
