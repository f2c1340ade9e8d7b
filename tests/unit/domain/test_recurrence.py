"""Unit tests for recurrence rules and next-run calculation

Tests cover:
- Cycle construction and billing_day validation
- DAILY / WEEKLY / MONTHLY / QUARTERLY / YEARLY occurrences
- Months lacking the billing day are skipped
- Weekend shift when weekends are excluded
- Timezone conversion to naive UTC, including the repeated DST hour
"""

import pytest
from datetime import datetime
from types import SimpleNamespace

from src.domain.recurrence import (
    BillingCycle,
    Daily,
    Monthly,
    Quarterly,
    RecurrenceRule,
    Weekly,
    Yearly,
    cycle_from,
    next_run,
    shift_weekend,
)


def rule(cycle, hour=0, minute=0, timezone="UTC", include_weekends=True):
    return RecurrenceRule(
        cycle=cycle, hour=hour, minute=minute, timezone=timezone, include_weekends=include_weekends
    )


class TestCycleFrom:
    """Building cycle variants from configuration values"""

    def test_builds_each_variant(self):
        assert cycle_from(BillingCycle.DAILY, 1) == Daily()
        assert cycle_from(BillingCycle.WEEKLY, 0) == Weekly(weekday=0)
        assert cycle_from(BillingCycle.MONTHLY, 15) == Monthly(day=15)
        assert cycle_from(BillingCycle.QUARTERLY, 1) == Quarterly(day=1)
        assert cycle_from(BillingCycle.YEARLY, 31) == Yearly(day=31)

    def test_accepts_string_cycle(self):
        assert cycle_from("MONTHLY", 5) == Monthly(day=5)

    @pytest.mark.parametrize("day", [-1, 7])
    def test_weekly_day_out_of_range(self, day):
        with pytest.raises(ValueError):
            cycle_from(BillingCycle.WEEKLY, day)

    @pytest.mark.parametrize("day", [0, 32])
    def test_monthly_day_out_of_range(self, day):
        with pytest.raises(ValueError):
            cycle_from(BillingCycle.MONTHLY, day)

    def test_rule_from_config(self):
        config = SimpleNamespace(
            billing_cycle=BillingCycle.WEEKLY,
            billing_day=3,
            billing_hour=6,
            billing_minute=30,
            timezone="America/Lima",
            include_weekends=False,
        )

        result = RecurrenceRule.from_config(config)

        assert result == RecurrenceRule(
            cycle=Weekly(weekday=3), hour=6, minute=30, timezone="America/Lima", include_weekends=False
        )


class TestNextRun:
    """Next occurrence strictly after now"""

    def test_daily_later_today(self):
        assert next_run(rule(Daily(), hour=10), now=datetime(2024, 3, 5, 9, 0)) == datetime(2024, 3, 5, 10, 0)

    def test_daily_strictly_after_now(self):
        assert next_run(rule(Daily(), hour=10), now=datetime(2024, 3, 5, 10, 0)) == datetime(2024, 3, 6, 10, 0)

    def test_weekly_monday(self):
        # 2024-09-04 is a Wednesday
        result = next_run(rule(Weekly(weekday=1), hour=8), now=datetime(2024, 9, 4, 12, 0))

        assert result == datetime(2024, 9, 9, 8, 0)
        assert result.weekday() == 0

    def test_weekly_zero_is_sunday(self):
        result = next_run(rule(Weekly(weekday=0)), now=datetime(2024, 9, 4, 12, 0))

        assert result == datetime(2024, 9, 8, 0, 0)
        assert result.weekday() == 6

    def test_weekly_same_day_after_time_moves_a_week(self):
        # 2024-09-09 is a Monday
        result = next_run(rule(Weekly(weekday=1), hour=8), now=datetime(2024, 9, 9, 9, 0))

        assert result == datetime(2024, 9, 16, 8, 0)

    def test_monthly_next_month(self):
        result = next_run(rule(Monthly(day=1), hour=6), now=datetime(2024, 1, 15, 0, 0))

        assert result == datetime(2024, 2, 1, 6, 0)

    def test_monthly_skips_months_without_day(self):
        result = next_run(rule(Monthly(day=31)), now=datetime(2024, 4, 10, 0, 0))

        assert result == datetime(2024, 5, 31, 0, 0)

    def test_monthly_day_29_skips_february_in_common_year(self):
        result = next_run(rule(Monthly(day=29)), now=datetime(2023, 1, 30, 0, 0))

        assert result == datetime(2023, 3, 29, 0, 0)

    def test_quarterly_uses_quarter_start_months(self):
        result = next_run(rule(Quarterly(day=15), hour=8), now=datetime(2024, 5, 20, 0, 0))

        assert result == datetime(2024, 7, 15, 8, 0)

    def test_yearly_fires_in_january(self):
        result = next_run(rule(Yearly(day=1)), now=datetime(2024, 3, 1, 0, 0))

        assert result == datetime(2025, 1, 1, 0, 0)

    def test_always_in_the_future(self):
        now = datetime(2024, 12, 31, 23, 59)
        for cycle in (Daily(), Weekly(weekday=2), Monthly(day=31), Quarterly(day=1), Yearly(day=1)):
            assert next_run(rule(cycle, hour=23, minute=59), now=now) > now


class TestWeekendShift:
    """Excluding weekends moves Saturday +2 days and Sunday +1 day"""

    def test_sunday_moves_to_monday(self):
        # 2024-09-01 is a Sunday
        result = next_run(
            rule(Monthly(day=1), include_weekends=False), now=datetime(2024, 8, 15, 0, 0)
        )

        assert result == datetime(2024, 9, 2, 0, 0)

    def test_saturday_moves_to_monday(self):
        # 2024-06-01 is a Saturday
        result = next_run(
            rule(Monthly(day=1), hour=9, include_weekends=False), now=datetime(2024, 5, 15, 0, 0)
        )

        assert result == datetime(2024, 6, 3, 9, 0)

    def test_weekday_not_shifted(self):
        # 2024-10-01 is a Tuesday
        result = next_run(
            rule(Monthly(day=1), include_weekends=False), now=datetime(2024, 9, 15, 0, 0)
        )

        assert result == datetime(2024, 10, 1, 0, 0)

    def test_weekend_included_keeps_sunday(self):
        result = next_run(rule(Monthly(day=1)), now=datetime(2024, 8, 15, 0, 0))

        assert result == datetime(2024, 9, 1, 0, 0)

    def test_shift_weekend_helper(self):
        assert shift_weekend(datetime(2024, 9, 7, 10, 0)) == datetime(2024, 9, 9, 10, 0)
        assert shift_weekend(datetime(2024, 9, 8, 10, 0)) == datetime(2024, 9, 9, 10, 0)
        assert shift_weekend(datetime(2024, 9, 10, 10, 0)) == datetime(2024, 9, 10, 10, 0)


class TestTimezone:
    """Occurrences are computed in local time and returned as naive UTC"""

    def test_lima_midnight_is_five_utc(self):
        result = next_run(
            rule(Monthly(day=1), timezone="America/Lima"), now=datetime(2024, 1, 15, 0, 0)
        )

        assert result == datetime(2024, 2, 1, 5, 0)
        assert result.tzinfo is None

    def test_local_date_decides_occurrence(self):
        # 2024-02-01 03:00 UTC is still January 31 in Lima
        result = next_run(
            rule(Daily(), hour=23, timezone="America/Lima"), now=datetime(2024, 2, 1, 3, 0)
        )

        assert result == datetime(2024, 2, 1, 4, 0)

    def test_aware_now_is_accepted(self):
        from datetime import timezone

        result = next_run(
            rule(Daily(), hour=10), now=datetime(2024, 3, 5, 9, 0, tzinfo=timezone.utc)
        )

        assert result == datetime(2024, 3, 5, 10, 0)

    def test_repeated_hour_first_pass(self):
        # 2024-11-03 05:30 UTC is 01:30 EDT, before the clocks fall back
        result = next_run(
            rule(Daily(), hour=1, minute=45, timezone="America/New_York"),
            now=datetime(2024, 11, 3, 5, 30),
        )

        assert result == datetime(2024, 11, 3, 5, 45)

    def test_repeated_hour_second_pass_moves_to_next_day(self):
        """
        Given: A daily 01:45 New York schedule
        When: now is 01:30 EST, after the 01:45 EDT firing already happened
        Then: next_run is the following day and never in the past
        """
        now = datetime(2024, 11, 3, 6, 30)

        result = next_run(rule(Daily(), hour=1, minute=45, timezone="America/New_York"), now=now)

        assert result > now
        assert result == datetime(2024, 11, 4, 6, 45)
