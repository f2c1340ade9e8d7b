"""Billing recurrence rules

A billing cycle is a closed set of variants. The same occurrence function
drives both the scheduler timers and the stored next_run of a configuration.
"""

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Iterator, Optional, Union
from zoneinfo import ZoneInfo
from dateutil.relativedelta import relativedelta


class BillingCycle(str, Enum):
    """Billing recurrence periods"""
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"


QUARTER_START_MONTHS = (1, 4, 7, 10)


@dataclass(frozen=True)
class Daily:
    pass


@dataclass(frozen=True)
class Weekly:
    weekday: int  # 0 = Sunday ... 6 = Saturday


@dataclass(frozen=True)
class Monthly:
    day: int


@dataclass(frozen=True)
class Quarterly:
    day: int


@dataclass(frozen=True)
class Yearly:
    day: int


Cycle = Union[Daily, Weekly, Monthly, Quarterly, Yearly]


def cycle_from(billing_cycle: BillingCycle, billing_day: int) -> Cycle:
    """Build the cycle variant for a configuration's cycle and day"""
    billing_cycle = BillingCycle(billing_cycle)
    if billing_cycle == BillingCycle.DAILY:
        return Daily()
    if billing_cycle == BillingCycle.WEEKLY:
        if not 0 <= billing_day <= 6:
            raise ValueError(f"Weekly billing day must be 0-6, got {billing_day}")
        return Weekly(weekday=billing_day)
    if not 1 <= billing_day <= 31:
        raise ValueError(f"Billing day must be 1-31, got {billing_day}")
    if billing_cycle == BillingCycle.MONTHLY:
        return Monthly(day=billing_day)
    if billing_cycle == BillingCycle.QUARTERLY:
        return Quarterly(day=billing_day)
    return Yearly(day=billing_day)


@dataclass(frozen=True)
class RecurrenceRule:
    """When a billing configuration fires"""

    cycle: Cycle
    hour: int
    minute: int
    timezone: str = "UTC"
    include_weekends: bool = True

    @classmethod
    def from_config(cls, config) -> "RecurrenceRule":
        return cls(
            cycle=cycle_from(config.billing_cycle, config.billing_day),
            hour=config.billing_hour,
            minute=config.billing_minute,
            timezone=config.timezone,
            include_weekends=config.include_weekends,
        )

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def to_local(moment: datetime, tz: ZoneInfo) -> datetime:
    """Convert a UTC instant (naive values are UTC) to local time in tz"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz)


def to_utc(moment: datetime) -> datetime:
    """Convert an aware datetime to the naive UTC value stored in the database"""
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def _month_days(cycle: Cycle, start: date, months: tuple) -> Iterator[date]:
    cursor = start.replace(day=1)
    while True:
        if cursor.month in months and cycle.day <= monthrange(cursor.year, cursor.month)[1]:
            yield cursor.replace(day=cycle.day)
        cursor += relativedelta(months=1)


def _candidate_dates(cycle: Cycle, start: date) -> Iterator[date]:
    """Dates on or after start on which the cycle fires, in order"""
    if isinstance(cycle, Daily):
        current = start
        while True:
            yield current
            current += timedelta(days=1)
    elif isinstance(cycle, Weekly):
        # date.weekday() counts from Monday
        current = start + timedelta(days=(cycle.weekday - (start.weekday() + 1)) % 7)
        while True:
            yield current
            current += timedelta(days=7)
    elif isinstance(cycle, Monthly):
        yield from _month_days(cycle, start, tuple(range(1, 13)))
    elif isinstance(cycle, Quarterly):
        yield from _month_days(cycle, start, QUARTER_START_MONTHS)
    elif isinstance(cycle, Yearly):
        yield from _month_days(cycle, start, (1,))
    else:
        raise TypeError(f"Unknown billing cycle: {cycle!r}")


def next_occurrence(cycle: Cycle, hour: int, minute: int, after: datetime) -> datetime:
    """
    First firing of the cycle strictly after the given local datetime

    Months lacking the billing day (e.g. day 31 in April) are skipped.

    Args:
        cycle: Cycle variant
        hour: Hour of day (0-23)
        minute: Minute of hour (0-59)
        after: Timezone-aware local datetime

    Returns:
        Timezone-aware local datetime of the next firing
    """
    for candidate in _candidate_dates(cycle, after.date()):
        fire_at = datetime.combine(candidate, time(hour, minute), tzinfo=after.tzinfo)
        # Aware datetimes sharing a tzinfo compare by wall clock and ignore fold
        if fire_at.astimezone(timezone.utc) > after.astimezone(timezone.utc):
            return fire_at
    raise RuntimeError("unreachable")


def shift_weekend(moment: datetime) -> datetime:
    """Move a Saturday or Sunday forward to the following Monday"""
    if moment.weekday() == 5:
        return moment + timedelta(days=2)
    if moment.weekday() == 6:
        return moment + timedelta(days=1)
    return moment


def next_run(rule: RecurrenceRule, now: Optional[datetime] = None) -> datetime:
    """
    Compute the next trigger instant of a rule strictly after now

    Args:
        rule: Recurrence rule of a billing configuration
        now: Current instant (naive values are UTC, default: utcnow)

    Returns:
        Naive UTC datetime of the next run
    """
    now = now or datetime.utcnow()
    local_now = to_local(now, rule.tzinfo)
    fire_at = next_occurrence(rule.cycle, rule.hour, rule.minute, local_now)
    if not rule.include_weekends:
        fire_at = shift_weekend(fire_at)
    return to_utc(fire_at)
