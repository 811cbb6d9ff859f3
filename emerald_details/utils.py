"""Shared utilities used across the booking core."""

import re
import uuid
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from emerald_details.config import WEEKDAY_NAMES, settings


def new_id() -> str:
    """Return a fresh document id."""
    return uuid.uuid4().hex


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("(312) 555-0199")
        '3125550199'
        >>> normalize_phone("+1 312 555 0199")
        '+13125550199'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def format_currency(amount: float) -> str:
    """Display formatting only; stored prices are never rounded."""
    return f"${amount:,.2f}"


def business_tz() -> ZoneInfo:
    return ZoneInfo(settings.business.timezone)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def local_now(tz: Optional[ZoneInfo] = None) -> datetime:
    return datetime.now(tz or business_tz())


def as_local(moment: datetime, tz: Optional[ZoneInfo] = None) -> datetime:
    """Express ``moment`` in the business timezone. Naive values are taken as local."""
    tz = tz or business_tz()
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def start_of_day(day: date, tz: Optional[ZoneInfo] = None) -> datetime:
    """Midnight of ``day`` in the business timezone."""
    if isinstance(day, datetime):
        if day.tzinfo is not None:
            tz = tz or day.tzinfo
            day = day.astimezone(tz).date()
        else:
            day = day.date()
    return datetime.combine(day, time.min, tzinfo=tz or business_tz())


def day_bounds(day: date, tz: Optional[ZoneInfo] = None) -> tuple[datetime, datetime]:
    """Return ``[start_of_day, start_of_next_day)`` for a calendar date."""
    start = start_of_day(day, tz)
    return start, start + timedelta(days=1)


def start_of_month(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def start_of_week(now: datetime, week_starts_on: Optional[str] = None) -> datetime:
    """Midnight of the first day of ``now``'s week.

    The first weekday follows the configured locale convention
    (Sunday for US calendars).
    """
    first = WEEKDAY_NAMES.index((week_starts_on or settings.business.week_starts_on).lower())
    offset = (now.weekday() - first) % 7
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight - timedelta(days=offset)
