"""
Daily time slot generation.

Pure functions: given a calendar date, produce the fixed set of bookable
windows (8am, 10am, 12pm, 2pm and 4pm local, two hours each). Range
generation skips Saturdays and Sundays. Nothing here touches the store;
persisting is done by ``TimeSlotRepository.generate_for_range``.

Usage:
    slots = generate_daily_slots(date(2025, 3, 17))
    assert [s.start_time.hour for s in slots] == [8, 10, 12, 14, 16]
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional
from zoneinfo import ZoneInfo

from emerald_details.config import settings
from emerald_details.schemas.slot_schema import TimeSlot
from emerald_details.utils import business_tz, start_of_day

logger = logging.getLogger(__name__)

# date.weekday(): Monday=0 ... Sunday=6
SATURDAY = 5
SUNDAY = 6


def _as_date(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


def is_weekend(day: date) -> bool:
    return _as_date(day).weekday() in (SATURDAY, SUNDAY)


def generate_daily_slots(
    day: date,
    employee_id: Optional[str] = None,
    employee_name: Optional[str] = None,
    tz: Optional[ZoneInfo] = None,
) -> list[TimeSlot]:
    """Build the ordered, all-available slots for a single day."""
    tz = tz or business_tz()
    day = _as_date(day)
    midnight = start_of_day(day, tz)
    length = timedelta(hours=settings.scheduling.slot_length_hours)

    slots = []
    for hour in settings.scheduling.slot_hours:
        start = datetime.combine(day, time(hour=hour), tzinfo=tz)
        slots.append(TimeSlot(
            date=midnight,
            start_time=start,
            end_time=start + length,
            is_available=True,
            assigned_employee_id=employee_id,
            assigned_employee_name=employee_name,
        ))
    return slots


def business_days(start: date, end: date) -> Iterator[date]:
    """Yield every date in ``[start, end]`` inclusive, skipping weekends if configured."""
    current, last = _as_date(start), _as_date(end)
    while current <= last:
        if not (settings.scheduling.skip_weekends and is_weekend(current)):
            yield current
        current += timedelta(days=1)


def generate_slots_for_range(
    start: date,
    end: date,
    employee_id: Optional[str] = None,
    employee_name: Optional[str] = None,
    tz: Optional[ZoneInfo] = None,
) -> list[TimeSlot]:
    """Slots for every business day in ``[start, end]``.

    No deduplication: generating overlapping ranges twice yields two
    independent sets of slots with distinct ids.
    """
    slots: list[TimeSlot] = []
    for day in business_days(start, end):
        slots.extend(generate_daily_slots(day, employee_id, employee_name, tz))
    logger.debug("Generated %d slots for %s..%s", len(slots), start, end)
    return slots
