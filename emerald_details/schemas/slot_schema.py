"""Bookable time windows."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from emerald_details.utils import new_id


class TimeSlot(BaseModel):
    """A fixed-duration bookable window on a given date.

    ``date`` is the local start of day, used for day-range queries.
    """
    id: str = Field(default_factory=new_id)
    date: datetime
    start_time: datetime
    end_time: datetime
    is_available: bool = True
    assigned_employee_id: Optional[str] = None
    assigned_employee_name: Optional[str] = None

    @property
    def formatted_time_range(self) -> str:
        return f"{_short_time(self.start_time)} - {_short_time(self.end_time)}"

    @property
    def formatted_date(self) -> str:
        return self.date.strftime("%b %d, %Y")


def _short_time(value: datetime) -> str:
    return value.strftime("%I:%M %p").lstrip("0")
