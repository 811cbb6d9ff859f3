"""Customer vehicle records and size categories."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from emerald_details.utils import new_id


class VehicleSize(str, Enum):
    """Size category; each carries a fixed price multiplier."""
    COMPACT = "compact"
    SEDAN = "sedan"
    SUV = "suv"
    TRUCK = "truck"
    VAN = "van"
    LUXURY = "luxury"

    @property
    def price_multiplier(self) -> float:
        from emerald_details.scheduling.pricing import multiplier

        return multiplier(self)

    @property
    def label(self) -> str:
        return "SUV" if self is VehicleSize.SUV else self.value.title()


class Vehicle(BaseModel):
    """A customer's vehicle. Embedded by value into appointments."""
    id: str = Field(default_factory=new_id)
    make: str
    model: str
    year: int
    color: str
    license_plate: Optional[str] = None
    size: VehicleSize
    notes: Optional[str] = None

    @property
    def display_name(self) -> str:
        return f"{self.year} {self.make} {self.model}"
