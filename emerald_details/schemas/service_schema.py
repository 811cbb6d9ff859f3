"""Detailing service packages and the default catalog."""

from pydantic import BaseModel, Field

from emerald_details.schemas.vehicle_schema import Vehicle
from emerald_details.utils import new_id


class ServicePackage(BaseModel):
    """A named detailing offering with a base price and duration (minutes)."""
    id: str = Field(default_factory=new_id)
    name: str
    description: str
    base_price: float
    duration: int
    features: list[str] = Field(default_factory=list)
    is_active: bool = True
    sort_order: int = 0

    def price_for_vehicle(self, vehicle: Vehicle) -> float:
        from emerald_details.scheduling.pricing import price

        return price(self, vehicle)

    @property
    def formatted_price(self) -> str:
        return f"${self.base_price:.0f}+"

    @property
    def formatted_duration(self) -> str:
        if self.duration >= 60:
            hours, mins = divmod(self.duration, 60)
            if mins:
                return f"{hours}h {mins}m"
            return f"{hours} hour{'s' if hours > 1 else ''}"
        return f"{self.duration} min"


def default_services() -> list[ServicePackage]:
    """Fresh copies of the catalog seeded on first admin setup."""
    return [
        ServicePackage(
            name="Express Wash",
            description="Quick exterior hand wash and dry",
            base_price=35,
            duration=30,
            features=["Hand wash", "Wheel cleaning", "Tire shine", "Window cleaning"],
            sort_order=1,
        ),
        ServicePackage(
            name="Interior Detail",
            description="Complete interior cleaning and conditioning",
            base_price=75,
            duration=60,
            features=[
                "Vacuum & steam clean", "Dashboard & console detail",
                "Leather conditioning", "Window cleaning", "Air freshener",
            ],
            sort_order=2,
        ),
        ServicePackage(
            name="Exterior Detail",
            description="Full exterior wash, clay bar, and wax",
            base_price=100,
            duration=90,
            features=[
                "Hand wash", "Clay bar treatment", "Polish",
                "Wax application", "Tire & trim dressing",
            ],
            sort_order=3,
        ),
        ServicePackage(
            name="Full Detail",
            description="Complete interior and exterior detailing",
            base_price=150,
            duration=150,
            features=[
                "Everything in Interior Detail", "Everything in Exterior Detail",
                "Engine bay cleaning", "Headlight restoration",
            ],
            sort_order=4,
        ),
        ServicePackage(
            name="Ceramic Coating",
            description="Professional ceramic coating application",
            base_price=300,
            duration=240,
            features=[
                "Full detail included", "Paint correction",
                "Ceramic coating application", "2-year protection",
            ],
            sort_order=5,
        ),
    ]
