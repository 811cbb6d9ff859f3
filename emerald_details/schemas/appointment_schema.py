"""Appointment records with embedded booking snapshots."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from emerald_details.schemas.location_schema import Location
from emerald_details.schemas.service_schema import ServicePackage
from emerald_details.schemas.slot_schema import TimeSlot
from emerald_details.schemas.vehicle_schema import Vehicle
from emerald_details.utils import format_currency, new_id, utcnow


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class Appointment(BaseModel):
    """
    A booked detailing appointment.

    Vehicle, service, slot and location are value copies taken at booking
    time. ``total_price`` is computed once at creation and never recomputed,
    so later catalog price changes do not affect existing bookings.
    """
    id: str = Field(default_factory=new_id)
    customer_id: str
    customer_name: str
    customer_phone: str
    employee_id: Optional[str] = None
    employee_name: Optional[str] = None
    vehicle: Vehicle
    service: ServicePackage
    time_slot: TimeSlot
    location: Location
    status: AppointmentStatus = AppointmentStatus.PENDING
    total_price: float
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_intent_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def formatted_price(self) -> str:
        return format_currency(self.total_price)

    @property
    def is_upcoming(self) -> bool:
        return self.status in (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)

    @property
    def can_be_cancelled(self) -> bool:
        return self.status in (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)
