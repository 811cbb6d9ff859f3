from emerald_details.schemas.appointment_schema import (
    Appointment,
    AppointmentStatus,
    PaymentStatus,
)
from emerald_details.schemas.location_schema import Location
from emerald_details.schemas.message_schema import Conversation, Message
from emerald_details.schemas.payment_schema import PaymentMethod, PaymentMethodType, Transaction
from emerald_details.schemas.service_schema import ServicePackage, default_services
from emerald_details.schemas.slot_schema import TimeSlot
from emerald_details.schemas.user_schema import User, UserRole
from emerald_details.schemas.vehicle_schema import Vehicle, VehicleSize

__all__ = [
    "Appointment", "AppointmentStatus", "PaymentStatus",
    "Location", "Conversation", "Message",
    "PaymentMethod", "PaymentMethodType", "Transaction",
    "ServicePackage", "default_services", "TimeSlot",
    "User", "UserRole", "Vehicle", "VehicleSize",
]
