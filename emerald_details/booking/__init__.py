from emerald_details.booking.appointment_status import AppointmentTrigger
from emerald_details.booking.state_machine import (
    BookingDraft,
    BookingFlowStateMachine,
    BookingStep,
    BookingTrigger,
)

__all__ = [
    "AppointmentTrigger",
    "BookingDraft",
    "BookingFlowStateMachine",
    "BookingStep",
    "BookingTrigger",
]
