"""
Customer booking wizard.

One ``BookingWizard`` per customer booking session. It owns the
``BookingDraft`` and the step state machine, loads catalog and slot data
from the repositories, resolves the service address through the geocoder
and finally turns the draft into a persisted appointment.

Confirmation claims the time slot before the appointment is written:

    1. compare-and-set the slot's ``is_available`` from true to false
    2. create the appointment (pending, price computed once)
    3. if step 2 fails, release the slot again

A lost claim sends the wizard back to date/time selection with the stale
slot cleared.
"""

from datetime import date
from typing import Any, Optional

from emerald_details.booking.state_machine import (
    BookingDraft,
    BookingFlowStateMachine,
    BookingStep,
    BookingTrigger,
)
from emerald_details.errors import (
    EmeraldError,
    InvalidTransitionError,
    NotFoundError,
    SlotUnavailableError,
    ValidationError,
)
from emerald_details.integrations.geocoding import Geocoder
from emerald_details.logging_context import get_session_logger, set_session_id
from emerald_details.repositories.appointments import AppointmentRepository
from emerald_details.repositories.services import ServicePackageRepository
from emerald_details.repositories.time_slots import TimeSlotRepository
from emerald_details.repositories.users import UserRepository
from emerald_details.results import OperationResult
from emerald_details.scheduling.pricing import price
from emerald_details.schemas.appointment_schema import (
    Appointment,
    AppointmentStatus,
    PaymentStatus,
)
from emerald_details.schemas.location_schema import Location
from emerald_details.schemas.service_schema import ServicePackage
from emerald_details.schemas.slot_schema import TimeSlot
from emerald_details.schemas.user_schema import User
from emerald_details.schemas.vehicle_schema import Vehicle
from emerald_details.utils import format_currency

logger = get_session_logger(__name__)


class BookingWizard:
    """Drives one customer through service, vehicle, slot, location and review."""

    def __init__(
        self,
        customer: User,
        services: ServicePackageRepository,
        slots: TimeSlotRepository,
        appointments: AppointmentRepository,
        users: UserRepository,
        geocoder: Optional[Geocoder] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.customer = customer
        self._services = services
        self._slots = slots
        self._appointments = appointments
        self._users = users
        self._geocoder = geocoder
        self.session_id = set_session_id(session_id)
        self.draft = BookingDraft()
        self.state_machine = BookingFlowStateMachine(self.draft)

    @property
    def current_step(self) -> BookingStep:
        return self.state_machine.current_step

    # ------------------------------------------------------------------ #
    # Step 1: service
    # ------------------------------------------------------------------ #

    async def load_services(self) -> list[ServicePackage]:
        self.draft.available_services = await self._services.active()
        logger.info("Loaded %d active services", len(self.draft.available_services))
        return self.draft.available_services

    def select_service(self, service_id: str) -> ServicePackage:
        for service in self.draft.available_services:
            if service.id == service_id:
                self.draft.service = service
                return service
        raise ValidationError(f"Service {service_id} is not available for booking")

    # ------------------------------------------------------------------ #
    # Step 2: vehicle
    # ------------------------------------------------------------------ #

    def saved_vehicles(self) -> list[Vehicle]:
        return list(self.customer.vehicles or [])

    def select_vehicle(self, vehicle_id: str) -> Vehicle:
        vehicle = self.customer.find_vehicle(vehicle_id)
        if vehicle is None:
            raise ValidationError(f"Vehicle {vehicle_id} is not on this profile")
        self.draft.vehicle = vehicle
        return vehicle

    async def add_vehicle(self, vehicle: Vehicle) -> OperationResult[Vehicle]:
        """Save a new vehicle to the customer's profile and select it."""
        try:
            self.customer = await self._users.add_vehicle(self.customer.auth_uid, vehicle)
        except EmeraldError as e:
            logger.warning("Could not save vehicle: %s", e)
            return OperationResult.fail(e)
        self.draft.vehicle = vehicle
        return OperationResult.ok(vehicle)

    # ------------------------------------------------------------------ #
    # Step 3: date and time
    # ------------------------------------------------------------------ #

    async def choose_date(self, day: date) -> list[TimeSlot]:
        """Load the available slots for ``day``. Clears any previously chosen slot."""
        self.draft.selected_date = day
        self.draft.time_slot = None
        self.draft.available_slots = await self._slots.available_for_day(day)
        logger.info("%d slots available on %s", len(self.draft.available_slots), day)
        return self.draft.available_slots

    def select_slot(self, slot_id: str) -> TimeSlot:
        for slot in self.draft.available_slots:
            if slot.id == slot_id:
                self.draft.time_slot = slot
                return slot
        raise ValidationError(f"Time slot {slot_id} is not available on the chosen date")

    # ------------------------------------------------------------------ #
    # Step 4: location
    # ------------------------------------------------------------------ #

    async def resolve_address(self, address: str) -> OperationResult[Location]:
        """Geocode a typed address and select it as the service location."""
        if self._geocoder is None:
            return OperationResult.fail(ValidationError("Address lookup is not configured"))
        try:
            location = await self._geocoder.geocode(address)
        except EmeraldError as e:
            return OperationResult.fail(e)
        if location is None:
            return OperationResult.fail(ValidationError(f"Could not find '{address}'"))
        self.draft.location = location
        return OperationResult.ok(location)

    async def search_places(
        self, query: str, near: Optional[tuple[float, float]] = None
    ) -> list[Location]:
        if self._geocoder is None:
            return []
        return await self._geocoder.search(query, near=near)

    def select_location(self, location: Location) -> None:
        self.draft.location = location

    # ------------------------------------------------------------------ #
    # Step 5: review
    # ------------------------------------------------------------------ #

    def set_notes(self, notes: str) -> None:
        self.draft.notes = notes.strip()

    @property
    def total_price(self) -> Optional[float]:
        if self.draft.service is None or self.draft.vehicle is None:
            return None
        return price(self.draft.service, self.draft.vehicle)

    def review_summary(self) -> dict[str, Any]:
        d = self.draft
        total = self.total_price
        return {
            "service": d.service.name if d.service else None,
            "vehicle": d.vehicle.display_name if d.vehicle else None,
            "date": d.time_slot.formatted_date if d.time_slot else None,
            "time": d.time_slot.formatted_time_range if d.time_slot else None,
            "location": d.location.full_address if d.location else None,
            "notes": d.notes or None,
            "total": format_currency(total) if total is not None else None,
        }

    # ------------------------------------------------------------------ #
    # Navigation
    # ------------------------------------------------------------------ #

    def next(self) -> BookingStep:
        return self.state_machine.transition(BookingTrigger.NEXT)

    def back(self) -> BookingStep:
        return self.state_machine.transition(BookingTrigger.BACK)

    def reset(self) -> BookingStep:
        """Abandon the flow. Nothing was persisted, so the draft is simply cleared."""
        self.draft.clear()
        logger.info("Booking flow reset")
        return self.state_machine.transition(BookingTrigger.RESET)

    # ------------------------------------------------------------------ #
    # Confirmation
    # ------------------------------------------------------------------ #

    def _build_appointment(self, slot: TimeSlot) -> Appointment:
        d = self.draft
        return Appointment(
            customer_id=self.customer.auth_uid,
            customer_name=self.customer.name,
            customer_phone=self.customer.phone,
            employee_id=slot.assigned_employee_id,
            employee_name=slot.assigned_employee_name,
            vehicle=d.vehicle,
            service=d.service,
            time_slot=slot.model_copy(update={"is_available": False}),
            location=d.location,
            status=AppointmentStatus.PENDING,
            total_price=price(d.service, d.vehicle),
            payment_status=PaymentStatus.PENDING,
            notes=d.notes or None,
        )

    def _missing_selections(self) -> list[str]:
        d = self.draft
        fields = {
            "service": d.service,
            "vehicle": d.vehicle,
            "time slot": d.time_slot,
            "location": d.location,
        }
        return [name for name, value in fields.items() if value is None]

    def _slot_lost(self, slot: TimeSlot) -> None:
        self.draft.time_slot = None
        self.draft.available_slots = [s for s in self.draft.available_slots if s.id != slot.id]
        self.state_machine.transition(BookingTrigger.SLOT_TAKEN)

    async def confirm(self) -> OperationResult[Appointment]:
        """Claim the chosen slot and persist the appointment."""
        if self.current_step != BookingStep.REVIEWING:
            return OperationResult.fail(InvalidTransitionError(
                f"Cannot confirm from '{self.current_step.value}'; review the booking first"
            ))

        missing = self._missing_selections()
        if missing:
            if self.draft.time_slot is None:
                self.state_machine.transition(BookingTrigger.SLOT_TAKEN)
            return OperationResult.fail(ValidationError(
                f"Booking is incomplete; choose a {', '.join(missing)} first"
            ))

        slot = self.draft.time_slot
        try:
            await self._slots.claim(slot.id)
        except (SlotUnavailableError, NotFoundError):
            logger.warning("Slot %s was taken before confirmation", slot.id)
            self._slot_lost(slot)
            return OperationResult.fail(SlotUnavailableError(
                "That time was just booked by someone else. Please pick another slot."
            ))

        appointment = self._build_appointment(slot)
        try:
            await self._appointments.create(appointment)
        except EmeraldError as e:
            logger.error("Appointment write failed, releasing slot %s: %s", slot.id, e)
            await self._slots.release(slot.id)
            return OperationResult.fail(e)

        self.state_machine.transition(BookingTrigger.BOOKING_CONFIRMED)
        logger.info(
            "Booked %s for %s on %s (%s)",
            appointment.service.name, appointment.customer_name,
            slot.formatted_date, appointment.formatted_price,
        )
        return OperationResult.ok(appointment, message="Your appointment has been booked.")
