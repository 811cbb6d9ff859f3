"""Appointment repository: lifecycle writes, filtered queries and revenue."""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from emerald_details.booking.appointment_status import (
    AppointmentTrigger,
    apply_trigger,
    trigger_for,
)
from emerald_details.config import settings
from emerald_details.errors import ValidationError
from emerald_details.repositories.base import Repository
from emerald_details.repositories.time_slots import TimeSlotRepository
from emerald_details.schemas.appointment_schema import (
    Appointment,
    AppointmentStatus,
    PaymentStatus,
)
from emerald_details.store.document_store import FieldFilter
from emerald_details.utils import as_local, day_bounds, local_now, start_of_month, start_of_week, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RevenueStats:
    """Paid revenue totals for the admin dashboard."""
    total: float
    this_month: float
    this_week: float


class AppointmentRepository(Repository[Appointment]):
    collection = "appointments"
    model = Appointment

    def __init__(self, store, slots: Optional[TimeSlotRepository] = None) -> None:
        super().__init__(store)
        self._slots = slots

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    async def all(self) -> list[Appointment]:
        return await self.find(order_by="created_at", descending=True)

    async def for_customer(self, customer_id: str) -> list[Appointment]:
        return await self.find(
            [FieldFilter("customer_id", "==", customer_id)],
            order_by="created_at", descending=True,
        )

    async def for_employee(self, employee_id: str) -> list[Appointment]:
        return await self.find(
            [FieldFilter("employee_id", "==", employee_id)],
            order_by="created_at", descending=True,
        )

    async def for_day(self, day: date, employee_id: Optional[str] = None) -> list[Appointment]:
        """Appointments on ``day`` sorted by slot start, optionally for one employee."""
        start, end = day_bounds(day)
        filters = [
            FieldFilter("time_slot.date", ">=", start),
            FieldFilter("time_slot.date", "<", end),
        ]
        if employee_id:
            filters.append(FieldFilter("employee_id", "==", employee_id))
        return await self.find(filters, order_by="time_slot.start_time")

    async def in_date_range(self, start: date, end: date) -> list[Appointment]:
        range_start, _ = day_bounds(start)
        _, range_end = day_bounds(end)
        return await self.find(
            [
                FieldFilter("time_slot.date", ">=", range_start),
                FieldFilter("time_slot.date", "<", range_end),
            ],
            order_by="time_slot.start_time",
        )

    async def by_payment_status(self, status: PaymentStatus) -> list[Appointment]:
        return await self.find([FieldFilter("payment_status", "==", PaymentStatus(status))])

    # ------------------------------------------------------------------ #
    # Lifecycle writes
    # ------------------------------------------------------------------ #

    async def _transition(
        self, appointment: Appointment, trigger: AppointmentTrigger, extra: Optional[dict] = None
    ) -> Appointment:
        new_status = apply_trigger(appointment.status, trigger)
        now = utcnow()
        fields = {"status": new_status, "updated_at": now, **(extra or {})}
        await self.update_fields(appointment.id, fields)
        updated = appointment.model_copy(update=fields)
        logger.info(
            "Appointment %s: %s -> %s",
            appointment.id, appointment.status.value, new_status.value,
        )
        return updated

    async def update_status(self, appointment_id: str, status: AppointmentStatus) -> Appointment:
        """Move an appointment to ``status`` if the lifecycle allows it."""
        appointment = await self.require(appointment_id)
        trigger = trigger_for(appointment.status, status)
        if trigger == AppointmentTrigger.ASSIGN_EMPLOYEE and not appointment.employee_id:
            raise ValidationError("Assign an employee to confirm this appointment")
        if trigger == AppointmentTrigger.CANCEL:
            return await self.cancel(appointment_id)
        return await self._transition(appointment, trigger)

    async def assign_employee(
        self, appointment_id: str, employee_id: str, employee_name: str
    ) -> Appointment:
        appointment = await self.require(appointment_id)
        return await self._transition(
            appointment,
            AppointmentTrigger.ASSIGN_EMPLOYEE,
            {"employee_id": employee_id, "employee_name": employee_name},
        )

    async def cancel(self, appointment_id: str, release_slot: Optional[bool] = None) -> Appointment:
        """Cancel a pending or confirmed appointment.

        The slot stays unavailable unless ``release_slot`` (or the
        ``RELEASE_SLOT_ON_CANCEL`` setting) asks for it to be released.
        """
        appointment = await self.require(appointment_id)
        updated = await self._transition(appointment, AppointmentTrigger.CANCEL)
        if release_slot is None:
            release_slot = settings.scheduling.release_slot_on_cancel
        if release_slot and self._slots is not None:
            await self._slots.release(appointment.time_slot.id)
        return updated

    async def update_payment_status(
        self,
        appointment_id: str,
        status: PaymentStatus,
        payment_intent_id: Optional[str] = None,
    ) -> None:
        fields: dict = {"payment_status": PaymentStatus(status), "updated_at": utcnow()}
        if payment_intent_id is not None:
            fields["payment_intent_id"] = payment_intent_id
        await self.update_fields(appointment_id, fields)
        logger.info("Appointment %s payment -> %s", appointment_id, PaymentStatus(status).value)

    # ------------------------------------------------------------------ #
    # Admin statistics
    # ------------------------------------------------------------------ #

    async def revenue_stats(self, now: Optional[datetime] = None) -> RevenueStats:
        """Sum ``total_price`` of paid appointments overall, this month and this week.

        Full scan of paid appointments with client-side date filtering;
        adequate for a single small business.
        """
        now = as_local(now) if now is not None else local_now()
        paid = await self.by_payment_status(PaymentStatus.PAID)
        month_start = start_of_month(now)
        week_start = start_of_week(now)
        return RevenueStats(
            total=sum(a.total_price for a in paid),
            this_month=sum(a.total_price for a in paid if a.created_at >= month_start),
            this_week=sum(a.total_price for a in paid if a.created_at >= week_start),
        )
