"""
Employee and admin actions on booked appointments.

Thin result-returning wrappers over ``AppointmentRepository`` so screens can
show a message instead of handling exceptions. Every rule lives in the
status machine and the repository.
"""

import logging
from typing import Optional

from emerald_details.errors import EmeraldError, ValidationError
from emerald_details.repositories.appointments import AppointmentRepository
from emerald_details.repositories.time_slots import TimeSlotRepository
from emerald_details.results import OperationResult
from emerald_details.schemas.appointment_schema import Appointment, AppointmentStatus
from emerald_details.schemas.user_schema import User, UserRole

logger = logging.getLogger(__name__)


class AppointmentLifecycle:

    def __init__(
        self,
        appointments: AppointmentRepository,
        slots: Optional[TimeSlotRepository] = None,
    ) -> None:
        self._appointments = appointments
        self._slots = slots

    async def assign_employee(
        self, appointment_id: str, employee: User
    ) -> OperationResult[Appointment]:
        """Assign (or reassign) an employee. Pending appointments become confirmed."""
        if employee.role != UserRole.EMPLOYEE:
            return OperationResult.fail(
                ValidationError(f"{employee.name} is not an employee")
            )
        try:
            appointment = await self._appointments.assign_employee(
                appointment_id, employee.auth_uid, employee.name
            )
        except EmeraldError as e:
            return OperationResult.fail(e)

        message = f"Assigned to {employee.name}"
        if self._slots is not None:
            # the appointment is already confirmed; a missing slot only loses the tag
            try:
                await self._slots.assign_employee(
                    appointment.time_slot.id, employee.auth_uid, employee.name
                )
            except EmeraldError as e:
                logger.warning(
                    "Appointment %s assigned but slot %s not tagged: %s",
                    appointment_id, appointment.time_slot.id, e,
                )
                message += " (time slot record not updated)"
        return OperationResult.ok(appointment, message=message)

    async def start_service(self, appointment_id: str) -> OperationResult[Appointment]:
        return await self._set_status(appointment_id, AppointmentStatus.IN_PROGRESS)

    async def complete(self, appointment_id: str) -> OperationResult[Appointment]:
        return await self._set_status(appointment_id, AppointmentStatus.COMPLETED)

    async def cancel(
        self, appointment_id: str, release_slot: Optional[bool] = None
    ) -> OperationResult[Appointment]:
        try:
            appointment = await self._appointments.cancel(appointment_id, release_slot)
        except EmeraldError as e:
            logger.warning("Cancel rejected for %s: %s", appointment_id, e)
            return OperationResult.fail(e)
        return OperationResult.ok(appointment, message="Appointment cancelled")

    async def _set_status(
        self, appointment_id: str, status: AppointmentStatus
    ) -> OperationResult[Appointment]:
        try:
            appointment = await self._appointments.update_status(appointment_id, status)
        except EmeraldError as e:
            logger.warning("Status change to %s rejected for %s: %s", status.value, appointment_id, e)
            return OperationResult.fail(e)
        return OperationResult.ok(appointment)
