"""
Appointment status lifecycle.

    pending -> confirmed (employee assigned) -> in_progress -> completed
    pending | confirmed -> cancelled

Completed and cancelled are terminal. Reassigning the employee of a
confirmed appointment keeps it confirmed.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from emerald_details.errors import InvalidTransitionError
from emerald_details.schemas.appointment_schema import AppointmentStatus

logger = logging.getLogger(__name__)


class AppointmentTrigger(str, Enum):
    """Events that move an appointment between statuses."""
    ASSIGN_EMPLOYEE = "assign_employee"
    START_SERVICE = "start_service"
    COMPLETE = "complete"
    CANCEL = "cancel"


@dataclass(frozen=True)
class StatusTransition:
    from_status: AppointmentStatus
    to_status: AppointmentStatus
    trigger: AppointmentTrigger


TRANSITIONS: list[StatusTransition] = [
    StatusTransition(AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED,
                     AppointmentTrigger.ASSIGN_EMPLOYEE),
    StatusTransition(AppointmentStatus.CONFIRMED, AppointmentStatus.CONFIRMED,
                     AppointmentTrigger.ASSIGN_EMPLOYEE),
    StatusTransition(AppointmentStatus.CONFIRMED, AppointmentStatus.IN_PROGRESS,
                     AppointmentTrigger.START_SERVICE),
    StatusTransition(AppointmentStatus.IN_PROGRESS, AppointmentStatus.COMPLETED,
                     AppointmentTrigger.COMPLETE),
    StatusTransition(AppointmentStatus.PENDING, AppointmentStatus.CANCELLED,
                     AppointmentTrigger.CANCEL),
    StatusTransition(AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED,
                     AppointmentTrigger.CANCEL),
]

TERMINAL_STATUSES = frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED})


def valid_triggers(current: AppointmentStatus) -> list[AppointmentTrigger]:
    """Return all triggers valid from ``current``."""
    return [t.trigger for t in TRANSITIONS if t.from_status == current]


def apply_trigger(current: AppointmentStatus, trigger: AppointmentTrigger) -> AppointmentStatus:
    """
    Resolve the status reached by firing ``trigger`` from ``current``.

    Raises:
        InvalidTransitionError: If no transition exists.
    """
    current = AppointmentStatus(current)
    for t in TRANSITIONS:
        if t.from_status == current and t.trigger == trigger:
            logger.debug(
                "Appointment status: %s -> %s (trigger: %s)",
                current.value, t.to_status.value, trigger.value,
            )
            return t.to_status
    valid = [t.value for t in valid_triggers(current)]
    raise InvalidTransitionError(
        f"No valid transition from '{current.value}' "
        f"with trigger '{trigger.value}'. Valid triggers: {valid}"
    )


def trigger_for(current: AppointmentStatus, target: AppointmentStatus) -> AppointmentTrigger:
    """Find the trigger that moves ``current`` to ``target``."""
    current, target = AppointmentStatus(current), AppointmentStatus(target)
    for t in TRANSITIONS:
        if t.from_status == current and t.to_status == target:
            return t.trigger
    raise InvalidTransitionError(
        f"Cannot move appointment from '{current.value}' to '{target.value}'"
    )


def is_terminal(status: AppointmentStatus) -> bool:
    return AppointmentStatus(status) in TERMINAL_STATUSES
