"""
Finite state machine for the five-step booking wizard.

Steps run linearly: service -> vehicle -> date/time -> location -> review.
Every forward move is guarded by the step's "can advance" predicate over
the accumulated draft; BACK returns to the previous step; RESET abandons
the flow (nothing is persisted for a draft).

Usage:
    draft = BookingDraft()
    sm = BookingFlowStateMachine(draft)
    draft.service = service
    sm.transition(BookingTrigger.NEXT)
    assert sm.current_step == BookingStep.SELECTING_VEHICLE
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Callable, Optional

from emerald_details.errors import InvalidTransitionError
from emerald_details.schemas.location_schema import Location
from emerald_details.schemas.service_schema import ServicePackage
from emerald_details.schemas.slot_schema import TimeSlot
from emerald_details.schemas.vehicle_schema import Vehicle

logger = logging.getLogger(__name__)


class BookingStep(str, Enum):
    """All steps in a booking session."""
    SELECTING_SERVICE = "selecting_service"
    SELECTING_VEHICLE = "selecting_vehicle"
    SELECTING_DATE_TIME = "selecting_date_time"
    SELECTING_LOCATION = "selecting_location"
    REVIEWING = "reviewing"
    CONFIRMED = "confirmed"


class BookingTrigger(str, Enum):
    """Events that cause step transitions."""
    NEXT = "next"
    BACK = "back"
    BOOKING_CONFIRMED = "booking_confirmed"
    SLOT_TAKEN = "slot_taken"
    RESET = "reset"


@dataclass
class BookingDraft:
    """
    Selections accumulated by the wizard.

    Lives only for the duration of one booking session; abandoning the
    flow discards it.
    """
    service: Optional[ServicePackage] = None
    vehicle: Optional[Vehicle] = None
    selected_date: Optional[date] = None
    time_slot: Optional[TimeSlot] = None
    location: Optional[Location] = None
    notes: str = ""
    available_services: list[ServicePackage] = field(default_factory=list)
    available_slots: list[TimeSlot] = field(default_factory=list)

    def clear(self) -> None:
        self.service = None
        self.vehicle = None
        self.selected_date = None
        self.time_slot = None
        self.location = None
        self.notes = ""
        self.available_services = []
        self.available_slots = []


Guard = Callable[[BookingDraft], bool]


def _service_chosen(draft: BookingDraft) -> bool:
    return draft.service is not None and any(
        s.id == draft.service.id for s in draft.available_services
    )


def _vehicle_chosen(draft: BookingDraft) -> bool:
    return draft.vehicle is not None


def _slot_chosen(draft: BookingDraft) -> bool:
    return draft.time_slot is not None and any(
        s.id == draft.time_slot.id for s in draft.available_slots
    )


def _location_resolved(draft: BookingDraft) -> bool:
    return draft.location is not None


def _always(draft: BookingDraft) -> bool:
    return True


@dataclass
class Transition:
    """A single valid step transition."""
    from_step: BookingStep
    to_step: BookingStep
    trigger: BookingTrigger
    guard: Optional[Guard] = None


@dataclass
class StepEntry:
    """Recorded history entry for a step visit."""
    step: BookingStep
    entered_at: datetime
    trigger: Optional[BookingTrigger] = None


class BookingFlowStateMachine:
    """
    Deterministic step controller for one booking session.

    Every transition must be explicitly defined. Forward transitions are
    rejected while the current step's predicate is unsatisfied, with an
    error listing what is allowed from here.
    """

    TRANSITIONS: list[Transition] = [
        # --- Forward ---
        Transition(BookingStep.SELECTING_SERVICE, BookingStep.SELECTING_VEHICLE,
                   BookingTrigger.NEXT, _service_chosen),
        Transition(BookingStep.SELECTING_VEHICLE, BookingStep.SELECTING_DATE_TIME,
                   BookingTrigger.NEXT, _vehicle_chosen),
        Transition(BookingStep.SELECTING_DATE_TIME, BookingStep.SELECTING_LOCATION,
                   BookingTrigger.NEXT, _slot_chosen),
        Transition(BookingStep.SELECTING_LOCATION, BookingStep.REVIEWING,
                   BookingTrigger.NEXT, _location_resolved),

        # --- Back ---
        Transition(BookingStep.SELECTING_VEHICLE, BookingStep.SELECTING_SERVICE,
                   BookingTrigger.BACK),
        Transition(BookingStep.SELECTING_DATE_TIME, BookingStep.SELECTING_VEHICLE,
                   BookingTrigger.BACK),
        Transition(BookingStep.SELECTING_LOCATION, BookingStep.SELECTING_DATE_TIME,
                   BookingTrigger.BACK),
        Transition(BookingStep.REVIEWING, BookingStep.SELECTING_LOCATION,
                   BookingTrigger.BACK),

        # --- Confirmation ---
        Transition(BookingStep.REVIEWING, BookingStep.CONFIRMED,
                   BookingTrigger.BOOKING_CONFIRMED, _always),
        Transition(BookingStep.REVIEWING, BookingStep.SELECTING_DATE_TIME,
                   BookingTrigger.SLOT_TAKEN),

        # --- Abandon / start over ---
        Transition(BookingStep.SELECTING_SERVICE, BookingStep.SELECTING_SERVICE,
                   BookingTrigger.RESET),
        Transition(BookingStep.SELECTING_VEHICLE, BookingStep.SELECTING_SERVICE,
                   BookingTrigger.RESET),
        Transition(BookingStep.SELECTING_DATE_TIME, BookingStep.SELECTING_SERVICE,
                   BookingTrigger.RESET),
        Transition(BookingStep.SELECTING_LOCATION, BookingStep.SELECTING_SERVICE,
                   BookingTrigger.RESET),
        Transition(BookingStep.REVIEWING, BookingStep.SELECTING_SERVICE,
                   BookingTrigger.RESET),
        Transition(BookingStep.CONFIRMED, BookingStep.SELECTING_SERVICE,
                   BookingTrigger.RESET),
    ]

    def __init__(self, draft: Optional[BookingDraft] = None) -> None:
        self.draft = draft if draft is not None else BookingDraft()
        self._current_step = BookingStep.SELECTING_SERVICE
        self._history: list[StepEntry] = [
            StepEntry(step=BookingStep.SELECTING_SERVICE, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def current_step(self) -> BookingStep:
        return self._current_step

    @property
    def step_index(self) -> int:
        """Zero-based position for progress display (0..4, 5 once confirmed)."""
        return list(BookingStep).index(self._current_step)

    def can_advance(self) -> bool:
        """Whether the current step's predicate is satisfied."""
        for t in self.TRANSITIONS:
            if t.from_step == self._current_step and t.trigger in (
                BookingTrigger.NEXT, BookingTrigger.BOOKING_CONFIRMED
            ):
                return t.guard is None or t.guard(self.draft)
        return False

    def transition(self, trigger: BookingTrigger) -> BookingStep:
        """
        Execute a step transition.

        Args:
            trigger: The event triggering the transition.

        Returns:
            The new booking step.

        Raises:
            InvalidTransitionError: If no valid transition exists or its guard fails.
        """
        blocked = False
        for t in self.TRANSITIONS:
            if t.from_step == self._current_step and t.trigger == trigger:
                if t.guard is not None and not t.guard(self.draft):
                    blocked = True
                    continue

                old_step = self._current_step
                self._current_step = t.to_step
                self._history.append(StepEntry(
                    step=self._current_step,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))
                logger.debug(
                    "Booking step: %s -> %s (trigger: %s)",
                    old_step.value, self._current_step.value, trigger.value,
                )
                return self._current_step

        if blocked:
            raise InvalidTransitionError(
                f"Cannot leave '{self._current_step.value}' yet: "
                "the step's selection is incomplete"
            )
        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_step.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[BookingTrigger]:
        """Return all triggers defined from the current step."""
        return [t.trigger for t in self.TRANSITIONS if t.from_step == self._current_step]

    def get_history(self) -> list[StepEntry]:
        """Return the full step transition history."""
        return list(self._history)

    def get_step_trace(self) -> list[str]:
        """Return ordered list of step names visited."""
        return [entry.step.value for entry in self._history]

    def is_terminal(self) -> bool:
        return self._current_step == BookingStep.CONFIRMED
