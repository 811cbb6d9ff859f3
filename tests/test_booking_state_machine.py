"""Tests for the booking wizard step machine."""

import pytest

from emerald_details.booking.state_machine import (
    BookingDraft,
    BookingFlowStateMachine,
    BookingStep,
    BookingTrigger,
)
from emerald_details.errors import InvalidTransitionError
from tests.conftest import make_location, make_service, make_slot, make_vehicle


def _filled_draft() -> BookingDraft:
    service = make_service()
    slot = make_slot()
    return BookingDraft(
        service=service,
        vehicle=make_vehicle(),
        time_slot=slot,
        location=make_location(),
        available_services=[service],
        available_slots=[slot],
    )


def _advance_to(sm: BookingFlowStateMachine, step: BookingStep) -> None:
    while sm.current_step != step:
        sm.transition(BookingTrigger.NEXT)


class TestInitialStep:
    def test_starts_selecting_service(self, booking_flow):
        assert booking_flow.current_step == BookingStep.SELECTING_SERVICE
        assert booking_flow.step_index == 0

    def test_initial_history_has_one_entry(self, booking_flow):
        assert len(booking_flow.get_history()) == 1

    def test_not_terminal_at_start(self, booking_flow):
        assert not booking_flow.is_terminal()

    def test_cannot_advance_without_service(self, booking_flow):
        assert not booking_flow.can_advance()
        with pytest.raises(InvalidTransitionError, match="Cannot leave"):
            booking_flow.transition(BookingTrigger.NEXT)

    def test_back_from_first_step_rejected(self, booking_flow):
        with pytest.raises(InvalidTransitionError, match="Valid triggers"):
            booking_flow.transition(BookingTrigger.BACK)


class TestGuards:
    def test_service_must_come_from_active_list(self):
        draft = BookingDraft(service=make_service(), available_services=[make_service()])
        sm = BookingFlowStateMachine(draft)
        assert not sm.can_advance()

    def test_slot_must_come_from_available_list(self):
        draft = _filled_draft()
        draft.available_slots = [make_slot(index=1)]
        sm = BookingFlowStateMachine(draft)
        _advance_to(sm, BookingStep.SELECTING_DATE_TIME)
        with pytest.raises(InvalidTransitionError):
            sm.transition(BookingTrigger.NEXT)

    def test_missing_location_blocks_review(self):
        draft = _filled_draft()
        draft.location = None
        sm = BookingFlowStateMachine(draft)
        _advance_to(sm, BookingStep.SELECTING_LOCATION)
        assert not sm.can_advance()

    def test_review_always_can_advance(self):
        sm = BookingFlowStateMachine(_filled_draft())
        _advance_to(sm, BookingStep.REVIEWING)
        assert sm.can_advance()


class TestForwardAndBack:
    def test_full_path_to_confirmed(self):
        sm = BookingFlowStateMachine(_filled_draft())
        _advance_to(sm, BookingStep.REVIEWING)
        assert sm.step_index == 4
        sm.transition(BookingTrigger.BOOKING_CONFIRMED)
        assert sm.is_terminal()
        assert sm.get_step_trace() == [
            "selecting_service", "selecting_vehicle", "selecting_date_time",
            "selecting_location", "reviewing", "confirmed",
        ]

    def test_back_steps_one_at_a_time(self):
        sm = BookingFlowStateMachine(_filled_draft())
        _advance_to(sm, BookingStep.REVIEWING)
        assert sm.transition(BookingTrigger.BACK) == BookingStep.SELECTING_LOCATION
        assert sm.transition(BookingTrigger.BACK) == BookingStep.SELECTING_DATE_TIME

    def test_back_keeps_selections(self):
        draft = _filled_draft()
        sm = BookingFlowStateMachine(draft)
        sm.transition(BookingTrigger.NEXT)
        sm.transition(BookingTrigger.BACK)
        assert draft.service is not None

    def test_slot_taken_returns_to_date_time(self):
        sm = BookingFlowStateMachine(_filled_draft())
        _advance_to(sm, BookingStep.REVIEWING)
        assert sm.transition(BookingTrigger.SLOT_TAKEN) == BookingStep.SELECTING_DATE_TIME

    def test_confirmed_only_from_review(self):
        sm = BookingFlowStateMachine(_filled_draft())
        with pytest.raises(InvalidTransitionError):
            sm.transition(BookingTrigger.BOOKING_CONFIRMED)


class TestReset:
    @pytest.mark.parametrize("step", [
        BookingStep.SELECTING_VEHICLE,
        BookingStep.SELECTING_DATE_TIME,
        BookingStep.SELECTING_LOCATION,
        BookingStep.REVIEWING,
    ])
    def test_reset_from_any_step(self, step):
        sm = BookingFlowStateMachine(_filled_draft())
        _advance_to(sm, step)
        assert sm.transition(BookingTrigger.RESET) == BookingStep.SELECTING_SERVICE

    def test_reset_after_confirmation(self):
        sm = BookingFlowStateMachine(_filled_draft())
        _advance_to(sm, BookingStep.REVIEWING)
        sm.transition(BookingTrigger.BOOKING_CONFIRMED)
        sm.transition(BookingTrigger.RESET)
        assert sm.current_step == BookingStep.SELECTING_SERVICE

    def test_draft_clear(self):
        draft = _filled_draft()
        draft.clear()
        assert draft.service is None
        assert draft.available_slots == []
